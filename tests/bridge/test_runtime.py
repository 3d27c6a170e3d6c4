"""
Tests for the ctypes side of the initialization bridge.

The native library is replaced by a fake loader, so these tests never need
a compiled toolkit.
"""

import ctypes
import shutil
import subprocess
from unittest.mock import MagicMock

import pytest

from pinbridge.bridge import bridge_include_dir, bridge_sources
from pinbridge.bridge.runtime import (
    ENTRY_POINT,
    ArgumentVector,
    InitializationBridge,
    clear_initialization_state,
    current_token,
    require_initialized,
)
from pinbridge.core.exceptions import (
    AlreadyInitializedError,
    BridgeError,
    BridgeLoadError,
    InitializationError,
)


@pytest.fixture(autouse=True)
def reset_initialization():
    clear_initialization_state()
    yield
    clear_initialization_state()


def _fake_loader(result=True, seen=None):
    """Loader returning a library whose entry point records argv."""

    def entry(argc, argv):
        if seen is not None:
            seen.append([ctypes.string_at(argv[i]) for i in range(argc)])
            seen.append(bool(argv[argc]))
        return result

    lib = MagicMock()
    getattr(lib, ENTRY_POINT).side_effect = entry
    return MagicMock(return_value=lib)


class TestArgumentVector:
    """Test owned argv buffers."""

    def test_null_terminated(self):
        vector = ArgumentVector(["tool", "-t", "tool.so"])

        assert vector.argc == 3
        assert ctypes.string_at(vector.argv[0]) == b"tool"
        assert ctypes.string_at(vector.argv[2]) == b"tool.so"
        assert not vector.argv[3]

    def test_values_and_bytes(self):
        vector = ArgumentVector(["tool", b"-v"])

        assert vector.values() == (b"tool", b"-v")

    def test_empty(self):
        vector = ArgumentVector([])

        assert vector.argc == 0
        assert not vector.argv[0]

    def test_release(self):
        with ArgumentVector(["tool"]) as vector:
            assert vector.argc == 1

        assert vector.argc == 0
        assert vector.argv is None

    def test_rejects_other_types(self):
        with pytest.raises(TypeError, match="str or bytes"):
            ArgumentVector(["tool", 3])


class TestInitializationBridge:
    """Test loading and calling the bridge."""

    def test_load_failure(self, tmp_path):
        loader = MagicMock(side_effect=OSError("cannot open shared object"))

        with pytest.raises(BridgeLoadError, match="cannot open shared object"):
            InitializationBridge(tmp_path / "libpinbridge.so", loader=loader)

    def test_missing_entry_point(self, tmp_path):
        loader = MagicMock(return_value=MagicMock(spec=[]))

        with pytest.raises(BridgeLoadError, match=ENTRY_POINT):
            InitializationBridge(tmp_path / "libpinbridge.so", loader=loader)

    def test_signature_declared(self, tmp_path):
        loader = _fake_loader()

        InitializationBridge(tmp_path / "libpinbridge.so", loader=loader)

        func = getattr(loader.return_value, ENTRY_POINT)
        assert func.restype is ctypes.c_bool
        assert func.argtypes[0] is ctypes.c_int

    @pytest.mark.parametrize("result", [True, False])
    def test_call_relays_result(self, tmp_path, result):
        bridge = InitializationBridge(tmp_path / "lib.so", loader=_fake_loader(result))

        with ArgumentVector(["tool"]) as vector:
            assert bridge.call(vector.argc, vector.argv) is result

    def test_call_does_not_guard(self, tmp_path):
        bridge = InitializationBridge(tmp_path / "lib.so", loader=_fake_loader())

        with ArgumentVector(["tool"]) as vector:
            assert bridge.call(vector.argc, vector.argv)
            assert bridge.call(vector.argc, vector.argv)
        assert current_token() is None


class TestInitialize:
    """Test the one-shot initialization guard."""

    def test_initialize_passes_arguments(self, tmp_path):
        seen = []
        bridge = InitializationBridge(
            tmp_path / "lib.so", loader=_fake_loader(seen=seen)
        )

        token = bridge.initialize(["mytool", "-t", "tool.so", "--", "/bin/ls"])

        assert seen[0] == [b"mytool", b"-t", b"tool.so", b"--", b"/bin/ls"]
        assert seen[1] is False
        assert token.args == ("mytool", "-t", "tool.so", "--", "/bin/ls")
        assert token.library == tmp_path / "lib.so"
        assert current_token() is token

    def test_second_initialize_rejected(self, tmp_path):
        bridge = InitializationBridge(tmp_path / "lib.so", loader=_fake_loader())
        bridge.initialize(["mytool"])

        with pytest.raises(AlreadyInitializedError):
            bridge.initialize(["mytool"])

    def test_failure_leaves_no_token(self, tmp_path):
        bridge = InitializationBridge(
            tmp_path / "lib.so", loader=_fake_loader(result=False)
        )

        with pytest.raises(InitializationError, match="initialization failed"):
            bridge.initialize(["mytool", "-bogus"])

        assert current_token() is None

    def test_require_initialized(self, tmp_path):
        bridge = InitializationBridge(tmp_path / "lib.so", loader=_fake_loader())
        token = bridge.initialize(["mytool"])

        assert require_initialized(token) is token

    def test_require_initialized_without_init(self):
        with pytest.raises(BridgeError, match="not initialized"):
            require_initialized(None)

    def test_stale_token_rejected(self, tmp_path):
        bridge = InitializationBridge(tmp_path / "lib.so", loader=_fake_loader())
        token = bridge.initialize(["mytool"])
        clear_initialization_state()

        with pytest.raises(BridgeError):
            require_initialized(token)


class TestNativeSources:
    """Test the packaged native sources."""

    def test_sources_present(self):
        names = [p.name for p in bridge_sources()]

        assert names == ["pinbridge.cpp"]

    def test_header_declares_entry_point(self):
        header = (bridge_include_dir() / "pinbridge.h").read_text()

        assert ENTRY_POINT in header
        assert 'extern "C"' in header

    def test_header_usable_from_c(self):
        header = (bridge_include_dir() / "pinbridge.h").read_text()
        c_branch = header.split("#else", 1)[1].split("#endif", 1)[0]

        assert "#include <stdbool.h>" in c_branch

    @pytest.mark.skipif(shutil.which("cc") is None, reason="no C compiler")
    def test_header_compiles_as_c(self, tmp_path):
        source = tmp_path / "consumer.c"
        source.write_text('#include "pinbridge.h"\n')

        result = subprocess.run(
            ["cc", "-std=c99", "-fsyntax-only", "-I", str(bridge_include_dir()),
             str(source)],
            capture_output=True,
            text=True,
        )

        assert result.returncode == 0, result.stderr

"""
Tests for build environment handling.
"""

import pytest

from pinbridge.core.environment import OUT_DIR_ENV, BuildEnvironment
from pinbridge.core.exceptions import ConfigurationError, FilesystemError


class TestBuildEnvironment:
    """Test BuildEnvironment."""

    def test_from_env(self, tmp_path):
        env = BuildEnvironment.from_env({OUT_DIR_ENV: str(tmp_path / "out")})

        assert env.out_dir == tmp_path / "out"

    def test_reads_os_environ_by_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OUT_DIR", str(tmp_path))

        assert BuildEnvironment.from_env().out_dir == tmp_path

    @pytest.mark.parametrize("environ", [{}, {"OUT_DIR": ""}, {"OUT_DIR": "   "}])
    def test_missing_out_dir(self, environ):
        with pytest.raises(ConfigurationError, match="OUT_DIR is not set"):
            BuildEnvironment.from_env(environ)

    def test_ensure_creates_directory(self, tmp_path):
        env = BuildEnvironment(out_dir=tmp_path / "a" / "b")

        assert env.ensure() == tmp_path / "a" / "b"
        assert (tmp_path / "a" / "b").is_dir()

    def test_ensure_fails_on_file(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")

        with pytest.raises(FilesystemError):
            BuildEnvironment(out_dir=blocker / "out").ensure()

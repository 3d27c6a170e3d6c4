"""
Pytest configuration and shared fixtures for pinbridge tests.
"""

import io
import tarfile
from pathlib import Path
from typing import Callable, Iterable, Optional

import pytest

from pinbridge.core.platform import PlatformInfo

PACKAGE_NAME = "pin-external-3.31-98869-gfa6f126a8-gcc-linux"

# Directories of the toolkit layout for x86_64-unknown-linux-gnu.
LAYOUT_DIRS = [
    "source/include/pin",
    "source/include/pin/gen",
    "extras/components/include",
    "extras/xed-intel64/include/xed",
    "extras/cxx/include",
    "extras/crt/include",
    "extras/crt/include/arch-x86_64",
    "extras/crt/include/kernel/uapi",
    "extras/crt/include/kernel/uapi/asm-x86",
    "intel64/runtime/pincrt",
    "intel64/lib",
    "extras/xed-intel64/lib",
]

LAYOUT_FILES = {
    "source/include/pin/pin.H": (
        b"#pragma once\nbool PIN_Init(int argc, char *argv[]);\n"
    ),
    "intel64/runtime/pincrt/crtbeginS.o": b"\x7fELF-begin",
    "intel64/runtime/pincrt/crtendS.o": b"\x7fELF-end",
    "README": b"Pin toolkit\n",
}


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access and a compiler",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Archive Builders
# ============================================================================


def _add_dir(tar: tarfile.TarFile, name: str) -> None:
    info = tarfile.TarInfo(name)
    info.type = tarfile.DIRTYPE
    info.mode = 0o755
    info.mtime = 1700000000
    tar.addfile(info)


def _add_file(tar: tarfile.TarFile, name: str, data: bytes, mode: int = 0o644) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    info.mode = mode
    info.mtime = 1700000000
    tar.addfile(info, io.BytesIO(data))


def toolkit_archive_bytes(
    package_names: Iterable[str] = (PACKAGE_NAME,),
    layout: bool = True,
    extra_files: Optional[dict] = None,
) -> bytes:
    """Build a gzip-compressed tar holding toolkit package directories in memory."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for package in package_names:
            _add_dir(tar, package)
            if layout:
                for rel in LAYOUT_DIRS:
                    parts = rel.split("/")
                    for i in range(1, len(parts) + 1):
                        sub = "/".join(parts[:i])
                        if f"{package}/{sub}" not in tar.getnames():
                            _add_dir(tar, f"{package}/{sub}")
                for rel, data in LAYOUT_FILES.items():
                    _add_file(tar, f"{package}/{rel}", data)
        for name, data in (extra_files or {}).items():
            _add_file(tar, name, data)
    return buffer.getvalue()


@pytest.fixture
def package_name() -> str:
    """Name of the top-level directory in the pinned toolkit archive."""
    return PACKAGE_NAME


@pytest.fixture
def archive_bytes() -> Callable[..., bytes]:
    """Factory building toolkit archive content in memory."""
    return toolkit_archive_bytes


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a toolkit archive to disk and returning its path."""

    def _make(name: str = "pin.tar.gz", **kwargs) -> Path:
        path = tmp_path / "archives" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(toolkit_archive_bytes(**kwargs))
        return path

    return _make


@pytest.fixture
def toolkit_root(tmp_path: Path) -> Path:
    """An extracted toolkit package with the complete layout on disk."""
    root = tmp_path / "toolkit" / PACKAGE_NAME
    for rel in LAYOUT_DIRS:
        (root / rel).mkdir(parents=True, exist_ok=True)
    for rel, data in LAYOUT_FILES.items():
        (root / rel).write_bytes(data)
    return root


@pytest.fixture
def linux_x86_64() -> PlatformInfo:
    """Host platform matching the supported target."""
    return PlatformInfo(os="linux", arch="x86_64")


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    """Build-output directory (not created yet)."""
    return tmp_path / "out"

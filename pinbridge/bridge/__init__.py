"""
Native initialization bridge: sources and runtime loader.
"""

from pathlib import Path
from typing import List

from .runtime import (
    ArgumentVector,
    InitializationBridge,
    InitToken,
    require_initialized,
)

NATIVE_DIR = Path(__file__).parent / "native"


def bridge_include_dir() -> Path:
    return NATIVE_DIR / "include"


def bridge_sources() -> List[Path]:
    return sorted(NATIVE_DIR.glob("*.cpp"))


__all__ = [
    "ArgumentVector",
    "InitializationBridge",
    "InitToken",
    "require_initialized",
    "bridge_include_dir",
    "bridge_sources",
    "NATIVE_DIR",
]

"""
Toolkit directory layout.

Every path is a fixed function of the package root and the target triple;
none of them is configurable on its own.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List

from pinbridge.core.platform import TargetTriple


@dataclass(frozen=True)
class ToolkitLayout:
    """Named subpaths of an extracted toolkit package."""

    root: Path
    include_pin: Path
    include_pin_gen: Path
    include_components: Path
    include_xed: Path
    include_cxx: Path
    include_crt: Path
    include_crt_arch: Path
    include_crt_kernel_uapi: Path
    include_crt_kernel_uapi_asm: Path
    pincrt_runtime: Path
    crt_begin: Path
    crt_end: Path
    pin_lib: Path
    xed_lib: Path

    @classmethod
    def from_root(cls, root: Path, target: TargetTriple) -> "ToolkitLayout":
        root = Path(root)
        include_pin = root / "source" / "include" / "pin"
        xed_root = root / "extras" / f"xed-{target.pin_arch}"
        include_crt = root / "extras" / "crt" / "include"
        kernel_uapi = include_crt / "kernel" / "uapi"
        pincrt_runtime = root / target.pin_arch / "runtime" / "pincrt"

        return cls(
            root=root,
            include_pin=include_pin,
            include_pin_gen=include_pin / "gen",
            include_components=root / "extras" / "components" / "include",
            include_xed=xed_root / "include" / "xed",
            include_cxx=root / "extras" / "cxx" / "include",
            include_crt=include_crt,
            include_crt_arch=include_crt / f"arch-{target.crt_arch}",
            include_crt_kernel_uapi=kernel_uapi,
            include_crt_kernel_uapi_asm=kernel_uapi / f"asm-{target.asm_arch}",
            pincrt_runtime=pincrt_runtime,
            crt_begin=pincrt_runtime / "crtbeginS.o",
            crt_end=pincrt_runtime / "crtendS.o",
            pin_lib=root / target.pin_arch / "lib",
            xed_lib=xed_root / "lib",
        )

    def include_dirs(self) -> List[Path]:
        """
        Include directories in search order.

        Toolkit public headers come before generated headers, which come
        before the bundled extras. Reordering breaks header resolution.
        """
        return [
            self.include_pin,
            self.include_pin_gen,
            self.include_components,
            self.include_xed,
            self.include_cxx,
            self.include_crt,
            self.include_crt_arch,
            self.include_crt_kernel_uapi,
            self.include_crt_kernel_uapi_asm,
        ]

    def library_dirs(self) -> List[Path]:
        return [self.pincrt_runtime, self.pin_lib, self.xed_lib]

    def missing(self) -> List[Path]:
        """Layout directories that do not exist on disk."""
        return [p for p in self.include_dirs() + self.library_dirs() if not p.is_dir()]

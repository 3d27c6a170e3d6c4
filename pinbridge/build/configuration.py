"""
Compiler and linker configuration derived from the toolkit layout.

This mirrors the toolkit's documented build recipe for tools: the toolkit's
own CRT and C++ runtime replace the host ones, so exceptions and RTTI are
off and the host standard library is not linked.

Example:
    ```python
    layout = ToolkitLayout.from_root(package_dir, target)
    config = configure_build(layout, target)
    print(config.compile_args())
    ```
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from pinbridge.core.platform import TargetTriple
from pinbridge.toolkit.layout import ToolkitLayout

Define = Tuple[str, Optional[str]]

COMPILE_FLAGS = [
    "-funwind-tables",
    "-fasynchronous-unwind-tables",
    "-fomit-frame-pointer",
    "-fno-strict-aliasing",
    "-fno-exceptions",
    "-fno-rtti",
    "-fPIC",
    "-faligned-new",
    "-std=c++20",
    "-Wno-unused-parameter",
]

RUNTIME_LIBRARIES = ["c-dynamic", "m-dynamic", "stlport-dynamic"]


@dataclass
class BuildConfiguration:
    """
    Ordered compiler/linker configuration.

    Attributes:
        include_dirs: Include directories in search order
        defines: Preprocessor defines as (name, value) pairs, value may be None
        compile_flags: Advisory compile flags
        link_flags: Advisory link and library-search flags
    """

    include_dirs: List[Path] = field(default_factory=list)
    defines: List[Define] = field(default_factory=list)
    compile_flags: List[str] = field(default_factory=list)
    link_flags: List[str] = field(default_factory=list)

    def include_args(self) -> List[str]:
        return [f"-I{path}" for path in self.include_dirs]

    def define_args(self) -> List[str]:
        args = []
        for name, value in self.defines:
            if value is None:
                args.append(f"-D{name}")
            else:
                args.append(f"-D{name}={value}")
        return args

    def compile_args(self, flags: Optional[Iterable[str]] = None) -> List[str]:
        """
        Full argument list for compiling one translation unit.

        Args:
            flags: Compile flags to use instead of ``compile_flags``
                   (e.g. after dropping unsupported ones)
        """
        chosen = list(self.compile_flags if flags is None else flags)
        return self.include_args() + self.define_args() + chosen

    def to_dict(self) -> dict:
        return {
            "include_dirs": [str(p) for p in self.include_dirs],
            "defines": [[name, value] for name, value in self.defines],
            "compile_flags": list(self.compile_flags),
            "link_flags": list(self.link_flags),
        }


def toolkit_defines(target: TargetTriple) -> List[Define]:
    """Defines asserting the build runs under the toolkit's expected environment."""
    return [
        ("__PIN__", "1"),
        ("PIN_CRT", "1"),
        (f"TARGET_{target.define_arch}", None),
        (f"HOST_{target.define_arch}", None),
        (f"TARGET_{target.define_os}", None),
    ]


def configure_build(
    layout: ToolkitLayout,
    target: TargetTriple,
    bridge_include: Optional[Path] = None,
) -> BuildConfiguration:
    """
    Derive the build configuration for the bridge from a toolkit layout.

    Args:
        layout: Layout of the extracted toolkit
        target: Target triple the toolkit was released for
        bridge_include: Bridge header directory, searched after all toolkit headers

    Returns:
        BuildConfiguration with include dirs in the toolkit's documented order
    """
    include_dirs = layout.include_dirs()
    if bridge_include is not None:
        include_dirs.append(Path(bridge_include))

    link_flags = ["-nostdlib"]
    link_flags.extend(f"-l{lib}" for lib in RUNTIME_LIBRARIES)
    link_flags.append(f"-L{layout.pincrt_runtime}")

    return BuildConfiguration(
        include_dirs=include_dirs,
        defines=toolkit_defines(target),
        compile_flags=list(COMPILE_FLAGS),
        link_flags=link_flags,
    )

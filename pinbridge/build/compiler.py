"""
Native compiler driver for the bridge.

Drives the host C++ compiler and archiver with ``subprocess``. Compile flags
are advisory: each one is probed against the active compiler first and
dropped if the compiler rejects it, so minor toolchain differences do not
fail the build. Real compile or link failures do, with the compiler's own
diagnostics attached.
"""

import logging
import os
import shlex
import shutil
import subprocess
import tempfile
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from pinbridge.build.configuration import BuildConfiguration
from pinbridge.core.exceptions import CompilationError
from pinbridge.core.filesystem import ensure_directory, remove_file
from pinbridge.toolkit.layout import ToolkitLayout

logger = logging.getLogger(__name__)

CXX_CANDIDATES = ["c++", "g++", "clang++"]

FLAG_CHECK_SOURCE = "int main(void) { return 0; }\n"

TOOLKIT_LIBRARIES = ["pin", "xed"]


class ArtifactKind(Enum):
    """Kind of bridge artifact to produce."""

    STATIC = "static"  # lib<name>.a for a downstream link
    SHARED = "shared"  # lib<name>.so loadable with ctypes

    def filename(self, name: str) -> str:
        suffix = ".a" if self is ArtifactKind.STATIC else ".so"
        return f"lib{name}{suffix}"


def find_compiler(environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    Locate the C++ compiler.

    ``CXX`` wins when set (it may carry arguments, e.g. ``ccache g++``),
    otherwise the first of ``c++``, ``g++``, ``clang++`` found on PATH.

    Raises:
        CompilationError: If no compiler is found
    """
    if environ is None:
        environ = os.environ

    cxx = environ.get("CXX", "").strip()
    if cxx:
        return shlex.split(cxx)

    for candidate in CXX_CANDIDATES:
        found = shutil.which(candidate)
        if found:
            return [found]

    candidates = ", ".join(CXX_CANDIDATES)
    raise CompilationError(
        f"No C++ compiler found (set CXX or install one of {candidates})"
    )


def find_archiver(environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """Locate the static archiver (``AR`` or ``ar``)."""
    if environ is None:
        environ = os.environ

    ar = environ.get("AR", "").strip()
    if ar:
        return shlex.split(ar)

    found = shutil.which("ar")
    if not found:
        raise CompilationError("No archiver found (set AR or install binutils)")
    return [found]


class CompilerDriver:
    """Run the host compiler and archiver."""

    def __init__(
        self,
        cxx: Optional[Sequence[str]] = None,
        ar: Optional[Sequence[str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize the driver.

        Args:
            cxx: Compiler command (detected if None)
            ar: Archiver command (detected lazily if None)
            environ: Environment used for tool detection
        """
        self.environ = os.environ if environ is None else environ
        self.cxx = list(cxx) if cxx else find_compiler(self.environ)
        self._ar = list(ar) if ar else None
        self._flag_cache: Dict[str, bool] = {}

    @property
    def ar(self) -> List[str]:
        if self._ar is None:
            self._ar = find_archiver(self.environ)
        return self._ar

    def is_flag_supported(self, flag: str) -> bool:
        """
        Check whether the compiler accepts ``flag``.

        Compiles a trivial translation unit with ``-Werror`` and the flag.
        Results are cached per driver.
        """
        if flag in self._flag_cache:
            return self._flag_cache[flag]

        with tempfile.TemporaryDirectory(prefix="pinbridge_flag_") as tmpdir:
            source = Path(tmpdir) / "flag_check.cpp"
            source.write_text(FLAG_CHECK_SOURCE)
            obj = Path(tmpdir) / "flag_check.o"
            cmd = self.cxx + ["-Werror", flag, "-c", str(source), "-o", str(obj)]

            try:
                result = subprocess.run(cmd, capture_output=True, text=True)
                supported = result.returncode == 0
            except OSError as e:
                raise CompilationError(
                    f"Failed to run compiler: {e}", command=cmd
                ) from e

        if not supported:
            logger.debug(f"Compiler does not support {flag}, dropping it")
        self._flag_cache[flag] = supported
        return supported

    def supported_flags(self, flags: Sequence[str]) -> List[str]:
        """Filter ``flags`` down to those the compiler accepts, keeping order."""
        return [flag for flag in flags if self.is_flag_supported(flag)]

    def compile_object(
        self,
        source: Path,
        output: Path,
        config: BuildConfiguration,
        flags: Sequence[str],
    ) -> Path:
        cmd = self.cxx + config.compile_args(flags)
        cmd += ["-c", str(source), "-o", str(output)]
        self._run(cmd, f"Failed to compile {source.name}")
        return output

    def archive(self, objects: Sequence[Path], output: Path) -> Path:
        if output.exists():
            remove_file(output)
        cmd = self.ar + ["crs", str(output)] + [str(o) for o in objects]
        self._run(cmd, f"Failed to archive {output.name}")
        return output

    def link_shared(
        self,
        objects: Sequence[Path],
        output: Path,
        link_args: Sequence[str],
        begin_objects: Sequence[Path] = (),
        end_objects: Sequence[Path] = (),
    ) -> Path:
        cmd = (
            self.cxx
            + ["-shared", "-o", str(output)]
            + [str(o) for o in begin_objects]
            + [str(o) for o in objects]
            + list(link_args)
            + [str(o) for o in end_objects]
        )
        self._run(cmd, f"Failed to link {output.name}")
        return output

    def _run(self, cmd: List[str], message: str) -> None:
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise CompilationError(f"{message}: {e}", command=cmd) from e

        if result.returncode != 0:
            raise CompilationError(message, command=cmd, stderr=result.stderr)


def build_bridge(
    config: BuildConfiguration,
    layout: ToolkitLayout,
    sources: Sequence[Path],
    output_dir: Path,
    name: str = "pinbridge",
    kind: ArtifactKind = ArtifactKind.STATIC,
    driver: Optional[CompilerDriver] = None,
) -> Path:
    """
    Compile the bridge sources into a linkable artifact.

    Args:
        config: Build configuration derived from the toolkit layout
        layout: Toolkit layout (runtime objects and libraries for shared links)
        sources: C++ translation units
        output_dir: Directory for objects and the artifact
        name: Artifact base name
        kind: Static archive or shared library
        driver: Compiler driver (detected if None)

    Returns:
        Path to the artifact

    Raises:
        CompilationError: If compiling, archiving or linking fails
        FilesystemError: If the output directory or a stale artifact cannot be
            replaced
    """
    driver = driver or CompilerDriver()
    ensure_directory(output_dir)

    flags = driver.supported_flags(config.compile_flags)
    dropped = [f for f in config.compile_flags if f not in flags]
    if dropped:
        logger.info(f"Dropped unsupported flags: {' '.join(dropped)}")

    objects = []
    for source in sources:
        obj = output_dir / f"{Path(source).stem}.o"
        logger.info(f"Compiling {Path(source).name}")
        objects.append(driver.compile_object(Path(source), obj, config, flags))

    artifact = output_dir / kind.filename(name)
    if kind is ArtifactKind.STATIC:
        driver.archive(objects, artifact)
    else:
        link_args = [f"-L{layout.pin_lib}", f"-L{layout.xed_lib}"]
        link_args += [f"-l{lib}" for lib in TOOLKIT_LIBRARIES]
        link_args += config.link_flags
        driver.link_shared(
            objects,
            artifact,
            link_args,
            begin_objects=[layout.crt_begin],
            end_objects=[layout.crt_end],
        )

    logger.info(f"Built {artifact}")
    return artifact

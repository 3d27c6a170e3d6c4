"""
Build pipeline: download, verify, extract, locate, configure, compile.

Each stage runs once, strictly in order, and gates the next. A stage either
returns a value or fails with a ``PinBridgeError``; the first failure stops
the run and is recorded on the ``PipelineResult`` together with the name of
the stage. Nothing is retried and nothing is rolled back: a downloaded
archive stays in the output directory if extraction fails.

Example:
    ```python
    from pinbridge.pipeline import BuildPipeline

    result = BuildPipeline().run()
    result.raise_for_error()
    print(result.configuration.include_dirs)
    ```
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional

import requests

from pinbridge.bridge import bridge_include_dir, bridge_sources
from pinbridge.build.compiler import ArtifactKind, CompilerDriver, build_bridge
from pinbridge.build.configuration import BuildConfiguration, configure_build
from pinbridge.build.manifest import BuildManifest
from pinbridge.core.download import download_file
from pinbridge.core.environment import BuildEnvironment
from pinbridge.core.exceptions import IncompleteLayoutError, PinBridgeError
from pinbridge.core.filesystem import extract_archive, remove_file
from pinbridge.core.platform import PlatformInfo, check_host
from pinbridge.core.verification import (
    GpgSignatureVerifier,
    SignatureVerifier,
    UnverifiedSignature,
)
from pinbridge.toolkit.discovery import ExtractedPackage, find_package_dir
from pinbridge.toolkit.layout import ToolkitLayout
from pinbridge.toolkit.spec import ToolkitSpec

logger = logging.getLogger(__name__)

BUILD_SUBDIR = "pinbridge-build"

STAGE_ENVIRONMENT = "environment"
STAGE_DOWNLOAD = "download"
STAGE_VERIFY = "verify"
STAGE_EXTRACT = "extract"
STAGE_DISCOVER = "discover"
STAGE_CONFIGURE = "configure"
STAGE_COMPILE = "compile"
STAGE_MANIFEST = "manifest"


@dataclass
class StageResult:
    """Outcome of one pipeline stage."""

    stage: str
    value: Any = None
    error: Optional[PinBridgeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PipelineResult:
    """Outcome of a pipeline run."""

    stages: List[StageResult] = field(default_factory=list)
    out_dir: Optional[Path] = None
    package: Optional[ExtractedPackage] = None
    layout: Optional[ToolkitLayout] = None
    configuration: Optional[BuildConfiguration] = None
    artifact: Optional[Path] = None
    manifest_path: Optional[Path] = None

    @property
    def failed(self) -> Optional[StageResult]:
        for stage in self.stages:
            if not stage.ok:
                return stage
        return None

    @property
    def ok(self) -> bool:
        return self.failed is None

    @property
    def failed_stage(self) -> Optional[str]:
        failed = self.failed
        return failed.stage if failed else None

    @property
    def error(self) -> Optional[PinBridgeError]:
        failed = self.failed
        return failed.error if failed else None

    def diagnostic(self) -> str:
        failed = self.failed
        if failed is None:
            return "build succeeded"
        return f"{failed.stage} failed: {failed.error}"

    def raise_for_error(self) -> None:
        """Re-raise the error of the failed stage, if any."""
        if self.error is not None:
            raise self.error


class BuildPipeline:
    """Prepare the toolkit and compile the bridge for one build."""

    def __init__(
        self,
        spec: Optional[ToolkitSpec] = None,
        environ: Optional[Mapping[str, str]] = None,
        session: Optional[requests.Session] = None,
        verifier: Optional[SignatureVerifier] = None,
        driver: Optional[CompilerDriver] = None,
        platform_info: Optional[PlatformInfo] = None,
        kind: ArtifactKind = ArtifactKind.STATIC,
        compile: bool = True,
    ):
        """
        Initialize the pipeline.

        Args:
            spec: Toolkit release (pinned default if None)
            environ: Environment to read ``OUT_DIR`` from (``os.environ`` if None)
            session: requests session for downloads
            verifier: Signature verifier (GPG when a signature URL is set,
                      otherwise the unverified placeholder)
            driver: Compiler driver (detected at the compile stage if None)
            platform_info: Host platform (detected if None)
            kind: Bridge artifact kind
            compile: Stop after deriving the configuration when False
        """
        self.spec = spec or ToolkitSpec()
        self.environ = environ
        self.session = session
        if verifier is None:
            if self.spec.signature_url:
                verifier = GpgSignatureVerifier()
            else:
                verifier = UnverifiedSignature()
        self.verifier = verifier
        self.driver = driver
        self.platform_info = platform_info
        self.kind = kind
        self.compile = compile

    def run(self) -> PipelineResult:
        """
        Run all stages, stopping at the first failure.

        Returns:
            PipelineResult; check ``ok`` or call ``raise_for_error()``
        """
        result = PipelineResult()

        out_dir = self._stage(result, STAGE_ENVIRONMENT, self._prepare_environment)
        if out_dir is None:
            return result
        result.out_dir = out_dir

        archive = self._stage(result, STAGE_DOWNLOAD, self._download, out_dir)
        if archive is None:
            return result
        archive_path, signature_path = archive

        if not self._stage_ok(
            result, STAGE_VERIFY, self._verify, archive_path, signature_path
        ):
            return result

        root = self._stage(
            result, STAGE_EXTRACT, self._extract, out_dir, archive_path, signature_path
        )
        if root is None:
            return result

        package = self._stage(result, STAGE_DISCOVER, self._discover, root)
        if package is None:
            return result
        result.package = package

        configured = self._stage(result, STAGE_CONFIGURE, self._configure, package)
        if configured is None:
            return result
        result.layout, result.configuration = configured

        if not self.compile:
            return result

        artifact = self._stage(
            result,
            STAGE_COMPILE,
            self._compile,
            out_dir,
            result.layout,
            result.configuration,
        )
        if artifact is None:
            return result
        result.artifact = artifact

        result.manifest_path = self._stage(
            result, STAGE_MANIFEST, self._write_manifest, out_dir, result
        )
        if result.ok:
            logger.info(f"Bridge ready: {artifact}")
        return result

    def _stage(self, result: PipelineResult, name: str, func: Callable, *args) -> Any:
        logger.debug(f"Stage {name} starting")
        try:
            value = func(*args)
        except PinBridgeError as e:
            logger.error(f"Stage {name} failed: {e}")
            result.stages.append(StageResult(stage=name, error=e))
            return None

        result.stages.append(StageResult(stage=name, value=value))
        return value

    def _stage_ok(
        self, result: PipelineResult, name: str, func: Callable, *args
    ) -> bool:
        self._stage(result, name, func, *args)
        return result.stages[-1].ok

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _prepare_environment(self) -> Path:
        env = BuildEnvironment.from_env(self.environ)
        check_host(self.spec.target_triple, self.platform_info)
        return env.ensure()

    def _download(self, out_dir: Path):
        target = self.spec.download_target(out_dir)
        archive_path = download_file(
            target.url, target.destination, session=self.session
        )

        signature_path = None
        sig_target = self.spec.signature_target(out_dir)
        if sig_target is not None:
            signature_path = download_file(
                sig_target.url, sig_target.destination, session=self.session
            )

        return archive_path, signature_path

    def _verify(self, archive_path: Path, signature_path: Optional[Path]):
        return self.verifier.verify(archive_path, signature_path)

    def _extract(
        self, out_dir: Path, archive_path: Path, signature_path: Optional[Path]
    ) -> Path:
        root = self.spec.extraction_root(out_dir)
        extract_archive(archive_path, root)

        remove_file(archive_path)
        if signature_path is not None:
            remove_file(signature_path)
        return root

    def _discover(self, root: Path) -> ExtractedPackage:
        package_dir = find_package_dir(root, self.spec.package_pattern)
        return ExtractedPackage(extraction_root=root, package_dir=package_dir)

    def _configure(self, package: ExtractedPackage):
        target = self.spec.target_triple
        layout = ToolkitLayout.from_root(package.package_dir, target)

        missing = layout.missing()
        if missing:
            raise IncompleteLayoutError(package.package_dir, missing)

        config = configure_build(layout, target, bridge_include=bridge_include_dir())
        return layout, config

    def _compile(
        self, out_dir: Path, layout: ToolkitLayout, config: BuildConfiguration
    ) -> Path:
        driver = self.driver or CompilerDriver(environ=self.environ)
        return build_bridge(
            config,
            layout,
            bridge_sources(),
            out_dir / BUILD_SUBDIR,
            kind=self.kind,
            driver=driver,
        )

    def _write_manifest(self, out_dir: Path, result: PipelineResult) -> Path:
        manifest = BuildManifest(
            toolkit_version=self.spec.version,
            target=self.spec.target,
            package_dir=result.package.package_dir,
            artifact=result.artifact,
            configuration=result.configuration,
        )
        return manifest.write(out_dir)

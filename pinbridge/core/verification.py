"""
Signature verification hook for the downloaded toolkit archive.

Verification is not implemented for the pinned toolkit release: the
default verifier only records that the archive was not verified. A GPG
verifier is available for setups that configure a detached signature.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from .exceptions import VerificationError

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    """Outcome of a signature check."""

    verified: bool
    skipped: bool = False
    message: str = ""

    def __bool__(self):
        return self.verified

    def __str__(self):
        if self.skipped:
            return f"skipped: {self.message}"
        status = "verified" if self.verified else "failed"
        return f"{status}: {self.message}"


class SignatureVerifier(Protocol):
    """Interface for archive signature verification."""

    def verify(
        self, archive_path: Path, signature_path: Optional[Path] = None
    ) -> VerificationResult: ...


class UnverifiedSignature:
    """Placeholder verifier that accepts the archive without checking it."""

    def verify(
        self, archive_path: Path, signature_path: Optional[Path] = None
    ) -> VerificationResult:
        logger.warning(
            f"Signature verification is not implemented; "
            f"using {archive_path.name} unverified"
        )
        return VerificationResult(
            verified=False,
            skipped=True,
            message="signature verification not implemented",
        )


class GpgSignatureVerifier:
    """Verify a detached signature with the ``gpg`` command line tool."""

    def __init__(self, keyring_path: Optional[Path] = None, timeout: int = 30):
        self.keyring_path = keyring_path
        self.timeout = timeout

    def verify(
        self, archive_path: Path, signature_path: Optional[Path] = None
    ) -> VerificationResult:
        """
        Run ``gpg --verify`` on the archive.

        Raises:
            VerificationError: If the signature is missing, invalid or gpg fails
        """
        if signature_path is None or not signature_path.exists():
            raise VerificationError(f"Signature file not found: {signature_path}")

        cmd = ["gpg", "--verify"]
        if self.keyring_path:
            cmd.extend(["--keyring", str(self.keyring_path)])
        cmd.extend([str(signature_path), str(archive_path)])

        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=self.timeout
            )
        except FileNotFoundError as e:
            raise VerificationError("gpg is not installed") from e
        except subprocess.TimeoutExpired as e:
            raise VerificationError("gpg verification timed out") from e

        if result.returncode != 0:
            raise VerificationError(f"GPG verification failed: {result.stderr}")

        logger.info(f"Signature verified for {archive_path.name}")
        return VerificationResult(verified=True, message="GPG signature verified")

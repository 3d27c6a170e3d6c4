"""
Network download for the toolkit archive.

A single blocking GET streamed to disk. There is no retry, no backoff and
no resume: a failed fetch fails the build and needs a fresh invocation.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests
from requests.exceptions import RequestException

from .exceptions import FilesystemError, NetworkError

logger = logging.getLogger(__name__)

# The download server rejects default client identifications.
DEFAULT_HEADERS = {
    "User-Agent": "Wget/1.21.3",
    "Accept": "*/*",
}


@dataclass(frozen=True)
class DownloadTarget:
    """
    One download for one build invocation.

    Attributes:
        url: Source URL (version embedded)
        destination: File inside the build-output directory
    """

    url: str
    destination: Path


def download_file(
    url: str,
    destination: Path,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    chunk_size: int = 8192,
) -> Path:
    """
    Download ``url`` to ``destination``.

    The response status is checked before the destination is opened, so a
    rejected request never leaves a file behind.

    Args:
        url: URL to download from
        destination: Local path to save file
        session: Optional requests session (a new one is used if None)
        timeout: Optional request timeout in seconds (none by default)
        chunk_size: Streaming chunk size in bytes

    Returns:
        Path to downloaded file

    Raises:
        NetworkError: On transport failure, non-success status or truncated body
        FilesystemError: If the destination cannot be written
        ValueError: If URL or destination is empty

    Example:
        >>> download_file(
        ...     "https://example.com/pin.tar.gz", Path("out/pin.tar.gz")
        ... )
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    http = session if session is not None else requests.Session()

    logger.info(f"Downloading {url}")

    try:
        response = http.get(
            url,
            headers=DEFAULT_HEADERS,
            stream=True,
            timeout=timeout,
            allow_redirects=True,
        )
    except RequestException as e:
        raise NetworkError(f"Request to {url} failed: {e}") from e

    try:
        if not response.ok:
            raise NetworkError(
                f"Failed to download {url}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        expected = response.headers.get("content-length")
        written = _stream_to_file(response, destination, chunk_size)
    finally:
        response.close()

    if expected is not None:
        try:
            expected_size = int(expected)
        except ValueError as e:
            raise NetworkError(
                f"Invalid Content-Length from {url}: {expected!r}"
            ) from e
        if written < expected_size:
            raise NetworkError(
                f"Download of {url} truncated: got {written} of {expected} bytes"
            )

    logger.debug(f"Wrote {written} bytes to {destination}")
    logger.info(f"Download complete: {destination}")
    return destination


def _stream_to_file(
    response: requests.Response, destination: Path, chunk_size: int
) -> int:
    """Write the response body to ``destination`` and return the byte count."""
    written = 0
    try:
        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=chunk_size):
                if chunk:
                    f.write(chunk)
                    written += len(chunk)
    except RequestException as e:
        raise NetworkError(f"Download stream interrupted: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Failed to write {destination}: {e}") from e

    return written

"""
Python side of the initialization bridge.

Loads the compiled bridge library with ``ctypes`` and forwards process-style
arguments to ``pinbridge_initialize``.

The toolkit may be initialized at most once per process. ``call`` forwards
blindly, exactly like the native entry point. ``initialize`` enforces the
one-shot rule and returns an ``InitToken`` that toolkit-dependent code can
demand as proof of initialization.

Usage:
    from pinbridge.bridge.runtime import InitializationBridge

    bridge = InitializationBridge("out/pinbridge-build/libpinbridge.so")
    token = bridge.initialize(["mytool", "-t", "tool.so"])
"""

import ctypes
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple, Union

from pinbridge.core.exceptions import (
    AlreadyInitializedError,
    BridgeError,
    BridgeLoadError,
    InitializationError,
)

logger = logging.getLogger(__name__)

ENTRY_POINT = "pinbridge_initialize"

CharPointer = ctypes.POINTER(ctypes.c_char)
ArgvPointer = ctypes.POINTER(CharPointer)

_init_lock = threading.Lock()
_init_token: Optional["InitToken"] = None


@dataclass(frozen=True)
class InitToken:
    """Proof that the toolkit was initialized in this process."""

    args: Tuple[str, ...]
    library: Path


class ArgumentVector:
    """
    Owned ``argc``/``argv`` buffers for one call.

    Builds a null-terminated array of mutable C strings. The buffers live
    until ``release()`` (or the end of the ``with`` block); the native side
    must not keep pointers into them past the call.

    Example:
        >>> with ArgumentVector(["tool", "-v"]) as vector:
        ...     bridge.call(vector.argc, vector.argv)
    """

    def __init__(self, args: Sequence[Union[str, bytes]]):
        self._buffers = [ctypes.create_string_buffer(_encode(arg)) for arg in args]
        self.argc = len(self._buffers)
        pointers = [ctypes.cast(buf, CharPointer) for buf in self._buffers]
        self.argv = (CharPointer * (self.argc + 1))(*pointers, None)

    def values(self) -> Tuple[bytes, ...]:
        return tuple(buf.value for buf in self._buffers)

    def release(self) -> None:
        self._buffers = []
        self.argv = None
        self.argc = 0

    def __enter__(self) -> "ArgumentVector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def _encode(arg: Union[str, bytes]) -> bytes:
    if isinstance(arg, bytes):
        return arg
    if isinstance(arg, str):
        return arg.encode("utf-8")
    raise TypeError(f"Arguments must be str or bytes, not {type(arg).__name__}")


class InitializationBridge:
    """Loaded bridge library."""

    def __init__(
        self,
        library_path: Union[str, Path],
        loader: Callable[[str], ctypes.CDLL] = ctypes.CDLL,
    ):
        """
        Load the bridge library.

        Args:
            library_path: Path to the compiled shared bridge
            loader: Library loader (``ctypes.CDLL``)

        Raises:
            BridgeLoadError: If the library or its entry point cannot be loaded
        """
        self.library_path = Path(library_path)

        try:
            self._lib = loader(str(self.library_path))
        except OSError as e:
            raise BridgeLoadError(f"Failed to load {self.library_path}: {e}") from e

        try:
            func = getattr(self._lib, ENTRY_POINT)
        except AttributeError as e:
            raise BridgeLoadError(
                f"{self.library_path} does not export {ENTRY_POINT}"
            ) from e

        func.argtypes = [ctypes.c_int, ArgvPointer]
        func.restype = ctypes.c_bool
        self._func = func

    def call(self, argc: int, argv) -> bool:
        """Forward raw ``argc``/``argv`` to the toolkit and relay its result."""
        return bool(self._func(argc, argv))

    def initialize(self, args: Sequence[Union[str, bytes]]) -> InitToken:
        """
        Initialize the toolkit once for this process.

        Args:
            args: Process-style arguments, ``args[0]`` being the tool name

        Returns:
            InitToken for toolkit-dependent calls

        Raises:
            AlreadyInitializedError: If the toolkit was already initialized
            InitializationError: If the toolkit reports failure
        """
        global _init_token

        with _init_lock:
            if _init_token is not None:
                raise AlreadyInitializedError(
                    f"Toolkit already initialized with {list(_init_token.args)}"
                )

            with ArgumentVector(args) as vector:
                decoded = tuple(v.decode("utf-8", "replace") for v in vector.values())
                logger.debug(f"Calling {ENTRY_POINT} with {list(decoded)}")
                ok = self.call(vector.argc, vector.argv)

            if not ok:
                raise InitializationError(
                    f"Toolkit initialization failed for arguments {list(decoded)}"
                )

            _init_token = InitToken(args=decoded, library=self.library_path)
            logger.info("Toolkit initialized")
            return _init_token


def current_token() -> Optional[InitToken]:
    """Token of the initialization done in this process, if any."""
    return _init_token


def require_initialized(token: Optional[InitToken]) -> InitToken:
    """
    Check that ``token`` is this process's initialization token.

    Raises:
        BridgeError: If the toolkit is not initialized or the token is stale
    """
    if token is None or token is not _init_token:
        raise BridgeError("Toolkit is not initialized in this process")
    return token


def clear_initialization_state() -> None:
    """Forget the process initialization token (for tests)."""
    global _init_token
    with _init_lock:
        _init_token = None

"""
Cryptographic Random Source
===========================

The single place cipherkit obtains random bytes from.

Every key, IV and nonce is drawn from a ``RandomSource``. Generation
functions and cipher engines take one as an explicit, optional argument;
when none is given they use the process-wide ``SystemRandomSource``,
created lazily on first use.

Security Properties:
    - OS CSPRNG via the ``secrets`` module
    - Reads are serialized, concurrent callers never share output
    - Entropy failure is fatal (EntropyUnavailableError), never retried
"""

from __future__ import annotations

import logging
import secrets
import threading
from typing import Optional, Protocol, runtime_checkable

from cipherkit.core.crypto.errors import EntropyUnavailableError
from cipherkit.utils.validators import validate_byte_count


@runtime_checkable
class RandomSource(Protocol):
    """Anything that can produce n unpredictable bytes."""

    def next_bytes(self, n: int) -> bytes:
        ...


class SystemRandomSource:
    """
    RandomSource backed by the operating system CSPRNG.

    Usage:
        source = SystemRandomSource()
        iv = source.next_bytes(16)
    """

    __slots__ = ("_lock", "_log")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._log = logging.getLogger("cipherkit.random")

    def next_bytes(self, n: int) -> bytes:
        """
        Return n cryptographically secure random bytes.

        Raises:
            ValidationError: If n is negative or not an int
            EntropyUnavailableError: If the OS cannot supply entropy
        """
        n = validate_byte_count(n, "n")
        if n == 0:
            return b""

        with self._lock:
            try:
                data = secrets.token_bytes(n)
            except (OSError, NotImplementedError) as e:
                self._log.critical("OS entropy source unavailable")
                raise EntropyUnavailableError("Unable to obtain entropy from the OS") from e

        if len(data) != n:
            raise EntropyUnavailableError("Short read from the OS entropy source")
        return data

    def __repr__(self) -> str:
        return "SystemRandomSource()"


_default_source: Optional[SystemRandomSource] = None
_default_lock = threading.Lock()


def get_default_random_source() -> SystemRandomSource:
    """Get or lazily create the process-wide random source."""
    global _default_source
    if _default_source is None:
        with _default_lock:
            if _default_source is None:
                _default_source = SystemRandomSource()
    return _default_source


def resolve_random_source(source: Optional[RandomSource]) -> RandomSource:
    """Return ``source`` or the process default when it is None."""
    if source is None:
        return get_default_random_source()
    if not isinstance(source, RandomSource):
        raise TypeError(f"{type(source).__name__} does not implement next_bytes()")
    return source

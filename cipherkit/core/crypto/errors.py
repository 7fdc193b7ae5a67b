"""
Cryptographic Failure Taxonomy
==============================

Typed failures raised by the crypto core.

None of these are transient. A bad key length, bad padding, a failed
authentication check or missing entropy will fail the same way on retry,
so nothing in cipherkit retries them.

WARNING:
    PaddingError and AuthenticationFailedError are distinct here for
    diagnostics only. Anything user-facing built on top of the core must
    report both as the same generic rejection, otherwise it becomes a
    padding or decryption oracle.
"""

from __future__ import annotations


class CryptoError(Exception):
    """Base class for all cipherkit cryptographic failures."""
    pass


class InvalidKeyLengthError(CryptoError, ValueError):
    """Raised when a key size is not supported by the cipher (AES: 128/192/256 bits)."""

    def __init__(self, length: int) -> None:
        super().__init__(
            f"Invalid key length: {length * 8} bits (AES requires 128, 192 or 256)"
        )
        self.length = length


class PaddingError(CryptoError):
    """Raised when CBC decryption yields malformed padding."""

    def __init__(self) -> None:
        super().__init__("Decryption failed")


class AuthenticationFailedError(CryptoError):
    """Raised when authenticated decryption rejects its input."""

    def __init__(self) -> None:
        super().__init__("Decryption failed")


class EntropyUnavailableError(CryptoError):
    """Raised when the random source cannot produce output. Fatal."""
    pass


class KeyPurposeError(CryptoError, TypeError):
    """Raised when a key wrapped for one purpose is used for another."""
    pass

"""
Ciphertext Envelope
===================

Binds a ciphertext to the IV or nonce that produced it.

The core does not serialize envelopes. How ``(iv, ciphertext)`` is framed
for storage or transport is up to the caller; on the CBC path the MAC
must cover ``authenticated_bytes()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from cipherkit.core.crypto.keys import IV_SIZE, NONCE_SIZE
from cipherkit.utils.validators import validate_bytes


class CipherMode(Enum):
    """Cipher construction an envelope was produced by."""

    CBC = "AES-CBC"
    GCM = "AES-GCM"

    @property
    def iv_size(self) -> int:
        return IV_SIZE if self is CipherMode.CBC else NONCE_SIZE


@dataclass(frozen=True, slots=True)
class Envelope:
    """
    Immutable result of an encrypt call.

    Attributes:
        ciphertext: Encrypted data. For GCM the 16-byte authentication
            tag is appended.
        iv: The CBC IV (16 bytes) or GCM nonce (12 bytes) used
        mode: Which engine produced it, and so which one can decrypt it
    """

    ciphertext: bytes
    iv: bytes
    mode: CipherMode

    def __post_init__(self) -> None:
        if not isinstance(self.mode, CipherMode):
            raise TypeError("mode must be a CipherMode")
        object.__setattr__(self, "ciphertext", validate_bytes(self.ciphertext, "ciphertext"))
        object.__setattr__(self, "iv", validate_bytes(self.iv, "iv"))
        if len(self.iv) != self.mode.iv_size:
            raise ValueError(
                f"{self.mode.value} requires a {self.mode.iv_size}-byte IV/nonce, got {len(self.iv)}"
            )

    @property
    def nonce(self) -> bytes:
        """The GCM nonce (same field as ``iv``)."""
        return self.iv

    def authenticated_bytes(self) -> bytes:
        """Return ``iv || ciphertext``, the byte string to MAC on the CBC path."""
        return self.iv + self.ciphertext

    def __repr__(self) -> str:
        """Safe representation without exposing contents."""
        return (
            f"Envelope({self.mode.value}, "
            f"ciphertext_len={len(self.ciphertext)}, iv_len={len(self.iv)})"
        )

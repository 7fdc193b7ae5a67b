"""
HMAC-SHA256 Message Authentication
==================================

Computes and verifies 256-bit HMAC-SHA256 tags.

Security Properties:
    - Deterministic: same data and key give the same tag
    - Any key length (HMAC hashes or pads it); keys shorter than
      ``crypto.min_mac_key_bytes`` are accepted with a warning
    - Verification compares in constant time

A tag mismatch is reported as ``False``, never as an exception. The
caller decides how to reject.
"""

from __future__ import annotations

import logging
from typing import Final, Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from cipherkit.core.config import CipherKitConfig
from cipherkit.core.crypto.keys import KeyLike, MacKey, unwrap_key
from cipherkit.utils.validators import validate_bytes

TAG_SIZE: Final[int] = 32  # 256 bits


def constant_time_equals(a: bytes, b: bytes) -> bool:
    """
    Compare two byte strings in time independent of their contents.

    A length mismatch returns False at once. For equal lengths every
    byte pair is visited; differences are OR-ed into one accumulator and
    only the final value is inspected.
    """
    if len(a) != len(b):
        return False

    result = 0
    for x, y in zip(a, b):
        result |= x ^ y

    return result == 0


class HmacSha256:
    """
    HMAC-SHA256 tag engine.

    Usage:
        mac = HmacSha256()
        tag = mac.compute_tag(envelope.authenticated_bytes(), mac_key)

        # Receiver, before decrypting
        if not mac.verify_tag(envelope.authenticated_bytes(), mac_key, tag):
            reject()
    """

    __slots__ = ("_min_key_bytes", "_log")

    def __init__(self, min_key_bytes: Optional[int] = None) -> None:
        if min_key_bytes is None:
            min_key_bytes = CipherKitConfig.get_instance().crypto.min_mac_key_bytes
        self._min_key_bytes = min_key_bytes
        self._log = logging.getLogger("cipherkit.mac")

    def _key_bytes(self, key: KeyLike) -> bytes:
        raw = validate_bytes(unwrap_key(key, MacKey), "MAC key", allow_empty=False)
        if len(raw) < self._min_key_bytes:
            self._log.warning(
                "HMAC key is %d bytes, below the recommended %d",
                len(raw),
                self._min_key_bytes,
            )
        return raw

    def compute_tag(self, data: bytes, key: KeyLike) -> bytes:
        """
        Compute the HMAC-SHA256 tag of ``data``.

        Args:
            data: Message bytes (any length, may be empty)
            key: MacKey or raw key bytes

        Returns:
            32-byte tag

        Raises:
            KeyPurposeError: If key is a CbcKey or GcmKey
            ValidationError: If data or key is not bytes, or key is empty
        """
        data = validate_bytes(data, "data")
        h = crypto_hmac.HMAC(self._key_bytes(key), hashes.SHA256())
        h.update(data)
        return h.finalize()

    def verify_tag(self, data: bytes, key: KeyLike, expected_tag: bytes) -> bool:
        """
        Check ``expected_tag`` against the tag of ``data`` under ``key``.

        Returns:
            True if the tags match, False otherwise
        """
        expected_tag = validate_bytes(expected_tag, "expected_tag")
        computed = self.compute_tag(data, key)

        matches = constant_time_equals(computed, expected_tag)
        if not matches:
            self._log.warning("HMAC verification failed")
        return matches

    def __repr__(self) -> str:
        return "HmacSha256()"


def compute_tag(data: bytes, key: KeyLike) -> bytes:
    """Compute an HMAC-SHA256 tag with default settings."""
    return HmacSha256().compute_tag(data, key)


def verify_tag(data: bytes, key: KeyLike, expected_tag: bytes) -> bool:
    """Verify an HMAC-SHA256 tag in constant time."""
    return HmacSha256().verify_tag(data, key, expected_tag)

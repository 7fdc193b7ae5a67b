"""
Key Material Generation
=======================

Generates symmetric keys, CBC initialization vectors and GCM nonces.

Sizes:
    - Key: caller-chosen, any positive multiple of 8 bits. AES accepts
      128, 192 or 256 bits; that is checked by the cipher at use time.
    - IV: always 128 bits (AES block size, CBC only)
    - Nonce: always 96 bits (NIST SP 800-38D recommendation, GCM only)

Key Purposes:
    ``CbcKey``, ``GcmKey`` and ``MacKey`` wrap raw key bytes with the
    purpose they were generated for. Engines accept their own wrapper or
    plain bytes, and refuse a key wrapped for another purpose. Never use
    one key for two algorithms.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Optional, Type, TypeVar, Union

from cipherkit.core.config import CipherKitConfig
from cipherkit.core.crypto.errors import (
    EntropyUnavailableError,
    InvalidKeyLengthError,
    KeyPurposeError,
)
from cipherkit.core.crypto.random_source import RandomSource, resolve_random_source
from cipherkit.utils.validators import validate_bytes, validate_key_bits

IV_SIZE: Final[int] = 16  # 128 bits
NONCE_SIZE: Final[int] = 12  # 96 bits
AES_KEY_SIZES: Final[frozenset[int]] = frozenset({16, 24, 32})


@dataclass(frozen=True, slots=True)
class SymmetricKey:
    """
    Immutable key bytes tagged with their purpose.

    Attributes:
        material: The raw key bytes
    """

    material: bytes

    purpose = "generic"

    def __post_init__(self) -> None:
        object.__setattr__(self, "material", validate_bytes(self.material, "key material"))

    @property
    def bit_length(self) -> int:
        return len(self.material) * 8

    def __len__(self) -> int:
        return len(self.material)

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        return f"{type(self).__name__}(bits={self.bit_length})"


@dataclass(frozen=True, slots=True, repr=False)
class CbcKey(SymmetricKey):
    """AES key for the CBC engine."""

    purpose = "AES-CBC"


@dataclass(frozen=True, slots=True, repr=False)
class GcmKey(SymmetricKey):
    """AES key for the GCM engine."""

    purpose = "AES-GCM"


@dataclass(frozen=True, slots=True, repr=False)
class MacKey(SymmetricKey):
    """HMAC-SHA256 key."""

    purpose = "HMAC-SHA256"


KeyLike = Union[bytes, bytearray, memoryview, SymmetricKey]

K = TypeVar("K", bound=SymmetricKey)


def unwrap_key(key: KeyLike, expected: Type[SymmetricKey]) -> bytes:
    """
    Return the raw bytes of ``key`` for use by an engine expecting ``expected``.

    Raises:
        KeyPurposeError: If key is wrapped for a different purpose
        ValidationError: If key is not bytes-like
    """
    if isinstance(key, SymmetricKey):
        if not isinstance(key, expected):
            raise KeyPurposeError(f"{key.purpose} key cannot be used for {expected.purpose}")
        return key.material
    return validate_bytes(key, "key")


def unwrap_aes_key(key: KeyLike, expected: Type[SymmetricKey]) -> bytes:
    """
    Like ``unwrap_key``, and also require an AES key size.

    Raises:
        InvalidKeyLengthError: If key is not 128, 192 or 256 bits
    """
    raw = unwrap_key(key, expected)
    if len(raw) not in AES_KEY_SIZES:
        raise InvalidKeyLengthError(len(raw))
    return raw


class KeyGenerator:
    """
    Draws keys, IVs and nonces from one RandomSource.

    Usage:
        generator = KeyGenerator()
        key = generator.generate_gcm_key()
        nonce = generator.generate_nonce()
    """

    __slots__ = ("_source",)

    def __init__(self, random_source: Optional[RandomSource] = None) -> None:
        self._source = resolve_random_source(random_source)

    def _draw(self, n: int) -> bytes:
        data = self._source.next_bytes(n)
        if not isinstance(data, bytes) or len(data) != n:
            raise EntropyUnavailableError(f"Random source did not return {n} bytes")
        return data

    def generate_key(self, bits: Optional[int] = None) -> bytes:
        """
        Generate a random key of ``bits`` bits.

        Args:
            bits: Key size, a positive multiple of 8. Defaults to
                ``crypto.default_key_bits`` from the global configuration.

        Returns:
            bits // 8 random bytes

        Raises:
            ValidationError: If bits is not a positive multiple of 8
        """
        if bits is None:
            bits = CipherKitConfig.get_instance().crypto.default_key_bits
        bits = validate_key_bits(bits)
        return self._draw(bits // 8)

    def generate_iv(self) -> bytes:
        """Generate a 128-bit CBC initialization vector."""
        return self._draw(IV_SIZE)

    def generate_nonce(self) -> bytes:
        """
        Generate a 96-bit GCM nonce.

        Random 96-bit nonces have negligible collision probability for
        up to 2^32 encryptions under the same key.
        """
        return self._draw(NONCE_SIZE)

    def generate_typed_key(self, key_type: Type[K], bits: Optional[int] = None) -> K:
        return key_type(self.generate_key(bits))

    def generate_cbc_key(self, bits: Optional[int] = None) -> CbcKey:
        return self.generate_typed_key(CbcKey, bits)

    def generate_gcm_key(self, bits: Optional[int] = None) -> GcmKey:
        return self.generate_typed_key(GcmKey, bits)

    def generate_mac_key(self, bits: Optional[int] = None) -> MacKey:
        return self.generate_typed_key(MacKey, bits)


def generate_key(bits: Optional[int] = None, *, random_source: Optional[RandomSource] = None) -> bytes:
    """Generate a random key of ``bits`` bits (default from configuration)."""
    return KeyGenerator(random_source).generate_key(bits)


def generate_iv(*, random_source: Optional[RandomSource] = None) -> bytes:
    """Generate a 16-byte CBC initialization vector."""
    return KeyGenerator(random_source).generate_iv()


def generate_nonce(*, random_source: Optional[RandomSource] = None) -> bytes:
    """Generate a 12-byte GCM nonce."""
    return KeyGenerator(random_source).generate_nonce()


def generate_cbc_key(bits: Optional[int] = None, *, random_source: Optional[RandomSource] = None) -> CbcKey:
    return KeyGenerator(random_source).generate_cbc_key(bits)


def generate_gcm_key(bits: Optional[int] = None, *, random_source: Optional[RandomSource] = None) -> GcmKey:
    return KeyGenerator(random_source).generate_gcm_key(bits)


def generate_mac_key(bits: Optional[int] = None, *, random_source: Optional[RandomSource] = None) -> MacKey:
    return KeyGenerator(random_source).generate_mac_key(bits)

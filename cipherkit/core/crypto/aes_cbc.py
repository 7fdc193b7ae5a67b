"""
AES-CBC Encryption with PKCS7 Padding
=====================================

Implements AES in CBC mode with a fresh random IV per encryption.

Security Properties:
    - 128, 192 or 256-bit key
    - 128-bit random IV per encryption
    - PKCS7 padding to the 128-bit block size

WARNING:
    CBC provides confidentiality only. Anyone can flip bits in the
    ciphertext. Always send an HMAC over ``envelope.authenticated_bytes()``
    (computed with a separate MAC key) and verify it with
    ``verify_tag`` BEFORE calling ``decrypt``. ``decrypt_verified`` does
    both in the right order. Prefer AES-GCM when you can.
"""

from __future__ import annotations

import logging
from typing import Final, Optional, Tuple

from cryptography.hazmat.primitives import padding as sym_padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from cipherkit.core.crypto.envelope import CipherMode, Envelope
from cipherkit.core.crypto.errors import (
    AuthenticationFailedError,
    PaddingError,
)
from cipherkit.core.crypto.keys import CbcKey, KeyGenerator, KeyLike, unwrap_aes_key
from cipherkit.core.crypto.mac import HmacSha256
from cipherkit.core.crypto.random_source import RandomSource
from cipherkit.utils.validators import validate_bytes

AES_BLOCK_BITS: Final[int] = 128


class AesCbcCipher:
    """
    AES-CBC cipher producing ``Envelope`` values.

    Usage:
        cipher = AesCbcCipher()
        mac = HmacSha256()

        envelope = cipher.encrypt(plaintext, cbc_key)
        tag = mac.compute_tag(envelope.authenticated_bytes(), mac_key)

        # Receiver
        if not mac.verify_tag(envelope.authenticated_bytes(), mac_key, tag):
            reject()
        plaintext = cipher.decrypt(envelope, cbc_key)

    Stateless between calls; one instance can be shared across threads.
    """

    __slots__ = ("_keys", "_mac", "_log")

    def __init__(
        self,
        random_source: Optional[RandomSource] = None,
        mac: Optional[HmacSha256] = None,
    ) -> None:
        self._keys = KeyGenerator(random_source)
        self._mac = mac
        self._log = logging.getLogger("cipherkit.cbc")

    @property
    def mac(self) -> HmacSha256:
        if self._mac is None:
            self._mac = HmacSha256()
        return self._mac

    def encrypt(self, plaintext: bytes, key: KeyLike) -> Envelope:
        """
        Encrypt plaintext under AES-CBC with a fresh IV.

        Args:
            plaintext: Data to encrypt (can be empty)
            key: CbcKey or raw 16/24/32-byte key

        Returns:
            Envelope holding the ciphertext and IV

        Raises:
            InvalidKeyLengthError: If key is not 128/192/256 bits
            KeyPurposeError: If key is wrapped for another purpose
        """
        plaintext = validate_bytes(plaintext, "plaintext")
        raw_key = unwrap_aes_key(key, CbcKey)
        iv = self._keys.generate_iv()

        padder = sym_padding.PKCS7(AES_BLOCK_BITS).padder()
        padded = padder.update(plaintext) + padder.finalize()

        encryptor = Cipher(algorithms.AES(raw_key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        self._log.debug("AES-CBC encrypted %d bytes", len(plaintext))
        return Envelope(ciphertext=ciphertext, iv=iv, mode=CipherMode.CBC)

    def decrypt(self, envelope: Envelope, key: KeyLike) -> bytes:
        """
        Decrypt an envelope produced by ``encrypt``.

        Precondition:
            The caller has already verified an HMAC over
            ``envelope.authenticated_bytes()``. This method does not
            authenticate anything.

        Returns:
            Decrypted plaintext bytes

        Raises:
            PaddingError: If padding is malformed or the ciphertext is
                not a whole number of blocks
            InvalidKeyLengthError: If key is not 128/192/256 bits
            ValueError: If the envelope was produced by another mode
        """
        if envelope.mode is not CipherMode.CBC:
            raise ValueError(f"Cannot decrypt a {envelope.mode.value} envelope with AES-CBC")
        raw_key = unwrap_aes_key(key, CbcKey)

        decryptor = Cipher(algorithms.AES(raw_key), modes.CBC(envelope.iv)).decryptor()
        unpadder = sym_padding.PKCS7(AES_BLOCK_BITS).unpadder()
        try:
            padded = decryptor.update(envelope.ciphertext) + decryptor.finalize()
            plaintext = unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            self._log.warning("AES-CBC decryption rejected")
            raise PaddingError() from e

        self._log.debug("AES-CBC decrypted %d bytes", len(plaintext))
        return plaintext

    def encrypt_and_tag(
        self,
        plaintext: bytes,
        key: KeyLike,
        mac_key: KeyLike,
    ) -> Tuple[Envelope, bytes]:
        """
        Encrypt, then MAC the envelope's authenticated bytes.

        Returns:
            (envelope, tag); store or send both
        """
        envelope = self.encrypt(plaintext, key)
        tag = self.mac.compute_tag(envelope.authenticated_bytes(), mac_key)
        return envelope, tag

    def decrypt_verified(
        self,
        envelope: Envelope,
        key: KeyLike,
        mac_key: KeyLike,
        tag: bytes,
    ) -> bytes:
        """
        Verify the HMAC tag, and only then decrypt.

        Raises:
            AuthenticationFailedError: If the tag does not match; no
                decryption is attempted
            PaddingError: If the tag matches but padding is malformed
        """
        if envelope.mode is not CipherMode.CBC:
            raise ValueError(f"Cannot decrypt a {envelope.mode.value} envelope with AES-CBC")
        if not self.mac.verify_tag(envelope.authenticated_bytes(), mac_key, tag):
            raise AuthenticationFailedError()
        return self.decrypt(envelope, key)

    def __repr__(self) -> str:
        return "AesCbcCipher()"

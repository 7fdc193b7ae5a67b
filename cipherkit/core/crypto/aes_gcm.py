"""
AES-GCM Authenticated Encryption
================================

Implements AES-GCM with a fresh random nonce per encryption.

Security Properties:
    - 128, 192 or 256-bit key
    - 96-bit nonce (NIST recommended)
    - 128-bit authentication tag, appended to the ciphertext
    - Tag verified before any plaintext is returned

NIST SP 800-38D Compliance:
    - GCM mode with 96-bit IV
    - Unique nonce for each encryption under same key

WARNING:
    - Never reuse (key, nonce) pairs. Reuse leaks the authentication key
      and allows forgeries. Random nonces are safe for up to 2^32
      messages per key; rotate keys before that.
    - Do NOT catch AuthenticationFailedError silently - it indicates
      tampering, corruption or the wrong key
"""

from __future__ import annotations

import logging
from typing import Final, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from cipherkit.core.crypto.envelope import CipherMode, Envelope
from cipherkit.core.crypto.errors import AuthenticationFailedError
from cipherkit.core.crypto.keys import GcmKey, KeyGenerator, KeyLike, unwrap_aes_key
from cipherkit.core.crypto.random_source import RandomSource
from cipherkit.utils.validators import validate_bytes

AES_GCM_TAG_SIZE: Final[int] = 16  # 128 bits


class AesGcmCipher:
    """
    AES-GCM Authenticated Encryption.

    Usage:
        cipher = AesGcmCipher()
        key = generate_gcm_key()

        envelope = cipher.encrypt(plaintext, key)
        plaintext = cipher.decrypt(envelope, key)

    Stateless between calls; one instance can be shared across threads.
    """

    __slots__ = ("_keys", "_log")

    def __init__(self, random_source: Optional[RandomSource] = None) -> None:
        self._keys = KeyGenerator(random_source)
        self._log = logging.getLogger("cipherkit.gcm")

    def encrypt(self, plaintext: bytes, key: KeyLike) -> Envelope:
        """
        Encrypt plaintext using AES-GCM.

        Precondition:
            The caller must not encrypt more than ~2^32 messages under one
            key; each call draws a new random nonce.

        Args:
            plaintext: Data to encrypt (can be empty)
            key: GcmKey or raw 16/24/32-byte key

        Returns:
            Envelope with ciphertext (tag appended) and nonce

        Raises:
            InvalidKeyLengthError: If key is not 128/192/256 bits
            KeyPurposeError: If key is wrapped for another purpose
        """
        plaintext = validate_bytes(plaintext, "plaintext")
        raw_key = unwrap_aes_key(key, GcmKey)
        nonce = self._keys.generate_nonce()

        ciphertext = AESGCM(raw_key).encrypt(nonce, plaintext, None)

        self._log.debug("AES-GCM encrypted %d bytes", len(plaintext))
        return Envelope(ciphertext=ciphertext, iv=nonce, mode=CipherMode.GCM)

    def decrypt(self, envelope: Envelope, key: KeyLike) -> bytes:
        """
        Decrypt an envelope using AES-GCM with integrity verification.

        Args:
            envelope: Envelope produced by ``encrypt``
            key: The key used during encryption

        Returns:
            Decrypted plaintext bytes

        Raises:
            AuthenticationFailedError: If the tag does not verify (tampered
                data, wrong key or wrong nonce) or the ciphertext is too
                short to hold a tag. No plaintext is returned.
            InvalidKeyLengthError: If key is not 128/192/256 bits
            ValueError: If the envelope was produced by another mode
        """
        if envelope.mode is not CipherMode.GCM:
            raise ValueError(f"Cannot decrypt a {envelope.mode.value} envelope with AES-GCM")
        raw_key = unwrap_aes_key(key, GcmKey)

        if len(envelope.ciphertext) < AES_GCM_TAG_SIZE:
            self._log.warning("AES-GCM decryption rejected")
            raise AuthenticationFailedError()

        try:
            plaintext = AESGCM(raw_key).decrypt(envelope.nonce, envelope.ciphertext, None)
        except InvalidTag as e:
            self._log.warning("AES-GCM decryption rejected")
            raise AuthenticationFailedError() from e

        self._log.debug("AES-GCM decrypted %d bytes", len(plaintext))
        return plaintext

    def __repr__(self) -> str:
        return "AesGcmCipher()"

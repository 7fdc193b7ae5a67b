"""
cipherkit - Small Authenticated-Encryption Toolkit
==================================================

Key/IV/nonce generation, AES-CBC with HMAC-SHA256, AES-GCM, and
constant-time tag comparison on top of ``cryptography``.

Security Notice:
- No key material is ever logged
- Every encryption draws a fresh IV or nonce
- Failures raise typed errors; nothing is retried
"""

from cipherkit.core.config import CipherKitConfig
from cipherkit.core.logging import configure_logging, get_secure_logger
from cipherkit.core.crypto import (
    AesCbcCipher,
    AesGcmCipher,
    AuthenticationFailedError,
    CbcKey,
    CipherMode,
    CryptoError,
    EntropyUnavailableError,
    Envelope,
    GcmKey,
    HmacSha256,
    InvalidKeyLengthError,
    KeyPurposeError,
    MacKey,
    PaddingError,
    compute_tag,
    constant_time_equals,
    generate_cbc_key,
    generate_gcm_key,
    generate_iv,
    generate_key,
    generate_mac_key,
    generate_nonce,
    verify_tag,
)

__version__ = "0.1.0"

__all__ = [
    "AesCbcCipher",
    "AesGcmCipher",
    "AuthenticationFailedError",
    "CbcKey",
    "CipherKitConfig",
    "CipherMode",
    "CryptoError",
    "EntropyUnavailableError",
    "Envelope",
    "GcmKey",
    "HmacSha256",
    "InvalidKeyLengthError",
    "KeyPurposeError",
    "MacKey",
    "PaddingError",
    "compute_tag",
    "configure_logging",
    "constant_time_equals",
    "generate_cbc_key",
    "generate_gcm_key",
    "generate_iv",
    "generate_key",
    "generate_mac_key",
    "generate_nonce",
    "get_secure_logger",
    "verify_tag",
    "__version__",
]

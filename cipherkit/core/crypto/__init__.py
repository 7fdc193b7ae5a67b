"""
cipherkit Cryptographic Core
============================

Symmetric encryption building blocks that are hard to wire up wrongly.

Architecture:
    1. RandomSource: OS CSPRNG, injectable
    2. Key material: keys, 128-bit IVs, 96-bit nonces
    3. HmacSha256: tags and constant-time verification
    4. AesCbcCipher: AES-CBC + PKCS7 (pair with HmacSha256!)
    5. AesGcmCipher: AES-GCM authenticated encryption
    6. Envelope: ciphertext bound to its IV/nonce

Security Properties:
    - Fresh random IV/nonce for every encryption
    - Constant-time tag comparison
    - GCM releases no plaintext unless the tag verifies
    - Keys tagged by purpose to prevent cross-algorithm reuse

WARNING: AES-CBC alone is NOT authenticated. Verify an HMAC over
         ``envelope.authenticated_bytes()`` before decrypting, or use
         ``AesCbcCipher.decrypt_verified``. Prefer AES-GCM.
"""

from cipherkit.core.crypto.aes_cbc import AesCbcCipher
from cipherkit.core.crypto.aes_gcm import AesGcmCipher
from cipherkit.core.crypto.envelope import CipherMode, Envelope
from cipherkit.core.crypto.errors import (
    AuthenticationFailedError,
    CryptoError,
    EntropyUnavailableError,
    InvalidKeyLengthError,
    KeyPurposeError,
    PaddingError,
)
from cipherkit.core.crypto.keys import (
    CbcKey,
    GcmKey,
    KeyGenerator,
    MacKey,
    SymmetricKey,
    generate_cbc_key,
    generate_gcm_key,
    generate_iv,
    generate_key,
    generate_mac_key,
    generate_nonce,
)
from cipherkit.core.crypto.mac import (
    HmacSha256,
    compute_tag,
    constant_time_equals,
    verify_tag,
)
from cipherkit.core.crypto.random_source import (
    RandomSource,
    SystemRandomSource,
    get_default_random_source,
)

__all__ = [
    "AesCbcCipher",
    "AesGcmCipher",
    "AuthenticationFailedError",
    "CbcKey",
    "CipherMode",
    "CryptoError",
    "EntropyUnavailableError",
    "Envelope",
    "GcmKey",
    "HmacSha256",
    "InvalidKeyLengthError",
    "KeyGenerator",
    "KeyPurposeError",
    "MacKey",
    "PaddingError",
    "RandomSource",
    "SymmetricKey",
    "SystemRandomSource",
    "compute_tag",
    "constant_time_equals",
    "generate_cbc_key",
    "generate_gcm_key",
    "generate_iv",
    "generate_key",
    "generate_mac_key",
    "generate_nonce",
    "get_default_random_source",
    "verify_tag",
]

"""
Tests for the AES-CBC engine and its pairing with HMAC-SHA256.
"""

import logging

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from cipherkit.core.crypto.aes_cbc import AesCbcCipher
from cipherkit.core.crypto.aes_gcm import AesGcmCipher
from cipherkit.core.crypto.envelope import CipherMode, Envelope
from cipherkit.core.crypto.errors import (
    AuthenticationFailedError,
    InvalidKeyLengthError,
    KeyPurposeError,
    PaddingError,
)
from cipherkit.core.crypto.keys import CbcKey, GcmKey, generate_cbc_key, generate_key
from cipherkit.core.crypto.mac import compute_tag, verify_tag


@pytest.mark.parametrize("bits", [128, 192, 256])
@pytest.mark.parametrize("plaintext", [b"", b"a", b"x" * 15, b"y" * 16, b"z" * 17, bytes(range(256)) * 4])
def test_roundtrip(bits, plaintext):
    cipher = AesCbcCipher()
    key = generate_key(bits)
    envelope = cipher.encrypt(plaintext, key)
    assert cipher.decrypt(envelope, key) == plaintext


def test_envelope_shape():
    plaintext = b"seventeen bytes!!"
    envelope = AesCbcCipher().encrypt(plaintext, generate_key(256))

    assert envelope.mode is CipherMode.CBC
    assert len(envelope.iv) == 16
    assert len(envelope.ciphertext) % 16 == 0
    assert len(envelope.ciphertext) == 32


def test_fresh_iv_per_encryption():
    cipher = AesCbcCipher()
    key = generate_key(256)
    first = cipher.encrypt(b"same message", key)
    second = cipher.encrypt(b"same message", key)
    assert first.iv != second.iv
    assert first.ciphertext != second.ciphertext


def test_nist_sp800_38a_first_block(fixed_source):
    """F.2.1 CBC-AES128.Encrypt, block #1."""
    key = bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c")
    iv = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
    plaintext = bytes.fromhex("6bc1bee22e409f96e93d7e117393172a")

    envelope = AesCbcCipher(random_source=fixed_source(iv)).encrypt(plaintext, key)

    assert envelope.iv == iv
    # Second block is the full PKCS7 padding block
    assert len(envelope.ciphertext) == 32
    assert envelope.ciphertext[:16].hex() == "7649abac8119b246cee98e9b12e9197d"


def test_cbc_and_hmac_scenario():
    """Zero key, encrypt, MAC, verify, decrypt."""
    cbc_key = bytes(32)
    hmac_key = generate_key(256)
    plaintext = "This is the CBC test"
    cipher = AesCbcCipher()

    envelope = cipher.encrypt(plaintext.encode(), cbc_key)
    tag = compute_tag(envelope.authenticated_bytes(), hmac_key)

    assert verify_tag(envelope.authenticated_bytes(), hmac_key, tag)
    assert cipher.decrypt(envelope, cbc_key).decode("utf-8") == plaintext


def test_corrupted_mac_is_rejected_before_decrypt(monkeypatch):
    cbc_key = bytes(32)
    hmac_key = generate_key(256)
    cipher = AesCbcCipher()

    envelope = cipher.encrypt(b"This is the CBC test", cbc_key)
    tag = compute_tag(envelope.authenticated_bytes(), hmac_key)

    for i in range(len(tag)):
        corrupted = bytearray(tag)
        corrupted[i] ^= 0x01
        assert verify_tag(envelope.authenticated_bytes(), hmac_key, bytes(corrupted)) is False

    def _must_not_run(self, envelope, key):
        raise AssertionError("decrypt called after failed MAC check")

    monkeypatch.setattr(AesCbcCipher, "decrypt", _must_not_run)
    bad_tag = bytes([tag[0] ^ 0xFF]) + tag[1:]
    with pytest.raises(AuthenticationFailedError):
        cipher.decrypt_verified(envelope, cbc_key, hmac_key, bad_tag)


def test_encrypt_and_tag_then_decrypt_verified():
    cipher = AesCbcCipher()
    cbc_key = generate_cbc_key()
    mac_key = generate_key(256)

    envelope, tag = cipher.encrypt_and_tag(b"paired", cbc_key, mac_key)

    assert len(tag) == 32
    assert verify_tag(envelope.authenticated_bytes(), mac_key, tag)
    assert cipher.decrypt_verified(envelope, cbc_key, mac_key, tag) == b"paired"


def test_mac_covers_iv():
    cipher = AesCbcCipher()
    key = generate_key(256)
    mac_key = generate_key(256)
    envelope, tag = cipher.encrypt_and_tag(b"iv is authenticated", key, mac_key)

    forged_iv = bytes([envelope.iv[0] ^ 0x01]) + envelope.iv[1:]
    forged = Envelope(ciphertext=envelope.ciphertext, iv=forged_iv, mode=CipherMode.CBC)

    with pytest.raises(AuthenticationFailedError):
        cipher.decrypt_verified(forged, key, mac_key, tag)


@pytest.mark.parametrize("size", [0, 8, 20, 31, 33, 64])
def test_invalid_key_length(size):
    with pytest.raises(InvalidKeyLengthError) as exc_info:
        AesCbcCipher().encrypt(b"data", bytes(size))
    assert isinstance(exc_info.value, ValueError)


def test_decrypt_invalid_key_length():
    envelope = AesCbcCipher().encrypt(b"data", generate_key(256))
    with pytest.raises(InvalidKeyLengthError):
        AesCbcCipher().decrypt(envelope, bytes(20))


def test_malformed_padding_raises_padding_error():
    key = generate_key(128)
    iv = bytes(16)
    # Last byte 0x00 is never valid PKCS7
    block = b"A" * 15 + b"\x00"
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(block) + encryptor.finalize()

    envelope = Envelope(ciphertext=ciphertext, iv=iv, mode=CipherMode.CBC)
    with pytest.raises(PaddingError) as exc_info:
        AesCbcCipher().decrypt(envelope, key)
    assert str(exc_info.value) == "Decryption failed"


def test_padding_failure_logs_warning_without_material(caplog):
    key = b"\x5a" * 16
    iv = b"\x3c" * 16
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(b"B" * 15 + b"\x00") + encryptor.finalize()
    envelope = Envelope(ciphertext=ciphertext, iv=iv, mode=CipherMode.CBC)

    with caplog.at_level(logging.WARNING, logger="cipherkit.cbc"):
        with pytest.raises(PaddingError):
            AesCbcCipher().decrypt(envelope, key)

    assert [r.levelno for r in caplog.records] == [logging.WARNING]
    message = caplog.records[0].getMessage()
    assert message == "AES-CBC decryption rejected"
    for secret in (key, iv, ciphertext):
        assert secret.hex()[:8] not in message


@pytest.mark.parametrize("ciphertext", [b"", b"\x00" * 15, b"\x00" * 17])
def test_partial_block_raises_padding_error(ciphertext):
    envelope = Envelope(ciphertext=ciphertext, iv=bytes(16), mode=CipherMode.CBC)
    with pytest.raises(PaddingError):
        AesCbcCipher().decrypt(envelope, generate_key(256))


def test_rejects_gcm_envelope():
    key = generate_key(256)
    envelope = AesGcmCipher().encrypt(b"data", key)
    with pytest.raises(ValueError):
        AesCbcCipher().decrypt(envelope, key)


def test_rejects_key_for_other_purpose():
    cipher = AesCbcCipher()
    with pytest.raises(KeyPurposeError):
        cipher.encrypt(b"data", GcmKey(bytes(32)))

    envelope = cipher.encrypt(b"data", CbcKey(bytes(32)))
    assert cipher.decrypt(envelope, CbcKey(bytes(32))) == b"data"


def test_injected_source_supplies_iv(deterministic_source, seeded_source):
    expected_iv = seeded_source().next_bytes(16)
    envelope = AesCbcCipher(random_source=deterministic_source).encrypt(b"data", generate_key(256))
    assert envelope.iv == expected_iv

"""
Tests for CipherKitConfig and its environment overrides.
"""

from pathlib import Path

import pytest

from cipherkit.core.config import CipherKitConfig, CryptoConfig, LoggingConfig


def test_defaults():
    config = CipherKitConfig.load()
    assert config.crypto.default_key_bits == 256
    assert config.crypto.min_mac_key_bytes == 32
    assert config.logging.level == "INFO"
    assert config.logging.enable_file is False


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CIPHERKIT_CRYPTO__DEFAULT_KEY_BITS", "128")
    monkeypatch.setenv("CIPHERKIT_CRYPTO__MIN_MAC_KEY_BYTES", "16")
    monkeypatch.setenv("CIPHERKIT_LOGGING__LEVEL", "debug")
    monkeypatch.setenv("CIPHERKIT_LOGGING__ENABLE_FILE", "true")
    monkeypatch.setenv("CIPHERKIT_LOGGING__LOG_DIR", str(tmp_path))

    config = CipherKitConfig.load()
    assert config.crypto.default_key_bits == 128
    assert config.crypto.min_mac_key_bytes == 16
    assert config.logging.level == "DEBUG"
    assert config.logging.enable_file is True
    assert config.logging.log_dir == tmp_path


def test_sensitive_variables_are_ignored(monkeypatch):
    monkeypatch.setenv("CIPHERKIT_CRYPTO__SECRET_KEY", "00" * 32)
    monkeypatch.setenv("CIPHERKIT_CRYPTO__NONCE", "00" * 12)
    monkeypatch.setenv("CIPHERKIT_LOGGING__LEVEL", "WARNING")

    overrides = CipherKitConfig._parse_env_overrides("CIPHERKIT")
    assert overrides == {"logging.level": "WARNING"}


def test_invalid_values_are_rejected(monkeypatch):
    with pytest.raises(ValueError):
        CryptoConfig(default_key_bits=100)
    with pytest.raises(ValueError):
        CryptoConfig(min_mac_key_bytes=0)
    with pytest.raises(ValueError):
        LoggingConfig(level="LOUD")
    with pytest.raises(ValueError):
        LoggingConfig(log_dir=Path("relative/logs"))

    monkeypatch.setenv("CIPHERKIT_CRYPTO__DEFAULT_KEY_BITS", "12")
    with pytest.raises(ValueError):
        CipherKitConfig.load()


def test_config_is_immutable():
    config = CipherKitConfig()
    with pytest.raises(AttributeError):
        config._crypto = CryptoConfig(default_key_bits=128)


def test_singleton_and_reset(monkeypatch):
    first = CipherKitConfig.get_instance()
    assert CipherKitConfig.get_instance() is first

    monkeypatch.setenv("CIPHERKIT_CRYPTO__DEFAULT_KEY_BITS", "192")
    assert CipherKitConfig.get_instance().crypto.default_key_bits == 256

    CipherKitConfig.reset_instance()
    assert CipherKitConfig.get_instance().crypto.default_key_bits == 192


def test_hash_and_repr():
    a = CipherKitConfig()
    b = CipherKitConfig()
    c = CipherKitConfig(crypto=CryptoConfig(default_key_bits=128))
    assert a.config_hash == b.config_hash
    assert a.config_hash != c.config_hash
    assert repr(a) == f"CipherKitConfig(hash={a.config_hash})"

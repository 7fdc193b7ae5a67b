"""
Secure Configuration Module
===========================

Provides immutable, environment-aware configuration for cipherkit.

Security Features:
- Immutable configuration after initialization
- Environment variable override support
- Key material is never read from configuration
- Type-safe configuration access
"""

from __future__ import annotations

import hashlib
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Any, Optional


# Security Constants
_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "password", "secret", "key", "token", "private", "credential", "salt", "nonce"
})

# Settings that describe sizes rather than secrets, even though their
# names contain a sensitive word.
_NON_SECRET_KEYS: Final[frozenset[str]] = frozenset({
    "crypto.default_key_bits",
    "crypto.min_mac_key_bytes",
})

_VALID_LOG_LEVELS: Final[frozenset[str]] = frozenset({
    "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
})


def _is_sensitive_key(key: str) -> bool:
    """Check if a configuration key might contain sensitive data."""
    if key in _NON_SECRET_KEYS:
        return False
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class CryptoConfig:
    """Immutable crypto defaults."""

    default_key_bits: int = 256
    min_mac_key_bytes: int = 32  # shorter HMAC keys are accepted but logged

    def __post_init__(self) -> None:
        """Validate crypto settings."""
        if self.default_key_bits <= 0 or self.default_key_bits % 8 != 0:
            raise ValueError("default_key_bits must be a positive multiple of 8")
        if self.min_mac_key_bytes < 1:
            raise ValueError("min_mac_key_bytes must be at least 1")


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Immutable logging configuration."""

    level: str = "INFO"
    enable_console: bool = True
    enable_file: bool = False
    log_dir: Optional[Path] = None
    max_file_size_bytes: int = 10 * 1024 * 1024  # 10 MB
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate logging settings."""
        if self.level.upper() not in _VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.level}")
        if self.log_dir is not None and not self.log_dir.is_absolute():
            raise ValueError(f"log_dir must be an absolute path: {self.log_dir}")
        if self.backup_count < 0:
            raise ValueError("backup_count cannot be negative")


class CipherKitConfig:
    """
    Centralized, immutable configuration loader with environment override support.

    Usage:
        config = CipherKitConfig.load()
        bits = config.crypto.default_key_bits
        level = config.logging.level
    """

    __slots__ = ("_crypto", "_logging", "_frozen", "_config_hash")

    _instance: Optional[CipherKitConfig] = None
    _instance_lock = threading.Lock()

    def __init__(
        self,
        crypto: Optional[CryptoConfig] = None,
        logging: Optional[LoggingConfig] = None,
    ) -> None:
        """Initialize configuration. Use CipherKitConfig.load() for standard initialization."""
        object.__setattr__(self, "_frozen", False)
        object.__setattr__(self, "_crypto", crypto or CryptoConfig())
        object.__setattr__(self, "_logging", logging or LoggingConfig())
        object.__setattr__(self, "_config_hash", self._compute_hash())
        object.__setattr__(self, "_frozen", True)

    def _compute_hash(self) -> str:
        """Compute a hash of the configuration for integrity checking."""
        config_str = f"{self._crypto}|{self._logging}"
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @property
    def crypto(self) -> CryptoConfig:
        """Get crypto configuration."""
        return self._crypto

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration."""
        return self._logging

    @property
    def config_hash(self) -> str:
        """Get configuration integrity hash."""
        return self._config_hash

    @classmethod
    def load(cls, env_prefix: str = "CIPHERKIT") -> CipherKitConfig:
        """
        Load configuration with environment variable overrides.

        Environment variables use the CIPHERKIT_ prefix and double
        underscores for nested values.

        Examples:
            CIPHERKIT_LOGGING__LEVEL=DEBUG
            CIPHERKIT_CRYPTO__DEFAULT_KEY_BITS=128
            CIPHERKIT_LOGGING__LOG_DIR=/var/log/cipherkit

        Args:
            env_prefix: Prefix for environment variables (default: CIPHERKIT)

        Returns:
            Configured CipherKitConfig instance

        Raises:
            ValueError: If an override has an invalid value
        """
        env_overrides = cls._parse_env_overrides(env_prefix)

        crypto_kwargs: dict[str, Any] = {}
        if "crypto.default_key_bits" in env_overrides:
            crypto_kwargs["default_key_bits"] = int(env_overrides["crypto.default_key_bits"])
        if "crypto.min_mac_key_bytes" in env_overrides:
            crypto_kwargs["min_mac_key_bytes"] = int(env_overrides["crypto.min_mac_key_bytes"])

        logging_kwargs: dict[str, Any] = {}
        if "logging.level" in env_overrides:
            logging_kwargs["level"] = env_overrides["logging.level"].upper()
        if "logging.enable_console" in env_overrides:
            logging_kwargs["enable_console"] = _parse_bool(env_overrides["logging.enable_console"])
        if "logging.enable_file" in env_overrides:
            logging_kwargs["enable_file"] = _parse_bool(env_overrides["logging.enable_file"])
        if "logging.log_dir" in env_overrides:
            logging_kwargs["log_dir"] = Path(env_overrides["logging.log_dir"])

        return cls(
            crypto=CryptoConfig(**crypto_kwargs) if crypto_kwargs else None,
            logging=LoggingConfig(**logging_kwargs) if logging_kwargs else None,
        )

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Parse environment variables with the given prefix."""
        overrides: dict[str, str] = {}
        prefix_upper = f"{prefix.upper()}_"

        for key, value in os.environ.items():
            if key.startswith(prefix_upper):
                # CIPHERKIT_SECTION__KEY -> section.key
                config_key = key[len(prefix_upper):].lower().replace("__", ".")

                # SECURITY: never take key material from the environment
                if _is_sensitive_key(config_key):
                    continue

                overrides[config_key] = value

        return overrides

    @classmethod
    def get_instance(cls) -> CipherKitConfig:
        """
        Get or create the singleton configuration instance.

        Returns:
            The global CipherKitConfig instance
        """
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls.load()
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance. Use only for testing."""
        with cls._instance_lock:
            cls._instance = None

    def __repr__(self) -> str:
        """Safe string representation."""
        return f"CipherKitConfig(hash={self._config_hash})"

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after initialization."""
        if hasattr(self, "_frozen") and self._frozen:
            raise AttributeError("CipherKitConfig is immutable after initialization")
        super().__setattr__(name, value)

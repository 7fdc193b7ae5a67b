"""
Utility functions for cipherkit.
"""

from cipherkit.utils.validators import (
    ValidationError,
    validate_bytes,
    validate_byte_count,
    validate_key_bits,
)

__all__ = [
    "ValidationError",
    "validate_bytes",
    "validate_byte_count",
    "validate_key_bits",
]

"""
Validation Utilities
====================

Input validation for byte strings and bit lengths handed to the crypto core.
"""

from __future__ import annotations

from typing import Any


class ValidationError(ValueError):
    """Raised when validation fails."""
    pass


def validate_bytes(
    value: Any,
    field_name: str = "value",
    allow_empty: bool = True,
) -> bytes:
    """
    Validate that a value is a bytes-like object and return it as bytes.

    Args:
        value: The value to validate (bytes, bytearray or memoryview)
        field_name: Name of the field for error messages
        allow_empty: If False, empty byte strings are rejected

    Returns:
        The value as an immutable bytes object

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise ValidationError(
            f"{field_name} must be bytes, not {type(value).__name__}"
        )

    result = bytes(value)

    if not allow_empty and not result:
        raise ValidationError(f"{field_name} cannot be empty")

    return result


def validate_key_bits(bits: Any) -> int:
    """
    Validate a requested key size in bits.

    Only checks that the size is a positive multiple of 8. Whether the
    cipher accepts it is decided when the key is used.

    Raises:
        ValidationError: If bits is not a positive multiple of 8
    """
    if isinstance(bits, bool) or not isinstance(bits, int):
        raise ValidationError("Key size must be an integer number of bits")
    if bits <= 0 or bits % 8 != 0:
        raise ValidationError(
            f"Key size must be a positive multiple of 8 bits, got {bits}"
        )
    return bits


def validate_byte_count(count: Any, field_name: str = "count") -> int:
    """Validate a non-negative byte count."""
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError(f"{field_name} must be an integer")
    if count < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return count

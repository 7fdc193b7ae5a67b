"""
Shared fixtures: deterministic random sources and configuration isolation.
"""

import hashlib
import os
import threading
from typing import Iterator

import pytest

from cipherkit.core.config import CipherKitConfig


class DeterministicRandomSource:
    """SHAKE-256 counter stream. Reproducible, never for real keys."""

    def __init__(self, seed: bytes = b"cipherkit-tests") -> None:
        self._seed = seed
        self._counter = 0
        self._lock = threading.Lock()

    def next_bytes(self, n: int) -> bytes:
        with self._lock:
            self._counter += 1
            block = self._seed + self._counter.to_bytes(8, "big")
        return hashlib.shake_256(block).digest(n) if n else b""


class FixedRandomSource:
    """Returns queued byte strings in order, for known-answer tests."""

    def __init__(self, *outputs: bytes) -> None:
        self._outputs = list(outputs)

    def next_bytes(self, n: int) -> bytes:
        out = self._outputs.pop(0)
        assert len(out) == n, f"queued {len(out)} bytes, caller asked for {n}"
        return out


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch) -> Iterator[None]:
    """Strip CIPHERKIT_* variables and reset the config singleton per test."""
    for name in list(os.environ):
        if name.startswith("CIPHERKIT_"):
            monkeypatch.delenv(name, raising=False)
    CipherKitConfig.reset_instance()
    yield
    CipherKitConfig.reset_instance()


@pytest.fixture
def deterministic_source() -> DeterministicRandomSource:
    return DeterministicRandomSource()


@pytest.fixture
def seeded_source():
    """Factory for DeterministicRandomSource instances with a given seed."""
    return DeterministicRandomSource


@pytest.fixture
def fixed_source():
    """Factory for FixedRandomSource instances."""
    return FixedRandomSource


def _flip_bit(data: bytes, bit: int) -> bytes:
    out = bytearray(data)
    out[bit // 8] ^= 1 << (bit % 8)
    return bytes(out)


@pytest.fixture
def flip_bit():
    """Return a function that copies bytes with one bit inverted."""
    return _flip_bit

"""Unit tests for serial number generation."""

import secrets

import pytest

from ca_engine.crypto_utils import new_serial_number
from ca_engine.errors import CryptoError


class TestSerialNumbers:
    """Test serial numbers are random 128-bit integers."""

    def test_serial_number_range(self):
        for _ in range(100):
            serial = new_serial_number()
            assert 1 <= serial < 2 ** 128

    def test_serial_numbers_are_distinct(self):
        """10,000 draws are pairwise distinct with overwhelming probability."""
        serials = [new_serial_number() for _ in range(10000)]
        assert len(set(serials)) == len(serials)

    def test_serial_numbers_use_high_bits(self):
        serials = [new_serial_number() for _ in range(1000)]
        assert max(serials).bit_length() > 120

    def test_random_source_failure_is_fatal(self, monkeypatch):
        def broken(upper):
            raise OSError("entropy source unavailable")

        monkeypatch.setattr(secrets, "randbelow", broken)

        with pytest.raises(CryptoError):
            new_serial_number()

    def test_serial_number_never_zero(self, monkeypatch):
        monkeypatch.setattr(secrets, "randbelow", lambda upper: 0)
        assert new_serial_number() == 1

    def test_serial_number_upper_bound(self, monkeypatch):
        monkeypatch.setattr(secrets, "randbelow", lambda upper: upper - 1)
        assert new_serial_number() == 2 ** 128 - 1

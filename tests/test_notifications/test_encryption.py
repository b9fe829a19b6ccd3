"""Tests for actor id encryption."""

import pytest

from src.notifications.encryption import decrypt_string, encrypt_string


class TestEncryption:

    def test_round_trip(self):
        token = encrypt_string("user_123", "secret")
        assert decrypt_string(token, "secret") == "user_123"

    def test_format_is_iv_and_ciphertext_hex(self):
        iv_hex, ciphertext_hex = encrypt_string("user_123", "secret").split(":")
        assert len(iv_hex) == 32
        assert len(ciphertext_hex) % 32 == 0

    def test_random_iv(self):
        assert encrypt_string("user_123", "secret") != encrypt_string("user_123", "secret")

    def test_malformed_token(self):
        with pytest.raises(ValueError, match="Malformed"):
            decrypt_string("not-a-token", "secret")

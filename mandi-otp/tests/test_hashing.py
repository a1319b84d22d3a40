"""
Tests for code generation and hashing helpers.
"""

from unittest.mock import patch

from mandi_otp.otp.hashing import (
    generate_otp,
    generate_salt,
    hash_otp,
    mask_identifier,
    verify_otp_hash,
)


class TestGenerateOTP:

    def test_default_is_six_digits(self):
        for _ in range(50):
            code = generate_otp()
            assert len(code) == 6
            assert code.isdigit()

    def test_custom_length(self):
        assert len(generate_otp(4)) == 4
        assert len(generate_otp(8)) == 8

    def test_leading_zeros_are_kept(self):
        with patch("mandi_otp.otp.hashing.secrets.randbelow", return_value=42):
            assert generate_otp(6) == "000042"

    def test_codes_vary(self):
        codes = {generate_otp() for _ in range(50)}
        assert len(codes) > 1


class TestHashing:

    def test_hash_is_deterministic_per_salt(self):
        assert hash_otp("123456", "salt") == hash_otp("123456", "salt")
        assert hash_otp("123456", "salt") != hash_otp("123456", "other")

    def test_verify_accepts_matching_code(self):
        salt = generate_salt()
        stored = hash_otp("123456", salt)

        assert verify_otp_hash("123456", salt, stored)
        assert verify_otp_hash(" 123456 ", salt, stored)
        assert not verify_otp_hash("123457", salt, stored)

    def test_salts_are_unique(self):
        assert generate_salt() != generate_salt()


class TestMaskIdentifier:

    def test_phone_keeps_last_four(self):
        assert mask_identifier("+910000001234") == "*********1234"

    def test_email_keeps_first_letter_and_domain(self):
        assert mask_identifier("asha@example.com") == "a***@example.com"

    def test_short_value_fully_masked(self):
        assert mask_identifier("123") == "***"

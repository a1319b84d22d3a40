"""
Tests for OTP settings.
"""

import pytest

from mandi_otp.config import OTPSettings, PurposePolicy
from mandi_otp.exceptions import ConfigurationError
from mandi_otp.otp.models import Purpose


class TestDefaults:

    def test_defaults(self):
        settings = OTPSettings()

        assert settings.otp_length == 6
        assert settings.registration == PurposePolicy(300, 5, 900)
        assert settings.login == PurposePolicy(120, 3, 120)
        assert settings.max_verify_attempts == 5
        assert settings.lockout_seconds == 1800
        assert settings.staging_ttl_seconds == 600
        assert settings.expose_code is False
        assert settings.redis_url is None

    def test_policy_for_purpose(self):
        settings = OTPSettings()

        assert settings.policy_for(Purpose.LOGIN) is settings.login
        assert settings.policy_for(Purpose.REGISTRATION) is settings.registration
        assert settings.policy_for("login") is settings.login


class TestFromEnv:

    def test_empty_environment_gives_defaults(self):
        assert OTPSettings.from_env({}) == OTPSettings()

    def test_reads_overrides(self):
        settings = OTPSettings.from_env({
            "OTP_LENGTH": "8",
            "OTP_TTL_SECONDS": "600",
            "OTP_LOGIN_RATE_LIMIT": "10",
            "OTP_LOCKOUT_SECONDS": "60",
            "OTP_DELIVERY_TIMEOUT_SECONDS": "2.5",
            "OTP_REDIS_URL": "redis://localhost:6379/0",
        })

        assert settings.otp_length == 8
        assert settings.registration.ttl_seconds == 600
        assert settings.login.rate_limit == 10
        assert settings.lockout_seconds == 60
        assert settings.delivery_timeout_seconds == 2.5
        assert settings.redis_url == "redis://localhost:6379/0"

    @pytest.mark.parametrize("value,expected", [
        ("true", True),
        ("1", True),
        ("YES", True),
        ("false", False),
        ("", False),
    ])
    def test_expose_code_flag(self, value, expected):
        assert OTPSettings.from_env({"OTP_EXPOSE_CODE": value}).expose_code is expected

    def test_non_integer_rejected(self):
        with pytest.raises(ConfigurationError, match="OTP_LENGTH"):
            OTPSettings.from_env({"OTP_LENGTH": "six"})

    def test_non_number_rejected(self):
        with pytest.raises(ConfigurationError, match="OTP_DELIVERY_TIMEOUT_SECONDS"):
            OTPSettings.from_env({"OTP_DELIVERY_TIMEOUT_SECONDS": "soon"})

    @pytest.mark.parametrize("value", ["0", "-5"])
    def test_sweep_interval_must_be_positive(self, value):
        with pytest.raises(ConfigurationError, match="sweep_interval_seconds"):
            OTPSettings.from_env({"OTP_SWEEP_INTERVAL_SECONDS": value})


class TestValidate:

    @pytest.mark.parametrize("overrides", [
        {"otp_length": 0},
        {"max_verify_attempts": 0},
        {"lockout_seconds": -1},
        {"staging_ttl_seconds": 0},
        {"delivery_timeout_seconds": 0},
        {"sweep_interval_seconds": 0},
        {"sweep_interval_seconds": -5},
        {"registration": PurposePolicy(ttl_seconds=0)},
        {"login": PurposePolicy(rate_limit=0)},
    ])
    def test_rejects_unusable_values(self, overrides):
        with pytest.raises(ConfigurationError):
            OTPSettings(**overrides).validate()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            OTPSettings(otp_length=0).validate()

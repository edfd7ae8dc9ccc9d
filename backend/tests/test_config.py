"""
East Village Everything — Settings Tests
==========================================

What we test:
    ✅ Seed admin email is stored trimmed and lowercased
    ✅ Log level is upper-cased and validated
    ✅ The default session secret is refused for production
"""

import pytest
from pydantic import ValidationError

from app.config import DEFAULT_SESSION_SECRET, Settings


class TestSeedAdminEmail:

    def test_lowercased(self):
        settings = Settings(admin_seed_email="  Admin@EastVillageEverything.COM ")
        assert settings.admin_seed_email == "admin@eastvillageeverything.com"


class TestLogLevel:

    def test_upper_cased(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")


class TestProductionCheck:

    def test_default_secret_refused(self):
        settings = Settings(session_secret=DEFAULT_SESSION_SECRET)
        with pytest.raises(ValueError, match="SESSION_SECRET"):
            settings.validate_required_for_production()

    def test_custom_secret_accepted(self):
        Settings(session_secret="a-real-secret").validate_required_for_production()

"""Tests for settings loading."""

from storefront.config import MomoSettings, Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("STOREFRONT_SHIPPING_FEE", raising=False)

        settings = Settings(_env_file=None)

        assert settings.free_shipping_threshold == 1_000_000
        assert settings.shipping_fee == 30_000
        assert settings.momo.request_type == "captureWallet"
        assert settings.momo.max_attempts == 1

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("STOREFRONT_SHIPPING_FEE", "25000")
        monkeypatch.setenv("STOREFRONT_MOMO_PARTNER_CODE", "MOMOLIVE")
        monkeypatch.setenv("STOREFRONT_MOMO_SECRET_KEY", "s3cret")

        settings = Settings.load()

        assert settings.shipping_fee == 25_000
        assert settings.momo.partner_code == "MOMOLIVE"
        assert settings.momo.secret_key.get_secret_value() == "s3cret"
        assert "s3cret" not in repr(MomoSettings())

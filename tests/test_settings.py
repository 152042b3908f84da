"""Tests for configuration settings."""


def test_settings_loads_from_env():
    """Test that settings loads from environment variables."""
    from payout_ledger.config.settings import get_settings

    get_settings.cache_clear()
    settings = get_settings()

    assert settings.stripe_secret_key.get_secret_value() == "sk_test_123"
    assert settings.wave_full_access_token.get_secret_value() == "wave-token-123"


def test_settings_has_defaults(monkeypatch):
    """Test that settings has sensible defaults."""
    from payout_ledger.config.settings import get_settings

    for name in ("WAVE_PREFIX", "SALES_TAX_ID", "HTTP_TIMEOUT", "STRIPE_API_URL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    settings = get_settings()

    assert settings.stripe_api_url == "https://api.stripe.com"
    assert settings.wave_graphql_endpoint == "https://gql.waveapps.com/graphql/public"
    assert settings.wave_prefix == ""
    assert settings.sales_tax_id is None
    assert settings.http_timeout == 30.0
    get_settings.cache_clear()


def test_settings_reads_prefix_and_sales_tax(monkeypatch):
    """Test the optional import settings."""
    from payout_ledger.config.settings import get_settings

    monkeypatch.setenv("WAVE_PREFIX", "stripe-")
    monkeypatch.setenv("SALES_TAX_ID", "tax-9")
    get_settings.cache_clear()
    settings = get_settings()

    assert settings.wave_prefix == "stripe-"
    assert settings.sales_tax_id == "tax-9"
    get_settings.cache_clear()


def test_settings_are_cached():
    """Test that get_settings returns cached instance."""
    from payout_ledger.config.settings import get_settings

    get_settings.cache_clear()

    settings1 = get_settings()
    settings2 = get_settings()

    assert settings1 is settings2

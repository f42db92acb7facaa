from cryptoscope.config import Settings


def test_defaults_point_at_public_hosts(monkeypatch):
    for name in ("COINGECKO_BASE_URL", "DEFILLAMA_YIELDS_BASE_URL", "REQUEST_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.coingecko_base_url == "https://api.coingecko.com/api/v3"
    assert settings.defillama_yields_base_url == "https://yields.llama.fi"
    assert settings.request_timeout_seconds == 10.0


def test_environment_overrides(monkeypatch):
    """Environment variables override base URLs and the request timeout."""

    monkeypatch.setenv("COINGECKO_BASE_URL", "http://localhost:9000/api/v3")
    monkeypatch.setenv("request_timeout_seconds", "2.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.coingecko_base_url == "http://localhost:9000/api/v3"
    assert settings.request_timeout_seconds == 2.5
    assert settings.log_level == "debug"

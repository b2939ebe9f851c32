"""
Tests for environment-driven settings.
"""

from config.settings import Settings


def test_original_environment_names(monkeypatch):
    monkeypatch.setenv("YOUTRACK_HUB_URL", "https://yt.example/hub/")
    monkeypatch.setenv("YOUTRACK_CLIENTID", "client-1")
    monkeypatch.setenv("YOUTRACK_CLIENTSECRET", "s3cret")

    settings = Settings(_env_file=None)

    assert settings.youtrack_client_id == "client-1"
    assert settings.youtrack_client_secret == "s3cret"
    assert settings.authorize_endpoint == "https://yt.example/hub/api/rest/oauth2/auth"
    assert settings.token_endpoint == "https://yt.example/hub/api/rest/oauth2/token"


def test_long_environment_names(monkeypatch):
    monkeypatch.setenv("YOUTRACK_CLIENT_ID", "client-2")
    monkeypatch.setenv("OAUTH_STATE_TTL_SECONDS", "120")
    monkeypatch.setenv("OAUTH_SCOPES", '["YouTrack", "Hub"]')

    settings = Settings(_env_file=None)

    assert settings.youtrack_client_id == "client-2"
    assert settings.oauth_state_ttl_seconds == 120
    assert settings.oauth_scopes == ["YouTrack", "Hub"]


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.callback_path == "/callback"
    assert settings.oauth_use_pkce is True
    assert settings.oauth_expiry_skew_seconds == 60
    assert settings.redis_url is None

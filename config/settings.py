"""
Application settings loaded from environment variables.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── YouTrack Hub OAuth2 ─────────────────────────────────────────────
    youtrack_hub_url: str = Field(
        "http://localhost:8080/hub",
        validation_alias=AliasChoices("youtrack_hub_url", "youtrack_hub"),
    )
    youtrack_client_id: str = Field(
        "",
        validation_alias=AliasChoices("youtrack_client_id", "youtrack_clientid"),
    )
    youtrack_client_secret: str = Field(
        "",
        validation_alias=AliasChoices("youtrack_client_secret", "youtrack_clientsecret"),
    )
    auth_callback_url: str = "http://127.0.0.1:5000/callback"   # registered redirect URI
    callback_path: str = "/callback"
    oauth_scopes: List[str] = ["YouTrack"]
    oauth_use_pkce: bool = True

    # ── Correlation / token lifetimes ───────────────────────────────────
    oauth_state_ttl_seconds: int = 600
    oauth_state_capacity: int = 1024
    token_cache_capacity: int = 4096
    token_retention_grace_seconds: int = 30 * 24 * 3600   # keep expired creds around for refresh
    oauth_expiry_skew_seconds: int = 60
    oauth_http_timeout_seconds: float = 10.0

    # ── Shared store ─────────────────────────────────────────────────────
    redis_url: Optional[str] = None          # e.g. redis://localhost:6379/0
    token_encryption_key: str = ""           # Fernet key for tokens written to Redis

    # ── Server ───────────────────────────────────────────────────────────
    host: str = "127.0.0.1"
    port: int = 5000
    debug: bool = False

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def authorize_endpoint(self) -> str:
        return f"{self.youtrack_hub_url.rstrip('/')}/api/rest/oauth2/auth"

    @property
    def token_endpoint(self) -> str:
        return f"{self.youtrack_hub_url.rstrip('/')}/api/rest/oauth2/token"


config = Settings()

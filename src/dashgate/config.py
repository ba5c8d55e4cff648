from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings

# Only ever used when debug is enabled
DEV_SESSION_SECRET = "fallback-session-secret"


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    # Shared HMAC key for session tokens, read by both the route gate and the request handlers
    session_secret: str = Field(
        default="",
        validation_alias=AliasChoices("DASHGATE_SESSION_SECRET", "DASHGATE_ADMIN_KEY"),
        repr=False,
    )
    session_cookie_name: str = "dashgate_session"
    session_lifetime_days: int = 30
    # Well-known bootstrap account, must rotate its password on first login
    default_username: str = "admin"
    default_password: str = Field(default="admin", repr=False)
    protected_prefix: str = "/dashboard"
    cors_origins: list[str] = []
    forwarded_allow_ips: str = "127.0.0.1"  # Proxies trusted for X-Forwarded-* headers

    model_config = {
        "env_file": [".env"],
        "env_prefix": "DASHGATE_",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def resolve_session_secret(self) -> "Config":
        """Fail fast on a missing secret unless running in debug mode."""
        if not self.session_secret:
            if not self.debug:
                raise ValueError("DASHGATE_SESSION_SECRET must be set outside debug mode")
            self.session_secret = DEV_SESSION_SECRET
        return self

    @property
    def login_path(self) -> str:
        """Login entry page, always directly under the protected prefix."""
        return self.protected_prefix.rstrip("/") + "/login"

    @property
    def secure_cookies(self) -> bool:
        return not self.debug

    @property
    def session_lifetime_seconds(self) -> int:
        return self.session_lifetime_days * 24 * 60 * 60

"""Toolkit settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

TOKEN_DEBOUNCE_DEFAULT = 0.3
CLAIMS_DEBOUNCE_DEFAULT = 0.5
KEYS_DEBOUNCE_DEFAULT = 0.5
ALGORITHM_DEBOUNCE_DEFAULT = 0.0
DEFAULT_TOKEN_TTL = 3600
DEFAULT_SECRET = "your-256-bit-secret"


class DebounceSettings(BaseSettings):
    """Per-channel debounce windows, in seconds."""

    model_config = SettingsConfigDict(env_prefix="JWTKIT_DEBOUNCE_")

    token_seconds: float = TOKEN_DEBOUNCE_DEFAULT
    claims_seconds: float = CLAIMS_DEBOUNCE_DEFAULT
    keys_seconds: float = KEYS_DEBOUNCE_DEFAULT
    algorithm_seconds: float = ALGORITHM_DEBOUNCE_DEFAULT


class ToolkitSettings(BaseSettings):
    """Session defaults and service-level settings."""

    model_config = SettingsConfigDict(env_prefix="JWTKIT_")

    default_secret: str = DEFAULT_SECRET
    default_algorithm: str = "HS256"
    default_token_ttl: int = DEFAULT_TOKEN_TTL
    export_filename: str = "jwt-token.txt"
    log_level: str = "INFO"
    cors_origins: str = ""

    def get_cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins."""
        if not self.cors_origins:
            return []
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ─────────────────────────────────────────────────
#
# pydantic-settings reads configuration from TWO sources (in priority order):
#
#   1. **Environment variables** - e.g. RUNWAY_API_KEY=key_abc123
#   2. **.env file** - key=value lines in the project root .env file
#
# Field ``runway_api_key`` maps to env var ``RUNWAY_API_KEY`` automatically.
# An empty string means "not configured": the matching tool route answers
# with a ConfigurationError instead of calling the vendor.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """toolbench application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Vendor keys ===
    google_ai_key: str = ""  # Gemini image generation + Veo
    gemini_api_key: str = ""  # Gemini REST chat endpoint
    replicate_api_token: str = ""
    runway_api_key: str = ""
    elevenlabs_api_key: str = ""
    tinypng_api_key: str = ""
    bfl_api_key: str = ""  # Black Forest Labs (Flux)

    # === Authentication ===
    # Empty AUTH_SECRET disables the session gate (local development).
    auth_secret: str = ""
    google_client_id: str = ""
    google_client_secret: str = ""
    allowed_email_domain: str = "subtropicstudios.com"
    session_cookie_ttl_hours: int = 168
    public_base_url: str = "http://localhost:8000"

    # === Storage ===
    blob_backend: str = "local"  # "local" | "s3"
    blob_local_dir: str = "data/blobs"
    blob_s3_bucket: str = ""
    blob_s3_region: str = "us-east-1"
    feedback_backend: str = "blob"  # "blob" | "sqlite"
    feedback_db_path: str = "data/feedback.db"

    # === Rate limiting ===
    rate_limit_requests: int = 30
    rate_limit_window_seconds: int = 60

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def auth_enabled(self) -> bool:
        return bool(self.auth_secret)

    def get_configured_vendors(self) -> dict[str, bool]:
        """Return a map of vendor name to whether its key is configured."""
        return {
            "gemini": bool(self.google_ai_key),
            "gemini_chat": bool(self.gemini_api_key),
            "replicate": bool(self.replicate_api_token),
            "runway": bool(self.runway_api_key),
            "elevenlabs": bool(self.elevenlabs_api_key),
            "tinypng": bool(self.tinypng_api_key),
            "bfl": bool(self.bfl_api_key),
        }

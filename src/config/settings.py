"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from (highest priority first):
#
#   1. Environment variables  -- e.g. RAPIDAPI_KEY=abc123
#   2. .env file              -- key=value lines in the project root
#
# Field ``rapidapi_key`` maps to env var ``RAPIDAPI_KEY``.  Defaults apply
# when neither source sets a value.
#
# Only secrets and process-level switches live here.  Pipeline tunables
# (retries, cache TTL, over-fetch factor) live in config/config.yaml and
# are merged by src/config/loader.py.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Event search service settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Primary events provider ===
    # Empty key = "not configured": the provider reports itself unavailable
    # and every fetch fails fast with ConfigurationError.
    rapidapi_key: str = ""
    rapidapi_host: str = "real-time-events-search.p.rapidapi.com"
    rapidapi_base_url: str = "https://real-time-events-search.p.rapidapi.com"

    # === Secondary search backend ===
    fallback_search_url: str = ""
    fallback_api_key: str = ""

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "*"  # Comma-separated list

    def get_cors_origins(self) -> list[str]:
        """Split ``cors_origins`` into a list, ignoring blanks."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def get_available_providers(self) -> list[str]:
        """Return the names of search backends that have their settings filled in."""
        providers: list[str] = []
        if self.rapidapi_key:
            providers.append("rapidapi")
        if self.fallback_search_url:
            providers.append("fallback")
        return providers

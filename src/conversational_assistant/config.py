"""
Runtime configuration.

Settings come from environment variables. Secrets may also be mounted as files
under '/secrets/<NAME>', which take precedence over the environment variable
of the same name. Unset variables fall back to the defaults below; an empty
'DATABASE_URL' selects the in-memory store, and 'GENERATION_TIMEOUT=none' (or
'0', 'off') disables the completion deadline.
"""

import os
from pathlib import Path

from pydantic import BaseModel

from conversational_assistant.routing.router import DEFAULT_MODEL

SECRETS_DIR = Path("/secrets")

# GENERATION_TIMEOUT values that disable the deadline
_DISABLED_TIMEOUTS = {"none", "off", "0"}


def _get_secret(name: str, secrets_dir: Path = SECRETS_DIR) -> str | None:
    """Load a secret from '<secrets_dir>/<name>' or the '<name>' environment variable."""
    secret_file = secrets_dir / name
    if secret_file.exists():
        return secret_file.read_text().strip()
    return os.environ.get(name) or None


class Settings(BaseModel):
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    default_model: str = DEFAULT_MODEL
    title_model: str = DEFAULT_MODEL
    temperature: float = 0.7
    max_tokens: int = 4000
    history_window: int = 10
    generation_timeout: float | None = 120.0
    database_url: str | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, secrets_dir: Path = SECRETS_DIR) -> "Settings":
        values: dict[str, str | None] = {
            "openai_api_key": _get_secret("OPENAI_API_KEY", secrets_dir),
            "openai_base_url": os.environ.get("OPENAI_BASE_URL"),
            "default_model": os.environ.get("DEFAULT_MODEL"),
            "title_model": os.environ.get("TITLE_MODEL"),
            "temperature": os.environ.get("TEMPERATURE"),
            "max_tokens": os.environ.get("MAX_TOKENS"),
            "history_window": os.environ.get("HISTORY_WINDOW"),
            "generation_timeout": os.environ.get("GENERATION_TIMEOUT"),
            "database_url": os.environ.get("DATABASE_URL"),
            "log_level": os.environ.get("LOG_LEVEL"),
        }
        settings = {key: value for key, value in values.items() if value}
        if (values["generation_timeout"] or "").strip().lower() in _DISABLED_TIMEOUTS:
            settings["generation_timeout"] = None
        return cls(**settings)

    def require_openai_api_key(self) -> str:
        if not self.openai_api_key:
            raise ValueError(
                "OPENAI_API_KEY not found. Either:\n"
                f"  - Mount it as a secret file at {SECRETS_DIR}/OPENAI_API_KEY, or\n"
                "  - Set the OPENAI_API_KEY environment variable."
            )
        return self.openai_api_key

"""Environment-driven settings.

Centralizes the knobs the CLI reads from the environment (or a ``.env`` file)
so command implementations never call ``os.getenv`` directly.

Environment variables:
    POLYCHAT_STORE: Storage backend, ``sqlite`` or ``memory`` (default: sqlite)
    POLYCHAT_DB_PATH: SQLite database path (default: ~/.polychat/polychat.db)
    POLYCHAT_SYSTEM_PROMPT: System prompt seeded into new conversations
    POLYCHAT_LOG_LEVEL: Log level for the package logger (default: WARNING)
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."
DEFAULT_DB_PATH = Path.home() / ".polychat" / "polychat.db"


class Settings(BaseModel):
    """Runtime settings for the polychat application."""

    model_config = ConfigDict(frozen=True)

    store_backend: str = Field(default="sqlite", description="Key-value backend: sqlite or memory")
    db_path: Path = Field(default=DEFAULT_DB_PATH, description="SQLite database file")
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT)
    log_level: str = Field(default="WARNING")


def load_settings() -> Settings:
    """Load settings from the environment, reading ``.env`` first if present."""
    load_dotenv()
    return Settings(
        store_backend=os.getenv("POLYCHAT_STORE", "sqlite").lower(),
        db_path=Path(os.getenv("POLYCHAT_DB_PATH", str(DEFAULT_DB_PATH))).expanduser(),
        system_prompt=os.getenv("POLYCHAT_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT),
        log_level=os.getenv("POLYCHAT_LOG_LEVEL", "WARNING"),
    )

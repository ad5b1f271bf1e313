"""Configuration for simchat.

Settings are read from environment variables (optionally via a .env
file). Constants that are not meant to be tuned per deployment live at
module level.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# User-visible reply for any failed turn
FALLBACK_MESSAGE = "Sorry, I encountered an error. Please try again."

# History window sent with each request
OWNER_HISTORY_LIMIT = 30
VISITOR_HISTORY_LIMIT = 20

# Assistant replies shorter than this are dropped from request context
MIN_ASSISTANT_REPLY_LENGTH = 10

# Knowledge search filters sent to the advisor endpoint
DEFAULT_MIN_SIMILARITY = 0.7
DEFAULT_MAX_RESULTS = 5

# Direct OpenAI defaults
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOKENS = 500
DEFAULT_TEMPERATURE = 0.7


class ChatSettings(BaseModel):
    """Runtime settings for sessions, transports and the CLI."""

    transport: str = Field(default="edge", description="Transport kind: edge, advisor or openai")
    endpoint_url: str | None = Field(default=None, description="Chat-completion endpoint URL")
    api_key: str | None = Field(default=None, description="Key sent to the endpoint")
    openai_api_key: str | None = None
    model: str = DEFAULT_OPENAI_MODEL
    timeout: float | None = Field(
        default=None,
        description="Seconds to wait for one completion; None waits indefinitely",
    )
    memory_backend: str = "memory"
    memory_path: Path = Path("./simchat.db")
    log_level: str = "WARNING"

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "ChatSettings":
        """Build settings from the environment.

        Environment variables:
            SIMCHAT_TRANSPORT: edge, advisor or openai (default: edge)
            SIMCHAT_ENDPOINT_URL: endpoint for edge/advisor transports
            SIMCHAT_API_KEY: bearer key for the endpoint
            OPENAI_API_KEY: key for the openai transport
            SIMCHAT_MODEL: model for the openai transport (default: gpt-4o-mini)
            SIMCHAT_TIMEOUT: per-turn timeout in seconds (default: none)
            SIMCHAT_MEMORY_BACKEND: memory or sqlite (default: memory)
            SIMCHAT_MEMORY_PATH: sqlite file (default: ./simchat.db)
            SIMCHAT_LOG_LEVEL: logging level (default: WARNING)
        """
        if dotenv:
            load_dotenv()

        timeout = os.getenv("SIMCHAT_TIMEOUT")
        return cls(
            transport=os.getenv("SIMCHAT_TRANSPORT", "edge").lower(),
            endpoint_url=os.getenv("SIMCHAT_ENDPOINT_URL") or None,
            api_key=os.getenv("SIMCHAT_API_KEY") or None,
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            model=os.getenv("SIMCHAT_MODEL", DEFAULT_OPENAI_MODEL),
            timeout=float(timeout) if timeout else None,
            memory_backend=os.getenv("SIMCHAT_MEMORY_BACKEND", "memory").lower(),
            memory_path=Path(os.getenv("SIMCHAT_MEMORY_PATH", "./simchat.db")),
            log_level=os.getenv("SIMCHAT_LOG_LEVEL", "WARNING"),
        )


def configure_logging(level: str = "WARNING") -> None:
    """Route simchat logs through rich. Intended for applications, not libraries."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )

"""
Configuration - Environment-driven settings.

All settings come from environment variables so the same build runs
locally, in tests and in a container:

    DRILL_ENV              development | production
    DRILL_DATA_DIR         directory for JSON session files (unset = in-memory)
    ALLOWED_ORIGINS        comma-separated CORS origins
    DRILL_API_TOKENS       "token:owner,token2:owner2"
    DRILL_FEEDBACK_DELAY   seconds a wrong-answer message stays up
    DRILL_SYNC_INTERVAL    seconds between sync polls
    DRILL_LOG_LEVEL        logging level name
    DRILL_HOST / DRILL_PORT
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import os

DEFAULT_FEEDBACK_DELAY = 2.0
DEFAULT_SYNC_INTERVAL = 2.0

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class DrillConfig:
    """Runtime settings for the server and clients."""
    env: str = "development"
    data_dir: str | None = None
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    api_tokens: dict[str, str] = field(default_factory=dict)
    feedback_delay: float = DEFAULT_FEEDBACK_DELAY
    sync_interval: float = DEFAULT_SYNC_INTERVAL
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> DrillConfig:
        """Build a config from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            env=env.get("DRILL_ENV", "development"),
            data_dir=env.get("DRILL_DATA_DIR") or None,
            allowed_origins=[
                origin.strip()
                for origin in env.get("ALLOWED_ORIGINS", "*").split(",")
                if origin.strip()
            ],
            api_tokens=parse_token_map(env.get("DRILL_API_TOKENS", "")),
            feedback_delay=float(env.get("DRILL_FEEDBACK_DELAY", DEFAULT_FEEDBACK_DELAY)),
            sync_interval=float(env.get("DRILL_SYNC_INTERVAL", DEFAULT_SYNC_INTERVAL)),
            log_level=env.get("DRILL_LOG_LEVEL", "INFO").upper(),
            host=env.get("DRILL_HOST", "127.0.0.1"),
            port=int(env.get("DRILL_PORT", "8000")),
        )


def parse_token_map(raw: str) -> dict[str, str]:
    """
    Parse "token:owner,token2:owner2" into {token: owner}.

    Entries without a colon or with an empty side are skipped.
    """
    tokens: dict[str, str] = {}
    for entry in raw.split(","):
        token, sep, owner = entry.strip().partition(":")
        if sep and token.strip() and owner.strip():
            tokens[token.strip()] = owner.strip()
    return tokens


def configure_logging(level: str = "INFO"):
    """Configure root logging for the CLI and server."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )

"""
Rule and server configuration.
"""

import os

from pydantic import BaseModel, Field, field_validator


class RuleConfig(BaseModel):
    """Tunable rules for the element draft."""

    word_length: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Exact number of letters a bonus word must have"
    )
    placement_ladder: list[int] = Field(
        default_factory=lambda: [8, 5, 2],
        description="Points for 1st, 2nd, 3rd... word spellers; later places score 0"
    )
    full_deck_size: int = Field(
        default=103,
        ge=1,
        description="Deck size at which the radioactivity rule is scored"
    )

    @field_validator('placement_ladder')
    @classmethod
    def validate_ladder(cls, v):
        """Ladder values must be non-negative and never increase."""
        if any(points < 0 for points in v):
            raise ValueError('placement_ladder values must be >= 0')
        if any(a < b for a, b in zip(v, v[1:])):
            raise ValueError('placement_ladder must be non-increasing')
        return v


class ServerConfig(BaseModel):
    """Settings for the WebSocket game server."""

    host: str = "0.0.0.0"
    port: int = Field(default=8765, ge=1, le=65535)
    log_level: str = "INFO"
    commit_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts to commit an action before reporting a conflict"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f'Unknown log level: {v}')
        return level

    @classmethod
    def from_env(cls, environ=None):
        """Build a config from PERIODIC_* environment variables."""
        environ = os.environ if environ is None else environ
        values = {}
        for field_name, env_name in (
            ("host", "PERIODIC_HOST"),
            ("port", "PERIODIC_PORT"),
            ("log_level", "PERIODIC_LOG_LEVEL"),
            ("commit_retries", "PERIODIC_COMMIT_RETRIES"),
        ):
            if env_name in environ:
                values[field_name] = environ[env_name]
        return cls(**values)


# Default configuration instance
default_rules = RuleConfig()

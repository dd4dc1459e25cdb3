"""Configuration module for benchdiff."""

from .compat import env_bool
from .settings import (
    BENCHDIFF_LOGGING,
    LOG_DIR,
    LOG_LEVEL,
    LOG_PATH,
    MAX_LOG_SIZE_BYTES,
    BenchdiffConfig,
)

__all__ = [
    "BENCHDIFF_LOGGING",
    "LOG_DIR",
    "LOG_LEVEL",
    "LOG_PATH",
    "MAX_LOG_SIZE_BYTES",
    "BenchdiffConfig",
    "env_bool",
]

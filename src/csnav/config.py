"""Configuration management for csnav."""

import os
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()


DEFAULT_IGNORED_DIRS = [
    "bin",
    "obj",
    ".git",
    ".vs",
    ".idea",
    "node_modules",
    "packages",
    "TestResults",
]

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class Config(BaseModel):
    """Application configuration."""

    # Discovery Settings
    max_file_size: int = Field(default=2_000_000)  # 2MB
    ignored_dirs: list[str] = Field(default_factory=lambda: DEFAULT_IGNORED_DIRS.copy())
    source_extensions: list[str] = Field(default_factory=lambda: [".cs"])
    feature_extension: str = Field(default=".feature")

    # Scan Settings
    prefilter: bool = Field(default=True)

    # Logging
    log_level: str = Field(default="WARNING")

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        def _parse_int(value: Optional[str], fallback: int) -> int:
            try:
                return int(value) if value is not None else fallback
            except ValueError:
                return fallback

        def _parse_bool(value: Optional[str], fallback: bool) -> bool:
            if value is None:
                return fallback
            lowered = value.strip().lower()
            if lowered in _TRUTHY:
                return True
            if lowered in _FALSY:
                return False
            return fallback

        ignored_dirs = DEFAULT_IGNORED_DIRS.copy()
        extra_ignored = os.getenv("CSNAV_IGNORED_DIRS")
        if extra_ignored:
            ignored_dirs.extend(
                [entry.strip() for entry in extra_ignored.split(",") if entry.strip()]
            )

        return cls(
            max_file_size=_parse_int(os.getenv("CSNAV_MAX_FILE_SIZE"), 2_000_000),
            ignored_dirs=ignored_dirs,
            feature_extension=os.getenv("CSNAV_FEATURE_EXTENSION", ".feature"),
            prefilter=_parse_bool(os.getenv("CSNAV_PREFILTER"), True),
            log_level=os.getenv("CSNAV_LOG_LEVEL", "WARNING").upper(),
        )

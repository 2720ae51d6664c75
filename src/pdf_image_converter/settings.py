from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from .config import CONFIG_FILE

ENV_PREFIX = "PIC_"


@dataclass(frozen=True, slots=True)
class Settings:
    """Process-level settings sourced from environment variables."""

    config_path: Path = CONFIG_FILE
    output_dir: Path | None = None


def _read_settings() -> Settings:
    config_env = os.getenv(f"{ENV_PREFIX}CONFIG_PATH")
    output_env = os.getenv(f"{ENV_PREFIX}OUTPUT_DIR")
    config_path = Path(config_env) if config_env else CONFIG_FILE
    output_dir = Path(output_env) if output_env else None
    return Settings(config_path=config_path, output_dir=output_dir)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return _read_settings()


__all__ = ["ENV_PREFIX", "Settings", "get_settings"]

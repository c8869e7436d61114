"""Cart storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Final

from .env import env_float, optional_env_var

APP_DIR_NAME: Final[str] = "batchvote"
CARTS_DIR_NAME: Final[str] = "carts"
DEFAULT_CART_MAX_AGE_HOURS: Final[float] = 24.0


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Where carts live on disk and how long a saved cart stays valid."""

    data_dir: Path
    cart_max_age: timedelta = timedelta(hours=DEFAULT_CART_MAX_AGE_HOURS)

    def carts_dir(self, *, ensure: bool = True) -> Path:
        path = self.data_dir.expanduser().resolve() / CARTS_DIR_NAME
        if ensure:
            path.mkdir(parents=True, exist_ok=True)
        return path


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        return (Path(base) if base else Path.home() / "AppData" / "Local") / APP_DIR_NAME
    base = os.getenv("XDG_DATA_HOME")
    return (Path(base) if base else Path.home() / ".local" / "share") / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    env_dir = optional_env_var("BATCHVOTE_DATA_DIR")
    hours = env_float("BATCHVOTE_CART_MAX_AGE_HOURS", DEFAULT_CART_MAX_AGE_HOURS)
    return StorageConfig(
        data_dir=Path(env_dir) if env_dir else _default_data_dir(),
        cart_max_age=timedelta(hours=hours),
    )

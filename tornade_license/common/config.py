"""
Configuration settings for the licensing service.
"""

from __future__ import annotations

import logging
import math
import os
from pathlib import Path

from tornade_license.common.exceptions import ConfigurationError

DEFAULT_MAX_ACTIVATIONS = 5
DEFAULT_PREFIX = "TORNADE"
STORE_BACKENDS = ("memory", "file")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw, 10)
    except ValueError as err:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ConfigurationError(msg) from err


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as err:
        msg = f"{name} must be a number, got {raw!r}"
        raise ConfigurationError(msg) from err


class Config:
    """Central configuration class for all service settings.

    Values are read from the environment once, when the object is built.
    The object is then passed to every component; nothing mutates it
    afterwards.
    """

    def __init__(self) -> None:
        # Licensing
        secret = os.getenv("TORNADE_LICENSE_SECRET")
        if not secret:
            msg = (
                "Missing required env var: TORNADE_LICENSE_SECRET. "
                "The service cannot issue or verify keys without it."
            )
            raise ConfigurationError(msg)
        self.LICENSE_SECRET: str = secret
        self.LICENSE_PREFIX: str = os.getenv(
            "TORNADE_LICENSE_PREFIX", DEFAULT_PREFIX
        ).upper()
        self.MAX_ACTIVATIONS: int = _int_env(
            "MAX_ACTIVATIONS", DEFAULT_MAX_ACTIVATIONS
        )
        if self.MAX_ACTIVATIONS < 1:
            msg = f"MAX_ACTIVATIONS must be positive, got {self.MAX_ACTIVATIONS}"
            raise ConfigurationError(msg)

        # Activation ledger concurrency
        self.LOCK_TIMEOUT: float = _float_env("TORNADE_LOCK_TIMEOUT", 5.0)
        self.MAX_CAS_RETRIES: int = _int_env("TORNADE_MAX_CAS_RETRIES", 10)
        if not 0 <= self.LOCK_TIMEOUT < math.inf:
            msg = (
                "TORNADE_LOCK_TIMEOUT must be a finite, non-negative number, "
                f"got {self.LOCK_TIMEOUT}"
            )
            raise ConfigurationError(msg)
        if self.MAX_CAS_RETRIES < 0:
            msg = (
                "TORNADE_MAX_CAS_RETRIES must not be negative, "
                f"got {self.MAX_CAS_RETRIES}"
            )
            raise ConfigurationError(msg)

        # Store settings
        self.BASE_DIR: Path = Path(__file__).parent.parent
        self.DATA_DIR: Path = Path(
            os.getenv("TORNADE_DATA_DIR", str(self.BASE_DIR / "data"))
        )
        self.STORE_BACKEND: str = os.getenv("TORNADE_STORE_BACKEND", "file").lower()
        if self.STORE_BACKEND not in STORE_BACKENDS:
            msg = (
                f"TORNADE_STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, "
                f"got {self.STORE_BACKEND!r}"
            )
            raise ConfigurationError(msg)
        self.STORE_PATH: Path = Path(
            os.getenv("TORNADE_STORE_PATH", str(self.DATA_DIR / "activations.json"))
        )
        self.STORE_NAMESPACE: str = os.getenv(
            "TORNADE_STORE_NAMESPACE", "activations:"
        )

        # Server settings
        self.ADMIN_PASSWORD: str | None = os.getenv("TORNADE_ADMIN_PASSWORD")
        self.SERVER_HOST: str = os.getenv("TORNADE_SERVER_HOST", "127.0.0.1")
        self.SERVER_PORT: int = _int_env("TORNADE_SERVER_PORT", 8000)
        self.SERVER_URL: str = f"http://{self.SERVER_HOST}:{self.SERVER_PORT}"

        # Logging
        level_name = os.getenv("TORNADE_LOG_LEVEL", "INFO").upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            msg = f"TORNADE_LOG_LEVEL is not a logging level: {level_name!r}"
            raise ConfigurationError(msg)
        self.LOG_LEVEL: int = level

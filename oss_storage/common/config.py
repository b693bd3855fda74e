from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

ENV_FILE = Path(".env")


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def _as_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return float(value)


def _as_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    return int(value)


@dataclass
class Settings:
    OSS_CREDENTIAL: str | None = None
    OSS_ENDPOINT: str | None = None
    OSS_BUCKET: str | None = None
    OSS_WORK_DIR: str = "/"
    OSS_CONNECT_TIMEOUT: float | None = None
    OSS_READ_TIMEOUT: float | None = None
    OSS_MAX_POOL_CONNECTIONS: int | None = None
    OSS_MAX_ATTEMPTS: int | None = None
    OSS_LOOSE_PAIR: bool = False
    ENABLE_METRICS: bool = True
    LOG_LEVEL: str = "INFO"

    def __post_init__(self) -> None:
        if not self.OSS_WORK_DIR.startswith("/"):
            raise ValueError("OSS_WORK_DIR must be an absolute path (/prefix/).")

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            OSS_CREDENTIAL=os.environ.get("OSS_CREDENTIAL"),
            OSS_ENDPOINT=os.environ.get("OSS_ENDPOINT"),
            OSS_BUCKET=os.environ.get("OSS_BUCKET"),
            OSS_WORK_DIR=os.environ.get("OSS_WORK_DIR", cls.OSS_WORK_DIR),
            OSS_CONNECT_TIMEOUT=_as_float(os.environ.get("OSS_CONNECT_TIMEOUT")),
            OSS_READ_TIMEOUT=_as_float(os.environ.get("OSS_READ_TIMEOUT")),
            OSS_MAX_POOL_CONNECTIONS=_as_int(
                os.environ.get("OSS_MAX_POOL_CONNECTIONS")
            ),
            OSS_MAX_ATTEMPTS=_as_int(os.environ.get("OSS_MAX_ATTEMPTS")),
            OSS_LOOSE_PAIR=_as_bool(
                os.environ.get("OSS_LOOSE_PAIR"), cls.OSS_LOOSE_PAIR
            ),
            ENABLE_METRICS=_as_bool(
                os.environ.get("ENABLE_METRICS"), cls.ENABLE_METRICS
            ),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL).upper(),
        )

    def to_options(self) -> dict[str, Any]:
        """Translate settings into servicer/storager construction options.

        Unset values are left out so the factories report them as missing.
        """
        options: dict[str, Any] = {"work_dir": self.OSS_WORK_DIR}
        if self.OSS_CREDENTIAL:
            options["credential"] = self.OSS_CREDENTIAL
        if self.OSS_ENDPOINT:
            options["endpoint"] = self.OSS_ENDPOINT
        if self.OSS_BUCKET:
            options["name"] = self.OSS_BUCKET

        http_client_options = {
            key: value
            for key, value in (
                ("connect_timeout", self.OSS_CONNECT_TIMEOUT),
                ("read_timeout", self.OSS_READ_TIMEOUT),
                ("max_pool_connections", self.OSS_MAX_POOL_CONNECTIONS),
                ("max_attempts", self.OSS_MAX_ATTEMPTS),
            )
            if value is not None
        }
        if http_client_options:
            options["http_client_options"] = http_client_options

        if self.OSS_LOOSE_PAIR:
            options["service_features"] = {"loose_pair": True}
            options["storage_features"] = {"loose_pair": True}
        return options


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()

"""HTTP transport options for the provider client."""

from __future__ import annotations

from botocore.config import Config
from pydantic import BaseModel, ConfigDict, Field

# OSS only serves the S3 API on virtual-hosted style URLs
DEFAULT_ADDRESSING_STYLE = "virtual"


class HTTPClientOptions(BaseModel):
    """Transport tuning passed through to botocore."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    connect_timeout: float = Field(default=60, gt=0)
    read_timeout: float = Field(default=60, gt=0)
    max_pool_connections: int = Field(default=10, ge=1)
    max_attempts: int = Field(default=3, ge=1)
    proxies: dict[str, str] | None = None


def new_config(options: HTTPClientOptions | None = None) -> Config:
    """Build a botocore ``Config`` from transport options."""
    kwargs: dict = {
        "signature_version": "s3v4",
        "s3": {"addressing_style": DEFAULT_ADDRESSING_STYLE},
    }
    if options is not None:
        kwargs.update(
            connect_timeout=options.connect_timeout,
            read_timeout=options.read_timeout,
            max_pool_connections=options.max_pool_connections,
            retries={"max_attempts": options.max_attempts, "mode": "standard"},
        )
        if options.proxies:
            kwargs["proxies"] = dict(options.proxies)
    return Config(**kwargs)

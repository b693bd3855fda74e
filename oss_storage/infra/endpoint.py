"""Endpoint string parsing.

Endpoints are configured as ``<protocol>:<host>[:<port>]``, for example
``https:oss-cn-hangzhou.aliyuncs.com`` or ``http:127.0.0.1:9000``.
"""

from __future__ import annotations

from dataclasses import dataclass

from oss_storage.domain.errors import InternalError

PROTOCOL_HTTP = "http"
PROTOCOL_HTTPS = "https"

_DEFAULT_PORTS = {PROTOCOL_HTTP: 80, PROTOCOL_HTTPS: 443}


class EndpointError(InternalError):
    """Raised when an endpoint string cannot be parsed."""

    def __init__(self, op: str, reason: str, value: str) -> None:
        self.op = op
        self.reason = reason
        self.value = value
        super().__init__(f"endpoint {op}: {reason} (value={value!r})")


@dataclass(frozen=True, slots=True)
class Endpoint:
    protocol: str
    host: str
    port: int

    def __str__(self) -> str:
        if self.port == _DEFAULT_PORTS[self.protocol]:
            return f"{self.protocol}://{self.host}"
        return f"{self.protocol}://{self.host}:{self.port}"


def parse(cfg: str) -> Endpoint:
    """Parse an endpoint string into an :class:`Endpoint`."""
    parts = cfg.split(":")
    protocol = parts[0]
    if protocol not in _DEFAULT_PORTS:
        raise EndpointError("parse", "unsupported protocol", cfg)
    if len(parts) not in (2, 3):
        raise EndpointError("parse", "invalid value", cfg)

    host = parts[1]
    # "https://host" is a common mistake, the host must be bare
    if not host or host.startswith("/"):
        raise EndpointError("parse", "invalid host", cfg)

    if len(parts) == 2:
        return Endpoint(protocol=protocol, host=host, port=_DEFAULT_PORTS[protocol])

    try:
        port = int(parts[2])
    except ValueError as exc:
        raise EndpointError("parse", "invalid port", cfg) from exc
    if not 0 < port < 65536:
        raise EndpointError("parse", "invalid port", cfg)
    return Endpoint(protocol=protocol, host=host, port=port)

"""Credential string parsing.

Credentials are configured as ``<protocol>:<value>[:<value>]`` strings, for
example ``hmac:<access_key>:<secret_key>``. Every protocol of the shared
format is recognised here. The OSS factory accepts only ``hmac`` and reports
the others as an unsupported ``credential`` option rather than as malformed.
"""

from __future__ import annotations

from dataclasses import dataclass

from oss_storage.domain.errors import InternalError

PROTOCOL_HMAC = "hmac"
PROTOCOL_API_KEY = "apikey"
PROTOCOL_FILE = "file"
PROTOCOL_ENV = "env"
PROTOCOL_BASE64 = "base64"
PROTOCOL_BASIC = "basic"

# protocol -> number of values after the protocol
_ARITY = {
    PROTOCOL_HMAC: 2,
    PROTOCOL_API_KEY: 1,
    PROTOCOL_FILE: 1,
    PROTOCOL_ENV: 0,
    PROTOCOL_BASE64: 1,
    PROTOCOL_BASIC: 2,
}


class CredentialError(InternalError):
    """Raised when a credential string cannot be parsed."""

    def __init__(self, op: str, reason: str, protocol: str = "") -> None:
        self.op = op
        self.reason = reason
        self.protocol = protocol
        # never holds the credential values
        super().__init__(f"credential {op}: {reason} (protocol={protocol!r})")


@dataclass(frozen=True, slots=True)
class Provider:
    protocol: str
    values: tuple[str, ...] = ()

    def hmac(self) -> tuple[str, str]:
        if self.protocol != PROTOCOL_HMAC:
            raise CredentialError("hmac", "protocol mismatch", self.protocol)
        access_key, secret_key = self.values
        return access_key, secret_key

    def __repr__(self) -> str:
        return f"Provider(protocol={self.protocol!r})"


def parse(cfg: str) -> Provider:
    """Parse a credential string into a :class:`Provider`."""
    protocol, _, rest = cfg.partition(":")
    if protocol not in _ARITY:
        raise CredentialError("parse", "unsupported protocol", protocol)

    arity = _ARITY[protocol]
    if arity == 0:
        if rest:
            raise CredentialError("parse", "invalid value", protocol)
        return Provider(protocol=protocol)

    values = tuple(rest.split(":", arity - 1)) if rest else ()
    if len(values) != arity or not all(values):
        raise CredentialError("parse", "invalid value", protocol)
    return Provider(protocol=protocol, values=values)

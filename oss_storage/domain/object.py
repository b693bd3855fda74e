"""Portable object records returned by storage operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntFlag


class ObjectMode(IntFlag):
    """Capabilities of a stored object."""

    READ = 1
    PART = 2


@dataclass(frozen=True, slots=True)
class ObjectMetadata:
    """Provider specific metadata preserved as-is."""

    storage_class: str | None = None
    server_side_encryption: str | None = None
    server_side_encryption_key_id: str | None = None


@dataclass(frozen=True, slots=True)
class Object:
    """One stored item.

    Optional fields are ``None`` when the provider did not supply a value,
    so a real ``0`` content length is never confused with a missing one.
    """

    id: str
    path: str
    mode: ObjectMode = ObjectMode(0)
    content_length: int | None = None
    last_modified: datetime | None = None
    content_type: str | None = None
    etag: str | None = None
    service_metadata: ObjectMetadata | None = None
    multipart_id: str | None = None

    def has_mode(self, mode: ObjectMode) -> bool:
        return bool(self.mode & mode)


@dataclass(frozen=True, slots=True)
class StorageMeta:
    """Static description of a storager."""

    name: str
    work_dir: str
    capabilities: frozenset[str]

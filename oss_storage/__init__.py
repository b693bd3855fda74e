from oss_storage.domain import (
    ErrorKind,
    InitError,
    Object,
    ObjectMetadata,
    ObjectMode,
    ObjectNotExistError,
    PermissionDeniedError,
    ServiceError,
    StorageError,
    StorageMeta,
    UnexpectedError,
)
from oss_storage.infra.storage import (
    Service,
    Storage,
    from_settings,
    new,
    new_servicer,
    new_storager,
)

__all__ = [
    "ErrorKind",
    "InitError",
    "Object",
    "ObjectMetadata",
    "ObjectMode",
    "ObjectNotExistError",
    "PermissionDeniedError",
    "Service",
    "ServiceError",
    "Storage",
    "StorageError",
    "StorageMeta",
    "UnexpectedError",
    "from_settings",
    "new",
    "new_servicer",
    "new_storager",
]

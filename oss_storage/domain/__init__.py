from .errors import (
    BucketNameInvalidError,
    ClassifiedError,
    ErrorKind,
    InitError,
    InternalError,
    ObjectNotExistError,
    PairRequiredError,
    PairUnsupportedError,
    PermissionDeniedError,
    ServiceError,
    StorageError,
    UnexpectedError,
)
from .object import Object, ObjectMetadata, ObjectMode, StorageMeta

__all__ = [
    "BucketNameInvalidError",
    "ClassifiedError",
    "ErrorKind",
    "InitError",
    "InternalError",
    "Object",
    "ObjectMetadata",
    "ObjectMode",
    "ObjectNotExistError",
    "PairRequiredError",
    "PairUnsupportedError",
    "PermissionDeniedError",
    "ServiceError",
    "StorageError",
    "StorageMeta",
    "UnexpectedError",
]

"""Portable storage error taxonomy.

Provider exceptions are classified into a small set of kinds shared by every
storage backend, then wrapped with the operation and the instance that raised
them so callers can react without parsing error text.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Sequence


class ErrorKind(str, Enum):
    OBJECT_NOT_EXIST = "object-not-found"
    PERMISSION_DENIED = "permission-denied"
    UNEXPECTED = "unexpected"


class InternalError(Exception):
    """Marker for errors that are already portable.

    The classifier returns these unchanged instead of wrapping them again.
    """


class ClassifiedError(InternalError):
    """Base class for provider errors mapped to a portable kind."""

    kind: ErrorKind = ErrorKind.UNEXPECTED
    label = "unexpected"

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"{self.label}: {cause}")
        self.cause = cause
        self.__cause__ = cause


class ObjectNotExistError(ClassifiedError):
    """The requested object or bucket does not exist."""

    kind = ErrorKind.OBJECT_NOT_EXIST
    label = "object not exist"


class PermissionDeniedError(ClassifiedError):
    """The credential is not allowed to perform the operation."""

    kind = ErrorKind.PERMISSION_DENIED
    label = "permission denied"


class UnexpectedError(ClassifiedError):
    """Catch-all for provider failures without a portable meaning."""


class PairRequiredError(InternalError):
    def __init__(self, keys: Sequence[str]) -> None:
        self.keys = tuple(keys)
        super().__init__(f"pair required: {', '.join(self.keys)}")


class PairUnsupportedError(InternalError):
    def __init__(self, key: str, value: Any = None, reason: str | None = None) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        message = f"pair unsupported: {key}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class BucketNameInvalidError(InternalError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"bucket name invalid: {name!r}")


def _kind_of(err: BaseException | None) -> ErrorKind | None:
    if isinstance(err, ClassifiedError):
        return err.kind
    return None


class InitError(Exception):
    """Raised when a servicer or storager cannot be constructed."""

    def __init__(
        self,
        *,
        op: str,
        type: str,
        err: BaseException,
        options: Mapping[str, Any],
    ) -> None:
        self.op = op
        self.type = type
        self.err = err
        self.options = dict(options)
        super().__init__(str(self))
        self.__cause__ = err

    @property
    def kind(self) -> ErrorKind | None:
        return _kind_of(self.err)

    def __str__(self) -> str:
        return (
            f"{self.op}: {self.type}: {self.err}"
            f" [options: {format_options(self.options)}]"
        )


class ServiceError(Exception):
    """A servicer operation failed."""

    def __init__(
        self, *, op: str, err: BaseException, servicer: Any, name: str = ""
    ) -> None:
        self.op = op
        self.err = err
        self.servicer = servicer
        self.name = name
        super().__init__(str(self))
        self.__cause__ = err

    @property
    def kind(self) -> ErrorKind | None:
        return _kind_of(self.err)

    def __str__(self) -> str:
        return f"{self.op} on {self.name}: {self.servicer}: {self.err}"


class StorageError(Exception):
    """A storager operation failed."""

    def __init__(
        self,
        *,
        op: str,
        err: BaseException,
        storager: Any,
        path: Sequence[str] = (),
    ) -> None:
        self.op = op
        self.err = err
        self.storager = storager
        self.path = tuple(path)
        super().__init__(str(self))
        self.__cause__ = err

    @property
    def kind(self) -> ErrorKind | None:
        return _kind_of(self.err)

    def __str__(self) -> str:
        return f"{self.op} on {list(self.path)}: {self.storager}: {self.err}"


_REDACTED_KEYS = frozenset({"credential"})


def format_options(options: Mapping[str, Any]) -> str:
    """Render construction options for diagnostics with secrets redacted."""
    parts = []
    for key in sorted(options):
        value = options[key]
        if key in _REDACTED_KEYS and isinstance(value, str):
            protocol = value.split(":", 1)[0]
            value = f"{protocol}:***"
        parts.append(f"{key}={value!r}")
    return ", ".join(parts)

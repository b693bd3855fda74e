"""Classification of provider errors into portable error kinds."""

from __future__ import annotations

from enum import Enum

from botocore.exceptions import ClientError

from oss_storage.domain.errors import (
    InternalError,
    ObjectNotExistError,
    PermissionDeniedError,
    UnexpectedError,
)
from oss_storage.infra.storage.oss_constants import (
    RESPONSE_CODE_ACCESS_DENIED,
    RESPONSE_CODE_NO_SUCH_KEY,
)


class ErrorShape(Enum):
    SERVICE_CODE = "service_code"
    SERVICE_STATUS = "service_status"
    UNEXPECTED_STATUS = "unexpected_status"
    OTHER = "other"


def error_code(err: BaseException) -> str:
    if not isinstance(err, ClientError):
        return ""
    return str(err.response.get("Error", {}).get("Code") or "")


def _status_code(err: ClientError) -> int | None:
    status = err.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return int(status) if status is not None else None


def error_shape(err: BaseException) -> tuple[ErrorShape, str, int | None]:
    """Reduce a raw provider error to ``(shape, code, status)``.

    botocore fills the error code with the bare status (``"404"``) when the
    response has no error document, which is the unexpected-status case.
    """
    if not isinstance(err, ClientError):
        return ErrorShape.OTHER, "", None

    code = error_code(err)
    status = _status_code(err)
    if not code:
        return ErrorShape.SERVICE_STATUS, code, status
    if code.isdigit():
        return ErrorShape.UNEXPECTED_STATUS, code, status if status is not None else int(code)
    return ErrorShape.SERVICE_CODE, code, status


def format_error(err: BaseException) -> InternalError:
    """Classify ``err`` into a portable error.

    Already portable errors are returned as-is.
    """
    if isinstance(err, InternalError):
        return err

    shape, code, status = error_shape(err)
    if shape is ErrorShape.SERVICE_STATUS:
        if status == 404:
            return ObjectNotExistError(err)
        return UnexpectedError(err)
    if shape is ErrorShape.SERVICE_CODE:
        if code == RESPONSE_CODE_NO_SUCH_KEY:
            return ObjectNotExistError(err)
        if code == RESPONSE_CODE_ACCESS_DENIED:
            return PermissionDeniedError(err)
    elif shape is ErrorShape.UNEXPECTED_STATUS:
        if status == 404:
            return ObjectNotExistError(err)
        if status == 403:
            return PermissionDeniedError(err)

    return UnexpectedError(err)


def check_error(err: BaseException, code: str) -> bool:
    """Return whether ``err`` is a provider error carrying exactly ``code``."""
    if not isinstance(err, ClientError):
        return False
    return error_code(err) == code

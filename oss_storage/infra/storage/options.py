"""Construction and per-operation options.

Options are passed as keyword arguments ("pairs") and validated with pydantic
models. Unknown keys are rejected unless the ``loose_pair`` feature is on.
"""

from __future__ import annotations

from typing import Annotated, Any, Collection, Mapping, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError

from oss_storage.domain.errors import PairRequiredError, PairUnsupportedError
from oss_storage.infra.httpclient import HTTPClientOptions

ModelT = TypeVar("ModelT", bound=BaseModel)


class _Options(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ServiceFeatures(_Options):
    loose_pair: bool = False


class StorageFeatures(_Options):
    loose_pair: bool = False


class DefaultServicePairs(_Options):
    """Default options applied to each servicer operation."""

    create: dict[str, Any] = Field(default_factory=dict)
    delete: dict[str, Any] = Field(default_factory=dict)
    get: dict[str, Any] = Field(default_factory=dict)


class DefaultStoragePairs(_Options):
    """Default options applied to each storager operation."""

    create: dict[str, Any] = Field(default_factory=dict)
    delete: dict[str, Any] = Field(default_factory=dict)
    stat: dict[str, Any] = Field(default_factory=dict)
    query_sign_http_read: dict[str, Any] = Field(default_factory=dict)
    query_sign_http_write: dict[str, Any] = Field(default_factory=dict)


def normalize_work_dir(value: str) -> str:
    if not value.startswith("/"):
        raise ValueError("work_dir must be an absolute path")
    if not value.endswith("/"):
        value += "/"
    return value


WorkDir = Annotated[str, AfterValidator(normalize_work_dir)]


class ServiceNewOptions(_Options):
    credential: str = Field(min_length=1)
    endpoint: str = Field(min_length=1)
    http_client_options: HTTPClientOptions | None = None
    default_service_pairs: DefaultServicePairs | None = None
    service_features: ServiceFeatures | None = None


class StorageNewOptions(_Options):
    name: str = Field(min_length=1)
    work_dir: WorkDir = "/"
    default_storage_pairs: DefaultStoragePairs | None = None
    storage_features: StorageFeatures | None = None


class ServiceCreateOptions(_Options):
    location: str | None = None


class ServiceGetOptions(_Options):
    work_dir: WorkDir = "/"


class ServiceDeleteOptions(_Options):
    pass


class CreateOptions(_Options):
    multipart_id: str | None = None


class DeleteOptions(_Options):
    multipart_id: str | None = None


class StatOptions(_Options):
    pass


class QuerySignHTTPReadOptions(_Options):
    content_disposition: str | None = None


class QuerySignHTTPWriteOptions(_Options):
    content_type: str | None = None
    content_md5: str | None = None
    storage_class: str | None = None
    server_side_encryption: str | None = None
    server_side_encryption_key_id: str | None = None


SERVICE_NEW_KEYS = frozenset(ServiceNewOptions.model_fields)
STORAGE_NEW_KEYS = frozenset(StorageNewOptions.model_fields)


def parse_pairs(
    model: type[ModelT],
    pairs: Mapping[str, Any],
    *,
    defaults: Mapping[str, Any] | None = None,
    known: Collection[str] = (),
    loose: bool = False,
) -> ModelT:
    """Validate ``pairs`` against ``model``.

    ``defaults`` are applied first and overridden by ``pairs``. Keys in
    ``known`` belong to another stage of construction and are skipped.
    """
    merged = {**(defaults or {}), **pairs}
    fields = model.model_fields

    missing = [
        name for name, info in fields.items() if info.is_required() and name not in merged
    ]
    if missing:
        raise PairRequiredError(missing)

    values: dict[str, Any] = {}
    for key, value in merged.items():
        if key in fields:
            values[key] = value
        elif key in known or loose:
            continue
        else:
            raise PairUnsupportedError(key)

    try:
        return model.model_validate(values)
    except ValidationError as exc:
        error = exc.errors()[0]
        key = str(error["loc"][0]) if error["loc"] else model.__name__
        raise PairUnsupportedError(key, reason=error["msg"]) from exc


def is_loose(
    model: type[ServiceFeatures] | type[StorageFeatures], features: Any, key: str
) -> bool:
    """Read ``loose_pair`` from a raw features option before it is parsed.

    The value goes through the same validation as the final options, so a
    string such as ``"false"`` reads as disabled.

    Raises:
        PairUnsupportedError: If ``features`` is not a valid feature set.
    """
    if features is None:
        return False
    try:
        return model.model_validate(features).loose_pair
    except ValidationError as exc:
        raise PairUnsupportedError(key, reason=exc.errors()[0]["msg"]) from exc

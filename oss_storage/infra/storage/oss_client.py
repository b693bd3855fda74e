"""Aliyun OSS servicer and storager.

OSS is reached through its S3-compatible API with boto3. This module wires
credentials, endpoint and transport options into a client, binds buckets and
working directories, and funnels every provider failure through the portable
error taxonomy.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from oss_storage.common.config import Settings, get_settings
from oss_storage.common.logging import setup_logging
from oss_storage.domain.errors import (
    BucketNameInvalidError,
    InitError,
    PairUnsupportedError,
    ServiceError,
    StorageError,
)
from oss_storage.domain.object import Object, ObjectMetadata, ObjectMode, StorageMeta
from oss_storage.infra import credential, endpoint
from oss_storage.infra.httpclient import new_config
from oss_storage.infra.observability.metrics import record_error, record_operation
from oss_storage.infra.storage.options import (
    SERVICE_NEW_KEYS,
    STORAGE_NEW_KEYS,
    CreateOptions,
    DefaultServicePairs,
    DefaultStoragePairs,
    DeleteOptions,
    QuerySignHTTPReadOptions,
    QuerySignHTTPWriteOptions,
    ServiceCreateOptions,
    ServiceDeleteOptions,
    ServiceFeatures,
    ServiceGetOptions,
    ServiceNewOptions,
    StatOptions,
    StorageFeatures,
    StorageNewOptions,
    is_loose,
    normalize_work_dir,
    parse_pairs,
)
from oss_storage.infra.storage.oss_constants import (
    RESPONSE_CODE_NO_SUCH_UPLOAD,
    SERVER_SIDE_ENCRYPTION_HEADER,
    SERVER_SIDE_ENCRYPTION_KEY_ID_HEADER,
    STORAGE_CLASS_HEADER,
    TYPE,
)
from oss_storage.infra.storage.oss_errors import check_error, format_error

logger = logging.getLogger("storage")

# ref: https://help.aliyun.com/document_detail/31827.html
BUCKET_NAME_PATTERN = re.compile(r"[a-z0-9][a-z0-9-]{1,61}[a-z0-9]")

SERVICE_CAPABILITIES = frozenset({"create", "delete", "get"})
STORAGE_CAPABILITIES = frozenset(
    {
        "create",
        "delete",
        "metadata",
        "stat",
        "query_sign_http_read",
        "query_sign_http_write",
    }
)


def _prefix(work_dir: str) -> str:
    prefix = work_dir.lstrip("/")
    if prefix and not prefix.endswith("/"):
        prefix += "/"
    return prefix


def to_provider_key(work_dir: str, path: str) -> str:
    """Map a path relative to ``work_dir`` to a provider key."""
    return _prefix(work_dir) + path


def to_virtual_path(work_dir: str, key: str) -> str:
    """Map a provider key back to a path relative to ``work_dir``.

    Keys outside ``work_dir`` are returned unchanged.
    """
    return key.removeprefix(_prefix(work_dir))


class Service:
    """Authenticated, bucket agnostic handle to OSS."""

    capabilities = SERVICE_CAPABILITIES

    def __init__(
        self,
        client: Any,
        *,
        default_pairs: DefaultServicePairs | None = None,
        features: ServiceFeatures | None = None,
    ) -> None:
        self._client = client
        self._default_pairs = default_pairs or DefaultServicePairs()
        self._features = features or ServiceFeatures()

    @property
    def client(self) -> Any:
        return self._client

    @property
    def default_pairs(self) -> DefaultServicePairs:
        return self._default_pairs

    @property
    def features(self) -> ServiceFeatures:
        return self._features

    def __str__(self) -> str:
        return "Servicer oss"

    def supports(self, op: str) -> bool:
        return op in self.capabilities

    @staticmethod
    def _build_client(
        endpoint_url: str, access_key: str, secret_key: str, config: Config
    ) -> Any:
        """Create a boto3 S3 client pointed at the OSS endpoint."""
        return boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=config,
        )

    def format_error(
        self, op: str, err: BaseException | None, name: str = ""
    ) -> ServiceError | None:
        """Classify ``err`` and wrap it with the servicer context.

        Returns ``None`` when there is no error.
        """
        if err is None:
            return None

        classified = format_error(err)
        record_error("service", op, classified)
        logger.debug(
            "service_error op=%s name=%s error=%s", op, name, classified
        )
        return ServiceError(op=op, err=classified, servicer=self, name=name)

    def _parse(self, op: str, model: type, pairs: Mapping[str, Any]) -> Any:
        return parse_pairs(
            model,
            pairs,
            defaults=getattr(self._default_pairs, op),
            loose=self._features.loose_pair,
        )

    def create(self, name: str, **pairs: Any) -> "Storage":
        """Create bucket ``name`` and return a storager bound to it.

        Args:
            name: Bucket name, checked against the OSS naming rules.
            **pairs: ``location`` selects the region constraint.

        Raises:
            ServiceError: If the options are invalid or the provider refuses.
        """
        record_operation("service", "create")
        try:
            opt = self._parse("create", ServiceCreateOptions, pairs)
            params: dict[str, Any] = {"Bucket": name}
            if opt.location:
                params["CreateBucketConfiguration"] = {
                    "LocationConstraint": opt.location
                }
            self._check_bucket_name(name)
            self._client.create_bucket(**params)
            return self.new_storage({"name": name}, resolve=False)
        except Exception as exc:
            raise self.format_error("create", exc, name) from exc

    def get(self, name: str, **pairs: Any) -> "Storage":
        """Return a storager for the existing bucket ``name``.

        Args:
            name: Bucket name.
            **pairs: ``work_dir`` for the returned storager.

        Raises:
            ServiceError: If the bucket cannot be resolved.
        """
        record_operation("service", "get")
        try:
            opt = self._parse("get", ServiceGetOptions, pairs)
            return self.new_storage({"name": name, "work_dir": opt.work_dir})
        except Exception as exc:
            raise self.format_error("get", exc, name) from exc

    def delete(self, name: str, **pairs: Any) -> None:
        """Delete the (empty) bucket ``name``.

        Raises:
            ServiceError: If the provider refuses the deletion.
        """
        record_operation("service", "delete")
        try:
            self._parse("delete", ServiceDeleteOptions, pairs)
            self._client.delete_bucket(Bucket=name)
        except Exception as exc:
            raise self.format_error("delete", exc, name) from exc

    @staticmethod
    def _check_bucket_name(name: str) -> None:
        if not BUCKET_NAME_PATTERN.fullmatch(name):
            raise BucketNameInvalidError(name)

    def new_storage(
        self, pairs: Mapping[str, Any], *, resolve: bool = True
    ) -> "Storage":
        """Bind a storager from storage construction options.

        With ``resolve`` the bucket is looked up first so a missing bucket
        fails here rather than on the first object operation.
        """
        opt = parse_pairs(
            StorageNewOptions,
            pairs,
            known=SERVICE_NEW_KEYS,
            loose=is_loose(
                StorageFeatures, pairs.get("storage_features"), "storage_features"
            ),
        )
        self._check_bucket_name(opt.name)
        if resolve:
            self._client.head_bucket(Bucket=opt.name)

        store = Storage(
            self._client,
            name=opt.name,
            work_dir=opt.work_dir,
            default_pairs=opt.default_storage_pairs,
            features=opt.storage_features,
        )
        logger.debug("storager_created %s", store)
        return store


class Storage:
    """One OSS bucket seen through a working directory."""

    capabilities = STORAGE_CAPABILITIES

    def __init__(
        self,
        client: Any,
        *,
        name: str,
        work_dir: str = "/",
        default_pairs: DefaultStoragePairs | None = None,
        features: StorageFeatures | None = None,
    ) -> None:
        self._client = client
        self._name = name
        self._work_dir = normalize_work_dir(work_dir)
        self._default_pairs = default_pairs or DefaultStoragePairs()
        self._features = features or StorageFeatures()

    @property
    def name(self) -> str:
        return self._name

    @property
    def work_dir(self) -> str:
        return self._work_dir

    @property
    def default_pairs(self) -> DefaultStoragePairs:
        return self._default_pairs

    @property
    def features(self) -> StorageFeatures:
        return self._features

    def __str__(self) -> str:
        return f"Storager oss {{Name: {self._name}, WorkDir: {self._work_dir}}}"

    def supports(self, op: str) -> bool:
        return op in self.capabilities

    def get_abs_path(self, path: str) -> str:
        return to_provider_key(self._work_dir, path)

    def get_rel_path(self, key: str) -> str:
        return to_virtual_path(self._work_dir, key)

    def format_error(
        self, op: str, err: BaseException | None, *path: str
    ) -> StorageError | None:
        """Classify ``err`` and wrap it with the storager context and paths."""
        if err is None:
            return None

        classified = format_error(err)
        record_error("storage", op, classified)
        logger.debug(
            "storage_error op=%s path=%s storager=%s error=%s",
            op,
            list(path),
            self,
            classified,
        )
        return StorageError(op=op, err=classified, storager=self, path=path)

    def format_file_object(self, record: Mapping[str, Any]) -> Object:
        """Build an :class:`Object` from a provider object record.

        ``record`` uses the S3 listing field names. Optional fields stay
        unset when the provider returned nothing for them.
        """
        key = record["Key"]
        metadata = ObjectMetadata(
            storage_class=record.get("StorageClass") or None,
            server_side_encryption=record.get("ServerSideEncryption") or None,
            server_side_encryption_key_id=record.get("SSEKMSKeyId") or None,
        )
        return Object(
            id=key,
            path=self.get_rel_path(key),
            mode=ObjectMode.READ,
            content_length=int(record["Size"]),
            last_modified=record["LastModified"],
            content_type=record.get("ContentType") or None,
            # OSS advises against using the ETag as Content-MD5.
            # ref: https://help.aliyun.com/document_detail/31965.html
            etag=record.get("ETag") or None,
            service_metadata=None if metadata == ObjectMetadata() else metadata,
        )

    def _parse(self, op: str, model: type, pairs: Mapping[str, Any]) -> Any:
        return parse_pairs(
            model,
            pairs,
            defaults=getattr(self._default_pairs, op),
            loose=self._features.loose_pair,
        )

    def metadata(self) -> StorageMeta:
        """Describe the bound bucket, working directory and capabilities."""
        return StorageMeta(
            name=self._name, work_dir=self._work_dir, capabilities=self.capabilities
        )

    def create(self, path: str, **pairs: Any) -> Object:
        """Create a local object handle without touching the provider.

        Args:
            path: Path relative to the working directory.
            **pairs: ``multipart_id`` returns a part-mode handle for that upload.

        Raises:
            StorageError: If the options are invalid.
        """
        try:
            opt = self._parse("create", CreateOptions, pairs)
        except Exception as exc:
            raise self.format_error("create", exc, path) from exc

        if opt.multipart_id:
            return Object(
                id=self.get_abs_path(path),
                path=path,
                mode=ObjectMode.PART,
                multipart_id=opt.multipart_id,
            )
        return Object(id=self.get_abs_path(path), path=path, mode=ObjectMode.READ)

    def stat(self, path: str, **pairs: Any) -> Object:
        """Fetch object metadata with a HEAD request.

        Args:
            path: Path relative to the working directory.

        Returns:
            The object with ``content_length`` and ``last_modified`` set.

        Raises:
            StorageError: ``ObjectNotExistError`` when the key is missing,
                ``PermissionDeniedError`` when access is refused.
        """
        record_operation("storage", "stat")
        try:
            self._parse("stat", StatOptions, pairs)
            key = self.get_abs_path(path)
            response = self._client.head_object(Bucket=self._name, Key=key)
            return self.format_file_object(self._head_record(key, response))
        except Exception as exc:
            raise self.format_error("stat", exc, path) from exc

    @staticmethod
    def _head_record(key: str, response: Mapping[str, Any]) -> dict[str, Any]:
        headers = response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
        return {
            "Key": key,
            "Size": response["ContentLength"],
            "LastModified": response["LastModified"],
            "ContentType": response.get("ContentType"),
            "ETag": response.get("ETag"),
            "StorageClass": response.get("StorageClass")
            or headers.get(STORAGE_CLASS_HEADER),
            "ServerSideEncryption": response.get("ServerSideEncryption")
            or headers.get(SERVER_SIDE_ENCRYPTION_HEADER),
            "SSEKMSKeyId": response.get("SSEKMSKeyId")
            or headers.get(SERVER_SIDE_ENCRYPTION_KEY_ID_HEADER),
        }

    def delete(self, path: str, **pairs: Any) -> None:
        """Delete an object, or abort its multipart upload.

        Deleting something that is already gone succeeds.

        Args:
            path: Path relative to the working directory.
            **pairs: ``multipart_id`` aborts that upload instead.

        Raises:
            StorageError: If the provider refuses the deletion.
        """
        record_operation("storage", "delete")
        try:
            opt = self._parse("delete", DeleteOptions, pairs)
            key = self.get_abs_path(path)
            if opt.multipart_id:
                self._abort_multipart(key, opt.multipart_id)
            else:
                self._client.delete_object(Bucket=self._name, Key=key)
        except Exception as exc:
            raise self.format_error("delete", exc, path) from exc

    def _abort_multipart(self, key: str, upload_id: str) -> None:
        try:
            self._client.abort_multipart_upload(
                Bucket=self._name, Key=key, UploadId=upload_id
            )
        except ClientError as exc:
            if not check_error(exc, RESPONSE_CODE_NO_SUCH_UPLOAD):
                raise

    def query_sign_http_read(self, path: str, expires_in: int, **pairs: Any) -> str:
        """Generate a presigned URL for downloading an object.

        Args:
            path: Path relative to the working directory.
            expires_in: URL lifetime in seconds.
            **pairs: ``content_disposition`` overrides the response header.

        Raises:
            StorageError: If signing fails or yields an empty URL.
        """
        record_operation("storage", "query_sign_http_read")
        try:
            opt = self._parse("query_sign_http_read", QuerySignHTTPReadOptions, pairs)
            params: dict[str, Any] = {
                "Bucket": self._name,
                "Key": self.get_abs_path(path),
            }
            if opt.content_disposition:
                params["ResponseContentDisposition"] = opt.content_disposition
            url = self._client.generate_presigned_url(
                "get_object", Params=params, ExpiresIn=int(expires_in)
            )
            if not url:
                raise ValueError("generated presigned URL is empty")
            return str(url)
        except Exception as exc:
            raise self.format_error("query_sign_http_read", exc, path) from exc

    def query_sign_http_write(
        self, path: str, size: int, expires_in: int, **pairs: Any
    ) -> str:
        """Generate a presigned URL for uploading an object of ``size`` bytes.

        Args:
            path: Path relative to the working directory.
            size: Content length the upload must match.
            expires_in: URL lifetime in seconds.
            **pairs: Content type, MD5, storage class and encryption headers.

        Raises:
            StorageError: If signing fails or yields an empty URL.
        """
        record_operation("storage", "query_sign_http_write")
        try:
            opt = self._parse(
                "query_sign_http_write", QuerySignHTTPWriteOptions, pairs
            )
            params: dict[str, Any] = {
                "Bucket": self._name,
                "Key": self.get_abs_path(path),
                "ContentLength": int(size),
            }
            if opt.content_type:
                params["ContentType"] = opt.content_type
            if opt.content_md5:
                params["ContentMD5"] = opt.content_md5
            if opt.storage_class:
                params["StorageClass"] = opt.storage_class
            if opt.server_side_encryption:
                params["ServerSideEncryption"] = opt.server_side_encryption
            if opt.server_side_encryption_key_id:
                params["SSEKMSKeyId"] = opt.server_side_encryption_key_id
            url = self._client.generate_presigned_url(
                "put_object", Params=params, ExpiresIn=int(expires_in)
            )
            if not url:
                raise ValueError("generated presigned URL is empty")
            return str(url)
        except Exception as exc:
            raise self.format_error("query_sign_http_write", exc, path) from exc


def _new_servicer(options: Mapping[str, Any]) -> Service:
    try:
        opt = parse_pairs(
            ServiceNewOptions,
            options,
            known=STORAGE_NEW_KEYS,
            loose=is_loose(
                ServiceFeatures, options.get("service_features"), "service_features"
            ),
        )

        provider = credential.parse(opt.credential)
        if provider.protocol != credential.PROTOCOL_HMAC:
            raise PairUnsupportedError(
                "credential", reason=f"protocol {provider.protocol} is not supported"
            )
        access_key, secret_key = provider.hmac()

        ep = endpoint.parse(opt.endpoint)

        client = Service._build_client(
            str(ep), access_key, secret_key, new_config(opt.http_client_options)
        )
    except Exception as exc:
        raise InitError(
            op="new_servicer", type=TYPE, err=format_error(exc), options=options
        ) from exc

    srv = Service(
        client,
        default_pairs=opt.default_service_pairs,
        features=opt.service_features,
    )
    logger.debug("servicer_created endpoint=%s", ep)
    return srv


def _new_servicer_and_storager(options: Mapping[str, Any]) -> tuple[Service, Storage]:
    srv = _new_servicer(options)
    try:
        store = srv.new_storage(options)
    except Exception as exc:
        raise InitError(
            op="new_storager", type=TYPE, err=format_error(exc), options=options
        ) from exc
    return srv, store


def new(**options: Any) -> tuple[Service, Storage]:
    """Create both a servicer and a storager.

    Raises:
        InitError: With op ``new_servicer`` or ``new_storager`` depending on
            which stage failed.
    """
    return _new_servicer_and_storager(options)


def new_servicer(**options: Any) -> Service:
    """Create a servicer only."""
    return _new_servicer(options)


def new_storager(**options: Any) -> Storage:
    """Create a storager only."""
    _, store = _new_servicer_and_storager(options)
    return store


def from_settings(settings: Settings | None = None) -> tuple[Service, Storage]:
    """Create a servicer and storager from environment settings.

    Logging is configured at ``LOG_LEVEL`` before anything is built.

    Raises:
        InitError: If the settings do not describe a usable bucket.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)
    return new(**settings.to_options())

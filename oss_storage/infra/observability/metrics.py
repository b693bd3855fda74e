from prometheus_client import Counter

from oss_storage.common.config import get_settings
from oss_storage.domain.errors import ErrorKind

# 标签保持低基数：只记录操作名与错误类别，不记录路径或桶名
OPERATIONS = Counter(
    "oss_storage_operations_total",
    "Total storage operations issued to the provider",
    ["scope", "op"],
)

ERRORS = Counter(
    "oss_storage_errors_total",
    "Storage operation failures by portable error kind",
    ["scope", "op", "kind"],
)


def record_operation(scope: str, op: str) -> None:
    if get_settings().ENABLE_METRICS:
        OPERATIONS.labels(scope=scope, op=op).inc()


def record_error(scope: str, op: str, err: BaseException) -> None:
    if not get_settings().ENABLE_METRICS:
        return
    kind = getattr(err, "kind", None)
    label = kind.value if isinstance(kind, ErrorKind) else "internal"
    ERRORS.labels(scope=scope, op=op, kind=label).inc()

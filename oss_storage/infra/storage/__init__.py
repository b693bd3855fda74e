"""Object storage adapters.

This package adapts Aliyun OSS, reached through its S3-compatible API, to the
uniform servicer/storager contract.
"""

from .oss_client import (
    Service,
    Storage,
    from_settings,
    new,
    new_servicer,
    new_storager,
    to_provider_key,
    to_virtual_path,
)
from .oss_errors import check_error, format_error

__all__ = [
    "Service",
    "Storage",
    "check_error",
    "format_error",
    "from_settings",
    "new",
    "new_servicer",
    "new_storager",
    "to_provider_key",
    "to_virtual_path",
]

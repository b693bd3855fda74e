from __future__ import annotations

import os
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

os.environ["ENABLE_METRICS"] = "true"

from oss_storage.common.config import get_settings  # noqa: E402

get_settings.cache_clear()  # type: ignore[attr-defined]

from oss_storage.infra.storage.oss_client import Service, Storage  # noqa: E402

BASE_OPTIONS = {
    "credential": "hmac:test-key:test-secret",
    "endpoint": "https:oss-cn-hangzhou.aliyuncs.com",
}


def _client_error(
    code: str = "",
    status: int = 400,
    message: str = "",
    operation: str = "HeadObject",
) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": message},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


@pytest.fixture
def client_error():
    """Factory for botocore ClientError instances."""
    return _client_error


@pytest.fixture
def base_options():
    return dict(BASE_OPTIONS)


@pytest.fixture
def mock_client():
    """Mock boto3 S3 client."""
    return MagicMock()


@pytest.fixture
def build_client(mock_client):
    """Patch client construction so factories receive the mock client."""
    with patch.object(Service, "_build_client", return_value=mock_client) as mocked:
        yield mocked


@pytest.fixture
def service(mock_client):
    return Service(mock_client)


@pytest.fixture
def storage(mock_client):
    return Storage(mock_client, name="test-bucket", work_dir="/prefix/")


@pytest.fixture
def root_storage(mock_client):
    return Storage(mock_client, name="test-bucket")

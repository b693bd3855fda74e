"""OSS reference data: storage classes, encryption headers and limits."""

from __future__ import annotations

TYPE = "oss"

# ref: https://www.alibabacloud.com/help/doc-detail/31984.htm
STORAGE_CLASS_HEADER = "x-oss-storage-class"

# ref: https://www.alibabacloud.com/help/doc-detail/51374.htm
STORAGE_CLASS_STANDARD = "STANDARD"
STORAGE_CLASS_IA = "IA"
STORAGE_CLASS_ARCHIVE = "Archive"

SERVER_SIDE_ENCRYPTION_HEADER = "x-oss-server-side-encryption"
SERVER_SIDE_ENCRYPTION_KEY_ID_HEADER = "x-oss-server-side-encryption-key-id"

SERVER_SIDE_ENCRYPTION_AES256 = "AES256"
SERVER_SIDE_ENCRYPTION_KMS = "KMS"
SERVER_SIDE_ENCRYPTION_SM4 = "SM4"

SERVER_SIDE_DATA_ENCRYPTION_SM4 = "SM4"

# ref: https://error-center.alibabacloud.com/status/product/Oss
RESPONSE_CODE_NO_SUCH_KEY = "NoSuchKey"
RESPONSE_CODE_ACCESS_DENIED = "AccessDenied"
# Returned while the specified multipart upload does not exist.
RESPONSE_CODE_NO_SUCH_UPLOAD = "NoSuchUpload"

# Multipart upload restrictions.
# ref: https://help.aliyun.com/document_detail/31993.html
MULTIPART_NUMBER_MAXIMUM = 10000
MULTIPART_SIZE_MAXIMUM = 5 * 1024 * 1024 * 1024  # 5GB
MULTIPART_SIZE_MINIMUM = 100 * 1024  # 100KB

"""Python client for the NOS object-storage service."""

from nosclient.client import NosClient
from nosclient.config import NosConfig, load_config
from nosclient.errors import (
    DEFAULT_ERROR_CATALOG,
    DeleteObjectsTooLarge,
    ErrorCatalog,
    InvalidBucketName,
    InvalidContentLength,
    InvalidDeleteObjects,
    InvalidFile,
    InvalidMetadata,
    InvalidObjectName,
    InvalidSource,
    NosClientError,
    NosDecodeError,
    NosError,
    NosRequestError,
    NosServerError,
)
from nosclient.models import (
    AbortMultiUploadRequest,
    CompleteMultiUploadRequest,
    CompleteMultiUploadResult,
    CopyObjectRequest,
    DeleteMultiObjectsRequest,
    DeleteObjects,
    DeleteObjectsResult,
    GetObjectRequest,
    InitMultiUploadRequest,
    InitMultiUploadResult,
    ListMultiUploadsRequest,
    ListMultiUploadsResult,
    ListObjectsRequest,
    ListObjectsResult,
    ListPartsResult,
    ListUploadPartsRequest,
    MoveObjectRequest,
    NosObject,
    ObjectMetadata,
    ObjectRequest,
    ObjectResult,
    Part,
    PutObjectRequest,
    UploadPartRequest,
)

__all__ = [
    "AbortMultiUploadRequest",
    "CompleteMultiUploadRequest",
    "CompleteMultiUploadResult",
    "CopyObjectRequest",
    "DEFAULT_ERROR_CATALOG",
    "DeleteMultiObjectsRequest",
    "DeleteObjects",
    "DeleteObjectsResult",
    "DeleteObjectsTooLarge",
    "ErrorCatalog",
    "GetObjectRequest",
    "InitMultiUploadRequest",
    "InitMultiUploadResult",
    "InvalidBucketName",
    "InvalidContentLength",
    "InvalidDeleteObjects",
    "InvalidFile",
    "InvalidMetadata",
    "InvalidObjectName",
    "InvalidSource",
    "ListMultiUploadsRequest",
    "ListMultiUploadsResult",
    "ListObjectsRequest",
    "ListObjectsResult",
    "ListPartsResult",
    "ListUploadPartsRequest",
    "load_config",
    "MoveObjectRequest",
    "NosClient",
    "NosClientError",
    "NosConfig",
    "NosDecodeError",
    "NosError",
    "NosObject",
    "NosRequestError",
    "NosServerError",
    "ObjectMetadata",
    "ObjectRequest",
    "ObjectResult",
    "Part",
    "PutObjectRequest",
    "UploadPartRequest",
]

"""Request parameter validation for the NOS client.

Every check here runs before a request is built, so a failure never
reaches the network. Each function raises a ``NosClientError`` subclass
produced by the supplied error catalog.
"""

from collections.abc import Mapping

from nosclient.consts import MAX_FILE_SIZE, MAX_OBJECT_NAME_LENGTH, ReservedHeader
from nosclient.errors import (
    DEFAULT_ERROR_CATALOG,
    ErrorCatalog,
    InvalidBucketName,
    InvalidContentLength,
    InvalidMetadata,
    InvalidObjectName,
)


def verify_bucket(bucket: str, errors: ErrorCatalog = DEFAULT_ERROR_CATALOG) -> None:
    """Validate a bucket name.

    Raises:
        InvalidBucketName: If the name is empty.
    """
    if not bucket:
        raise errors.client_error(InvalidBucketName.code)


def verify_object(
    bucket: str, obj: str, errors: ErrorCatalog = DEFAULT_ERROR_CATALOG
) -> None:
    """Validate a bucket/object reference.

    Raises:
        InvalidBucketName: If the bucket is empty.
        InvalidObjectName: If the object is empty or longer than 1000 characters.
    """
    verify_bucket(bucket, errors)
    if not obj or len(obj) > MAX_OBJECT_NAME_LENGTH:
        raise errors.client_error(InvalidObjectName.code, bucket=bucket)


def verify_object_with_length(
    bucket: str,
    obj: str,
    content_length: int,
    errors: ErrorCatalog = DEFAULT_ERROR_CATALOG,
) -> None:
    """Validate a bucket/object reference plus the declared upload length.

    Raises:
        InvalidBucketName: If the bucket is empty.
        InvalidObjectName: If the object name is invalid.
        InvalidContentLength: If the length is negative or above ``MAX_FILE_SIZE``.
    """
    verify_object(bucket, obj, errors)
    if content_length < 0 or content_length > MAX_FILE_SIZE:
        raise errors.client_error(
            InvalidContentLength.code,
            bucket=bucket,
            obj=obj,
            detail=f"{content_length} not in [0, {MAX_FILE_SIZE}]",
        )


def verify_metadata(
    metadata: Mapping[str, str] | None,
    bucket: str = "",
    obj: str = "",
    errors: ErrorCatalog = DEFAULT_ERROR_CATALOG,
) -> None:
    """Reject caller metadata that cannot be sent as given.

    Header names and values go on the wire as ASCII, so anything else must
    be encoded by the caller first (e.g. percent-encoded user metadata).

    Raises:
        InvalidMetadata: If any key is a ``ReservedHeader``, or a key or
            value is not ASCII.
    """
    if not metadata:
        return
    for key, value in metadata.items():
        if ReservedHeader.contains(key):
            raise errors.client_error(InvalidMetadata.code, bucket=bucket, obj=obj, detail=key)
        if not (key.isascii() and str(value).isascii()):
            raise errors.client_error(
                InvalidMetadata.code, bucket=bucket, obj=obj, detail=f"non-ASCII header {key!r}"
            )

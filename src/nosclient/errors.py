"""Error definitions for the NOS client.

Three families, all rooted at ``NosError``:

* ``NosClientError`` -- the request was rejected locally, before any
  network call was made.
* ``NosServerError`` -- the service answered with a non-success status.
* ``NosDecodeError`` -- a success response carried a body that could not be
  parsed.

Transport failures (connection refused, timeouts, TLS) are not wrapped;
they surface as the ``httpx.TransportError`` raised by the HTTP client.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType


class NosError(Exception):
    """A NOS error with code, message, and the resource it concerns.

    Attributes:
        code: Error code string (e.g. "NoSuchKey", "InvalidBucketName").
        message: Human-readable error description.
        request_id: Server-assigned request id, empty for client errors.
        resource: The bucket/object the failed request addressed.
        http_status: HTTP status of the response, 0 when none was received.
    """

    def __init__(
        self,
        code: str,
        message: str,
        request_id: str = "",
        resource: str = "",
        http_status: int = 0,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.request_id = request_id
        self.resource = resource
        self.http_status = http_status

    def __str__(self) -> str:
        parts = [f"{self.code}: {self.message}"]
        if self.resource:
            parts.append(f"resource={self.resource}")
        if self.request_id:
            parts.append(f"request_id={self.request_id}")
        if self.http_status:
            parts.append(f"status={self.http_status}")
        return ", ".join(parts)


class NosClientError(NosError):
    """Raised when a request fails local validation."""

    code = "ClientError"

    def __init__(self, message: str = "", resource: str = "") -> None:
        super().__init__(code=type(self).code, message=message, resource=resource)


class NosServerError(NosError):
    """Raised when the service returns a non-success status."""


class NosDecodeError(NosError):
    """Raised when a success response body is not well-formed XML."""

    def __init__(self, message: str, resource: str = "", http_status: int = 0) -> None:
        super().__init__(
            code="MalformedResponse",
            message=message,
            resource=resource,
            http_status=http_status,
        )


# -- Client-side errors ---------------------------------------------------------


class NosRequestError(NosClientError):
    """The request object is missing or a URL could not be built from it."""

    code = "RequestError"


class InvalidBucketName(NosClientError):
    """The bucket name is empty."""

    code = "InvalidBucketName"


class InvalidObjectName(NosClientError):
    """The object name is empty or too long."""

    code = "InvalidObjectName"


class InvalidFile(NosClientError):
    """The local file could not be opened or inspected."""

    code = "InvalidFile"


class InvalidSource(NosClientError):
    """The copy/move source bucket or object is invalid."""

    code = "InvalidSource"


class InvalidDeleteObjects(NosClientError):
    """The batch delete request carries no object list."""

    code = "InvalidDeleteObjects"


class DeleteObjectsTooLarge(NosClientError):
    """The batch delete request exceeds the key count or body size limit."""

    code = "DeleteObjectsTooLarge"


class InvalidContentLength(NosClientError):
    """The declared content length is negative or above the upload limit."""

    code = "InvalidContentLength"


class InvalidMetadata(NosClientError):
    """Caller metadata names a reserved header or is not ASCII."""

    code = "InvalidMetadata"


# -- Error catalog --------------------------------------------------------------


_CLIENT_ERROR_CLASSES: tuple[type[NosClientError], ...] = (
    NosRequestError,
    InvalidBucketName,
    InvalidObjectName,
    InvalidFile,
    InvalidSource,
    InvalidDeleteObjects,
    DeleteObjectsTooLarge,
    InvalidContentLength,
    InvalidMetadata,
)


@dataclass(frozen=True)
class ErrorCatalog:
    """Immutable mapping from client error codes to messages.

    A catalog is built once and handed to the client; it is never mutated.
    ``client_error`` picks the exception class registered for a code and
    fills in the catalog message.

    Attributes:
        messages: Read-only map of error code to default message.
    """

    messages: Mapping[str, str]

    def message_for(self, code: str) -> str:
        """Return the message registered for ``code``, or the code itself."""
        return self.messages.get(code, code)

    def client_error(
        self, code: str, bucket: str = "", obj: str = "", detail: str = ""
    ) -> NosClientError:
        """Build the client error registered for ``code``.

        Args:
            code: One of the client error codes.
            bucket: Bucket the failing request addressed, if any.
            obj: Object the failing request addressed, if any.
            detail: Extra context appended to the catalog message.

        Returns:
            An instance of the matching ``NosClientError`` subclass.
        """
        cls = _CLASS_BY_CODE.get(code, NosClientError)
        message = self.message_for(code)
        if detail:
            message = f"{message}: {detail}"
        return cls(message=message, resource=format_resource(bucket, obj))


_CLASS_BY_CODE: Mapping[str, type[NosClientError]] = MappingProxyType(
    {cls.code: cls for cls in _CLIENT_ERROR_CLASSES}
)


DEFAULT_ERROR_CATALOG = ErrorCatalog(
    messages=MappingProxyType(
        {
            NosRequestError.code: "The request is missing or malformed.",
            InvalidBucketName.code: "The bucket name must not be empty.",
            InvalidObjectName.code: "The object name must be non-empty and at most 1000 characters.",
            InvalidFile.code: "The file could not be opened.",
            InvalidSource.code: "The source bucket or object is invalid.",
            InvalidDeleteObjects.code: "The delete request must list the objects to delete.",
            DeleteObjectsTooLarge.code: "Too many objects or too large a body for one delete request.",
            InvalidContentLength.code: "The content length is out of the allowed range.",
            InvalidMetadata.code: "The metadata sets a reserved or non-ASCII header.",
        }
    )
)


def format_resource(bucket: str, obj: str = "") -> str:
    """Render the /bucket or /bucket/object path used in error messages."""
    if not bucket and not obj:
        return ""
    if not obj:
        return f"/{bucket}"
    return f"/{bucket}/{obj}"

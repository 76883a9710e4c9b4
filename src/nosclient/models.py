"""Request and result types for NOS operations.

Requests are plain dataclasses created by the caller and consumed by a
single client call; the client never keeps a reference to them. Results
are produced by the response mapper and handed back to the caller.

``NosObject`` is the only result that holds a live HTTP response. It must
be closed by the caller (or used as a context manager); every other
result is fully buffered.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    import httpx


# -- Shared ---------------------------------------------------------------------


@dataclass
class ObjectMetadata:
    """Headers attached to an object plus its length.

    Attributes:
        metadata: Header name to value. Keys are sent verbatim.
        content_length: Body length in bytes, 0 when unknown.
    """

    metadata: dict[str, str] = field(default_factory=dict)
    content_length: int = 0

    def copy(self) -> ObjectMetadata:
        return ObjectMetadata(metadata=dict(self.metadata), content_length=self.content_length)

    def get(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.metadata.items():
            if key.lower() == lowered:
                return value
        return default


@dataclass
class Owner:
    id: str = ""
    display_name: str = ""


# -- Requests -------------------------------------------------------------------


@dataclass
class ObjectRequest:
    """A bare bucket/object reference (delete, exists, head)."""

    bucket: str
    object: str


@dataclass
class PutObjectRequest:
    """Upload a single object.

    Exactly one of ``body`` or ``file_path`` is used: ``put_object_by_stream``
    reads ``body`` and ``put_object_by_file`` opens ``file_path``.
    """

    bucket: str
    object: str
    body: BinaryIO | bytes | None = None
    file_path: str = ""
    metadata: ObjectMetadata | None = None


@dataclass
class GetObjectRequest:
    bucket: str
    object: str
    if_modified_since: str = ""
    obj_range: str = ""


@dataclass
class CopyObjectRequest:
    src_bucket: str
    src_object: str
    dest_bucket: str
    dest_object: str


@dataclass
class MoveObjectRequest:
    src_bucket: str
    src_object: str
    dest_bucket: str
    dest_object: str


@dataclass
class DeleteObjects:
    """The object list carried by a batch delete.

    Attributes:
        keys: Object keys to delete.
        quiet: When true the service only reports failures.
    """

    keys: list[str] = field(default_factory=list)
    quiet: bool = False


@dataclass
class DeleteMultiObjectsRequest:
    bucket: str
    objects: DeleteObjects | None = None


@dataclass
class ListObjectsRequest:
    bucket: str
    prefix: str = ""
    delimiter: str = ""
    marker: str = ""
    max_keys: int = 0


@dataclass
class InitMultiUploadRequest:
    bucket: str
    object: str
    metadata: ObjectMetadata | None = None


@dataclass
class UploadPartRequest:
    """Upload one part of a multipart upload.

    At most ``part_size`` bytes of ``content`` are sent. A ``part_size`` of 0
    sends the whole of ``content``.
    """

    bucket: str
    object: str
    upload_id: str
    part_number: int
    content: bytes = b""
    part_size: int = 0


@dataclass
class Part:
    """A completed part, identified by number and ETag."""

    part_number: int
    etag: str


@dataclass
class CompleteMultiUploadRequest:
    bucket: str
    object: str
    upload_id: str
    parts: list[Part] = field(default_factory=list)


@dataclass
class AbortMultiUploadRequest:
    bucket: str
    object: str
    upload_id: str


@dataclass
class ListUploadPartsRequest:
    bucket: str
    object: str
    upload_id: str
    max_parts: int = 1000
    part_number_marker: int = 0


@dataclass
class ListMultiUploadsRequest:
    bucket: str
    key_marker: str = ""
    max_uploads: int = 0


# -- Results --------------------------------------------------------------------


@dataclass
class ObjectResult:
    etag: str = ""
    request_id: str = ""


@dataclass
class DeleteError:
    key: str = ""
    code: str = ""
    message: str = ""


@dataclass
class DeleteObjectsResult:
    """Outcome of a batch delete.

    Attributes:
        deleted: Keys the service reports as deleted.
        errors: Per-key failures.
    """

    deleted: list[str] = field(default_factory=list)
    errors: list[DeleteError] = field(default_factory=list)


@dataclass
class ObjectSummary:
    key: str = ""
    last_modified: str = ""
    etag: str = ""
    size: int = 0
    storage_class: str = ""
    owner: Owner | None = None


@dataclass
class ListObjectsResult:
    bucket: str = ""
    prefix: str = ""
    delimiter: str = ""
    marker: str = ""
    next_marker: str = ""
    max_keys: int = 0
    is_truncated: bool = False
    contents: list[ObjectSummary] = field(default_factory=list)
    common_prefixes: list[str] = field(default_factory=list)


@dataclass
class InitMultiUploadResult:
    bucket: str = ""
    object: str = ""
    upload_id: str = ""


@dataclass
class CompleteMultiUploadResult:
    location: str = ""
    bucket: str = ""
    object: str = ""
    etag: str = ""


@dataclass
class PartInfo:
    part_number: int = 0
    last_modified: str = ""
    etag: str = ""
    size: int = 0


@dataclass
class ListPartsResult:
    bucket: str = ""
    object: str = ""
    upload_id: str = ""
    owner: Owner | None = None
    storage_class: str = ""
    part_number_marker: int = 0
    next_part_number_marker: int = 0
    max_parts: int = 0
    is_truncated: bool = False
    parts: list[PartInfo] = field(default_factory=list)


@dataclass
class MultipartUpload:
    key: str = ""
    upload_id: str = ""
    storage_class: str = ""
    owner: Owner | None = None
    initiated: str = ""


@dataclass
class ListMultiUploadsResult:
    bucket: str = ""
    next_key_marker: str = ""
    max_uploads: int = 0
    is_truncated: bool = False
    uploads: list[MultipartUpload] = field(default_factory=list)


class NosObject:
    """A streaming GET result holding an open HTTP response.

    The body is read lazily from the connection. Call ``close()`` (or use
    the object in a ``with`` block) to release the connection back to the
    pool.

    Attributes:
        bucket: Bucket the object was read from.
        key: Object key.
        metadata: Response headers and content length.
    """

    def __init__(self, bucket: str, key: str, metadata: ObjectMetadata, response: httpx.Response):
        self.bucket = bucket
        self.key = key
        self.metadata = metadata
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def is_partial(self) -> bool:
        """True for a 206 ranged read."""
        return self._response.status_code == 206

    @property
    def closed(self) -> bool:
        return self._response.is_closed

    def read(self) -> bytes:
        """Read the remaining body and close the response."""
        try:
            return self._response.read()
        finally:
            self._response.close()

    def iter_bytes(self, chunk_size: int | None = None) -> Iterator[bytes]:
        """Yield the body in chunks; the response is closed once exhausted."""
        try:
            yield from self._response.iter_bytes(chunk_size)
        finally:
            self._response.close()

    def close(self) -> None:
        self._response.close()

    def __enter__(self) -> NosObject:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"NosObject(bucket={self.bucket!r}, key={self.key!r}, status={self.status_code})"

"""The NOS client: one method per storage operation.

Every operation follows the same path: reject a missing request object,
validate the bucket/object and any other required fields, pre-compute the
body where needed, then build a signed request, send it, and map the
response. No state is kept between calls, so one client can be shared by
many threads.

Example::

    config = NosConfig(endpoint="nos-eastchina1.126.net", access_key=ak, secret_key=sk)
    with NosClient(config) as client:
        client.put_object_by_file(PutObjectRequest("bucket", "key", file_path="a.txt"))
        with client.get_object(GetObjectRequest("bucket", "key")) as obj:
            data = obj.read()
"""

from __future__ import annotations

import dataclasses
import hashlib
import io
import logging
import os
from collections.abc import Callable, Mapping
from datetime import datetime
from pathlib import Path

import httpx

from nosclient import metrics
from nosclient.config import NosConfig, load_config
from nosclient.consts import (
    CONTENT_MD5,
    DEFAULT_MAX_KEYS,
    DEFAULT_MAX_UPLOADS,
    DELETE,
    IF_MODIFIED_SINCE,
    JSON_TYPE,
    LIST_DELIMITER,
    LIST_KEY_MARKER,
    LIST_MARKER,
    LIST_MAX_KEYS,
    LIST_MAX_UPLOADS,
    LIST_PREFIX,
    MAX_DELETE_BODY,
    MAX_DELETE_OBJECTS,
    MAX_PARTS,
    NOS_COPY_SOURCE,
    NOS_MOVE_SOURCE,
    PART_NUMBER,
    PART_NUMBER_MARKER,
    RANGE,
    UPLOAD_ID,
    UPLOADS,
    XML_TYPE,
)
from nosclient.errors import (
    DEFAULT_ERROR_CATALOG,
    DeleteObjectsTooLarge,
    ErrorCatalog,
    InvalidContentLength,
    InvalidDeleteObjects,
    InvalidFile,
    InvalidSource,
    NosClientError,
    NosRequestError,
    format_resource,
)
from nosclient.logging_config import configure_logging
from nosclient.models import (
    AbortMultiUploadRequest,
    CompleteMultiUploadRequest,
    CompleteMultiUploadResult,
    CopyObjectRequest,
    DeleteMultiObjectsRequest,
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
    PutObjectRequest,
    UploadPartRequest,
)
from nosclient.request import NosRequestBuilder, RequestBody, nos_url_encode
from nosclient.response import (
    parse_xml_body,
    populate_all_headers,
    populate_response_header,
    process_server_error,
    remove_quotes,
)
from nosclient.transport import Transport, capped_chunks, new_http_client
from nosclient.validation import (
    verify_bucket,
    verify_metadata,
    verify_object,
    verify_object_with_length,
)
from nosclient.xml_utils import (
    parse_complete_multipart_upload,
    parse_delete_result,
    parse_init_multipart_upload,
    parse_list_multipart_uploads,
    parse_list_objects,
    parse_list_parts,
    render_complete_multipart_upload,
    render_delete_objects,
)

_OK = 200
_PARTIAL_CONTENT = 206
_NOT_MODIFIED = 304
_NOT_FOUND = 404


class NosClient:
    """Synchronous client for the NOS object-storage API.

    Attributes:
        config: The frozen configuration the client was built from.
        errors: The error catalog used to build client-side errors.
        log: Logger receiving one DEBUG line per response.
    """

    def __init__(
        self,
        config: NosConfig,
        http_client: httpx.Client | None = None,
        errors: ErrorCatalog = DEFAULT_ERROR_CATALOG,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Create a client.

        Args:
            config: Endpoint, credentials, and HTTP settings.
            http_client: An ``httpx.Client`` to use instead of building one
                from ``config``; the client takes ownership and closes it.
            errors: Error catalog for client-side errors.
            logger: Logger to use instead of the module logger.
            clock: Source of the Date header; defaults to the UTC wall clock.
        """
        self.config = config
        self.errors = errors
        self.log = logger or logging.getLogger(__name__)

        builder_kwargs = {}
        if clock is not None:
            builder_kwargs["clock"] = clock
        self._builder = NosRequestBuilder(
            endpoint=config.endpoint,
            access_key=config.access_key,
            secret_key=config.secret_key,
            protocol=config.protocol,
            errors=errors,
            **builder_kwargs,
        )
        self._transport = Transport(http_client or new_http_client(config))

        if config.metrics_enabled:
            metrics.init_metrics()

    @classmethod
    def from_config_file(cls, path: Path | str, **kwargs) -> NosClient:
        """Build a client from a YAML config file and apply its logging settings."""
        config = load_config(Path(path))
        configure_logging(config.log_level, config.log_format)
        return cls(config, **kwargs)

    def close(self) -> None:
        """Close the pooled HTTP client."""
        self._transport.close()

    def __enter__(self) -> NosClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -- Plumbing -------------------------------------------------------------

    def _require(self, request: object) -> None:
        if request is None:
            raise self.errors.client_error(NosRequestError.code)

    def _send(
        self,
        operation: str,
        method: str,
        bucket: str,
        obj: str = "",
        metadata: ObjectMetadata | None = None,
        body: RequestBody = None,
        params: Mapping[str, str] | None = None,
        body_style: str = JSON_TYPE,
        stream: bool = False,
    ) -> httpx.Response:
        """Build, sign, and send one request; log and count the outcome."""
        request = self._builder.build(method, bucket, obj, metadata, body, params, body_style)
        try:
            resp = self._transport.execute(request, stream=stream)
        except httpx.TransportError:
            metrics.record_operation(operation, "error")
            raise
        self.log.debug(
            "%s resp.status_code=%s",
            operation,
            resp.status_code,
            extra={"operation": operation, "status": resp.status_code},
        )
        metrics.record_operation(operation, resp.status_code)
        return resp

    # -- Objects --------------------------------------------------------------

    def put_object_by_stream(self, request: PutObjectRequest) -> ObjectResult:
        """Upload ``request.body`` as a single object.

        ``body`` may be bytes or a binary file-like object. When
        ``metadata.content_length`` is set, exactly that many bytes are
        declared and at most that many are sent; a bytes body shorter than
        the declared length is rejected.

        Raises:
            NosClientError: On an invalid bucket, object, length, or metadata.
            NosServerError: If the service rejects the upload.
        """
        self._require(request)
        metadata = request.metadata.copy() if request.metadata else ObjectMetadata()

        verify_object_with_length(
            request.bucket, request.object, metadata.content_length, self.errors
        )

        body: RequestBody
        if request.body is None or isinstance(request.body, (bytes, bytearray)):
            data = bytes(request.body or b"")
            if metadata.content_length == 0:
                metadata.content_length = len(data)
            elif metadata.content_length > len(data):
                raise self.errors.client_error(
                    InvalidContentLength.code,
                    request.bucket,
                    request.object,
                    f"declared {metadata.content_length} bytes, body has {len(data)}",
                )
            body = data[: metadata.content_length]
            verify_object_with_length(
                request.bucket, request.object, metadata.content_length, self.errors
            )
        else:
            body = capped_chunks(request.body, metadata.content_length or None)

        verify_metadata(metadata.metadata, request.bucket, request.object, self.errors)

        resp = self._send(
            "put_object_by_stream",
            "PUT",
            request.bucket,
            request.object,
            metadata=metadata,
            body=body,
        )
        if resp.status_code != _OK:
            raise process_server_error(resp, request.bucket, request.object, JSON_TYPE)

        metrics.record_bytes_sent(metadata.content_length)
        request_id, etag = populate_response_header(resp)
        return ObjectResult(etag=etag, request_id=request_id)

    def put_object_by_file(self, request: PutObjectRequest) -> ObjectResult:
        """Upload the local file at ``request.file_path``.

        The content length defaults to the file size when not set. The
        caller's request and metadata are left untouched.

        Raises:
            InvalidFile: If the file cannot be opened or inspected.
        """
        self._require(request)
        metadata = request.metadata.copy() if request.metadata else ObjectMetadata()

        try:
            fh = open(request.file_path, "rb")
        except OSError as exc:
            raise self.errors.client_error(
                InvalidFile.code, request.bucket, request.object, str(exc)
            ) from exc

        with fh:
            if metadata.content_length == 0:
                try:
                    metadata.content_length = os.fstat(fh.fileno()).st_size
                except OSError as exc:
                    raise self.errors.client_error(
                        InvalidFile.code, request.bucket, request.object, str(exc)
                    ) from exc
            stream_request = dataclasses.replace(request, body=fh, metadata=metadata)
            return self.put_object_by_stream(stream_request)

    def put_object_by_bytes(
        self, bucket: str, obj: str, data: bytes, metadata: ObjectMetadata | None = None
    ) -> ObjectResult:
        """Upload an in-memory payload."""
        return self.put_object_by_stream(
            PutObjectRequest(bucket=bucket, object=obj, body=data, metadata=metadata)
        )

    def copy_object(self, request: CopyObjectRequest) -> None:
        """Copy ``src_bucket/src_object`` to ``dest_bucket/dest_object``.

        Raises:
            InvalidBucketName, InvalidObjectName: If the destination is invalid.
            InvalidSource: If the source is invalid.
            NosServerError: If the service rejects the copy.
        """
        self._require(request)
        self._transfer(
            "copy_object",
            NOS_COPY_SOURCE,
            request.src_bucket,
            request.src_object,
            request.dest_bucket,
            request.dest_object,
        )

    def move_object(self, request: MoveObjectRequest) -> None:
        """Move ``src_bucket/src_object`` to ``dest_bucket/dest_object``.

        Raises:
            InvalidBucketName, InvalidObjectName: If the destination is invalid.
            InvalidSource: If the source is invalid.
            NosServerError: If the service rejects the move.
        """
        self._require(request)
        self._transfer(
            "move_object",
            NOS_MOVE_SOURCE,
            request.src_bucket,
            request.src_object,
            request.dest_bucket,
            request.dest_object,
        )

    def _transfer(
        self,
        operation: str,
        source_header: str,
        src_bucket: str,
        src_object: str,
        dest_bucket: str,
        dest_object: str,
    ) -> None:
        verify_object(dest_bucket, dest_object, self.errors)
        try:
            verify_object(src_bucket, src_object, self.errors)
        except NosClientError as exc:
            raise self.errors.client_error(
                InvalidSource.code,
                dest_bucket,
                dest_object,
                f"source {format_resource(src_bucket, src_object) or '(empty)'}",
            ) from exc

        source = f"/{nos_url_encode(src_bucket)}/{nos_url_encode(src_object)}"
        metadata = ObjectMetadata(metadata={source_header: source})
        resp = self._send(operation, "PUT", dest_bucket, dest_object, metadata=metadata)
        if resp.status_code != _OK:
            raise process_server_error(resp, dest_bucket, dest_object, JSON_TYPE)

    def delete_object(self, request: ObjectRequest) -> None:
        """Delete one object.

        Raises:
            NosServerError: If the service rejects the delete.
        """
        self._require(request)
        verify_object(request.bucket, request.object, self.errors)

        resp = self._send("delete_object", "DELETE", request.bucket, request.object)
        if resp.status_code != _OK:
            raise process_server_error(resp, request.bucket, request.object, JSON_TYPE)

    def delete_multi_objects(self, request: DeleteMultiObjectsRequest) -> DeleteObjectsResult:
        """Delete up to ``MAX_DELETE_OBJECTS`` objects in one request.

        Raises:
            InvalidDeleteObjects: If no object list is given.
            DeleteObjectsTooLarge: If the key count or XML body is over the limit.
            NosServerError: If the service rejects the request.
            NosDecodeError: If the result body is not valid XML.
        """
        self._require(request)
        verify_bucket(request.bucket, self.errors)
        if request.objects is None:
            raise self.errors.client_error(InvalidDeleteObjects.code, request.bucket)
        if len(request.objects.keys) > MAX_DELETE_OBJECTS:
            raise self.errors.client_error(
                DeleteObjectsTooLarge.code,
                request.bucket,
                detail=f"{len(request.objects.keys)} keys > {MAX_DELETE_OBJECTS}",
            )

        body = render_delete_objects(request.objects).encode("utf-8")
        if len(body) > MAX_DELETE_BODY:
            raise self.errors.client_error(
                DeleteObjectsTooLarge.code,
                request.bucket,
                detail=f"{len(body)} bytes > {MAX_DELETE_BODY}",
            )

        metadata = ObjectMetadata(
            metadata={CONTENT_MD5: hashlib.md5(body).hexdigest()},
            content_length=len(body),
        )
        resp = self._send(
            "delete_multi_objects",
            "POST",
            request.bucket,
            metadata=metadata,
            body=body,
            params={DELETE: ""},
            body_style=XML_TYPE,
        )
        if resp.status_code != _OK:
            raise process_server_error(resp, request.bucket, "", XML_TYPE)
        return parse_xml_body(resp, parse_delete_result, format_resource(request.bucket))

    def get_object(self, request: GetObjectRequest) -> NosObject | None:
        """Open an object for streaming.

        The returned ``NosObject`` holds the live connection and must be
        closed by the caller. A ranged read answered with 206 is returned
        the same way, with ``is_partial`` set.

        Returns:
            The streaming object, or ``None`` when a conditional GET is
            answered with 304 Not Modified.

        Raises:
            NosServerError: For any other non-success status.
        """
        self._require(request)
        verify_object(request.bucket, request.object, self.errors)

        metadata = ObjectMetadata(
            metadata={
                IF_MODIFIED_SINCE: request.if_modified_since,
                RANGE: request.obj_range,
            }
        )
        resp = self._send(
            "get_object",
            "GET",
            request.bucket,
            request.object,
            metadata=metadata,
            stream=True,
        )
        if resp.status_code in (_OK, _PARTIAL_CONTENT):
            return NosObject(
                bucket=request.bucket,
                key=request.object,
                metadata=populate_all_headers(resp),
                response=resp,
            )
        if resp.status_code == _NOT_MODIFIED:
            resp.close()
            return None
        raise process_server_error(resp, request.bucket, request.object, JSON_TYPE)

    def does_object_exist(self, request: ObjectRequest) -> bool:
        """Check for an object with a HEAD request.

        Returns:
            True on 200, False on 404.

        Raises:
            NosServerError: For any other status.
        """
        self._require(request)
        verify_object(request.bucket, request.object, self.errors)

        resp = self._send("does_object_exist", "HEAD", request.bucket, request.object)
        if resp.status_code == _OK:
            return True
        if resp.status_code == _NOT_FOUND:
            return False
        raise process_server_error(resp, request.bucket, request.object, JSON_TYPE)

    def get_object_metadata(self, request: ObjectRequest) -> ObjectMetadata:
        """Fetch an object's headers with a HEAD request."""
        self._require(request)
        verify_object(request.bucket, request.object, self.errors)

        resp = self._send("get_object_metadata", "HEAD", request.bucket, request.object)
        if resp.status_code != _OK:
            raise process_server_error(resp, request.bucket, request.object, JSON_TYPE)
        return populate_all_headers(resp)

    def list_objects(self, request: ListObjectsRequest) -> ListObjectsResult:
        """List objects in a bucket; ``max_keys`` defaults to 100."""
        self._require(request)
        verify_bucket(request.bucket, self.errors)

        max_keys = request.max_keys if request.max_keys > 0 else DEFAULT_MAX_KEYS
        params = {
            LIST_PREFIX: request.prefix,
            LIST_DELIMITER: request.delimiter,
            LIST_MARKER: request.marker,
            LIST_MAX_KEYS: str(max_keys),
        }
        resp = self._send(
            "list_objects", "GET", request.bucket, params=params, body_style=XML_TYPE
        )
        if resp.status_code != _OK:
            raise process_server_error(resp, request.bucket, "", XML_TYPE)
        return parse_xml_body(resp, parse_list_objects, format_resource(request.bucket))

    # -- Multipart upload -----------------------------------------------------

    def init_multi_upload(self, request: InitMultiUploadRequest) -> InitMultiUploadResult:
        """Start a multipart upload and return its upload id."""
        self._require(request)
        verify_object(request.bucket, request.object, self.errors)
        metadata = request.metadata.copy() if request.metadata else None
        if metadata is not None:
            verify_metadata(metadata.metadata, request.bucket, request.object, self.errors)

        resp = self._send(
            "init_multi_upload",
            "POST",
            request.bucket,
            request.object,
            metadata=metadata,
            params={UPLOADS: ""},
            body_style=XML_TYPE,
        )
        if resp.status_code != _OK:
            raise process_server_error(resp, request.bucket, request.object, XML_TYPE)
        return parse_xml_body(
            resp,
            parse_init_multipart_upload,
            format_resource(request.bucket, request.object),
        )

    def upload_part(self, request: UploadPartRequest) -> ObjectResult:
        """Upload one part.

        No more than ``part_size`` bytes of ``content`` are sent, and the
        Content-Length header advertises exactly what is sent.
        """
        self._require(request)
        verify_object(request.bucket, request.object, self.errors)
        self._verify_upload_id(request.upload_id, request.bucket, request.object)
        if request.part_number < 1:
            raise self.errors.client_error(
                NosRequestError.code,
                request.bucket,
                request.object,
                f"part number must be positive, got {request.part_number}",
            )

        size = request.part_size if request.part_size > 0 else len(request.content)
        size = min(size, len(request.content))
        verify_object_with_length(request.bucket, request.object, size, self.errors)

        params = {
            UPLOAD_ID: request.upload_id,
            PART_NUMBER: str(request.part_number),
        }
        resp = self._send(
            "upload_part",
            "PUT",
            request.bucket,
            request.object,
            metadata=ObjectMetadata(content_length=size),
            body=capped_chunks(io.BytesIO(request.content), size),
            params=params,
        )
        if resp.status_code != _OK:
            raise process_server_error(resp, request.bucket, request.object, JSON_TYPE)

        metrics.record_bytes_sent(size)
        request_id, etag = populate_response_header(resp)
        return ObjectResult(etag=etag, request_id=request_id)

    def complete_multi_upload(
        self, request: CompleteMultiUploadRequest
    ) -> CompleteMultiUploadResult:
        """Assemble the uploaded parts into the final object.

        Parts are sent in ascending part-number order. The returned ETag
        has its surrounding quotes removed.
        """
        self._require(request)
        verify_object(request.bucket, request.object, self.errors)
        self._verify_upload_id(request.upload_id, request.bucket, request.object)

        body = render_complete_multipart_upload(request.parts).encode("utf-8")
        resp = self._send(
            "complete_multi_upload",
            "POST",
            request.bucket,
            request.object,
            metadata=ObjectMetadata(content_length=len(body)),
            body=body,
            params={UPLOAD_ID: request.upload_id},
            body_style=XML_TYPE,
        )
        if resp.status_code != _OK:
            raise process_server_error(resp, request.bucket, request.object, XML_TYPE)

        result = parse_xml_body(
            resp,
            parse_complete_multipart_upload,
            format_resource(request.bucket, request.object),
        )
        result.etag = remove_quotes(result.etag)
        return result

    def abort_multi_upload(self, request: AbortMultiUploadRequest) -> None:
        """Abort a multipart upload and discard its parts."""
        self._require(request)
        verify_object(request.bucket, request.object, self.errors)
        self._verify_upload_id(request.upload_id, request.bucket, request.object)

        resp = self._send(
            "abort_multi_upload",
            "DELETE",
            request.bucket,
            request.object,
            params={UPLOAD_ID: request.upload_id},
        )
        if resp.status_code != _OK:
            raise process_server_error(resp, request.bucket, request.object, JSON_TYPE)

    def list_upload_parts(self, request: ListUploadPartsRequest) -> ListPartsResult:
        """List the parts uploaded so far for one multipart upload."""
        self._require(request)
        verify_object(request.bucket, request.object, self.errors)
        self._verify_upload_id(request.upload_id, request.bucket, request.object)

        params = {UPLOAD_ID: request.upload_id}
        if request.max_parts > 0:
            params[MAX_PARTS] = str(request.max_parts)
        if request.part_number_marker > 0:
            params[PART_NUMBER_MARKER] = str(request.part_number_marker)

        resp = self._send(
            "list_upload_parts",
            "GET",
            request.bucket,
            request.object,
            params=params,
            body_style=XML_TYPE,
        )
        if resp.status_code != _OK:
            raise process_server_error(resp, request.bucket, request.object, XML_TYPE)
        return parse_xml_body(
            resp, parse_list_parts, format_resource(request.bucket, request.object)
        )

    def list_multi_uploads(self, request: ListMultiUploadsRequest) -> ListMultiUploadsResult:
        """List in-progress multipart uploads; ``max_uploads`` defaults to 1000."""
        self._require(request)
        verify_bucket(request.bucket, self.errors)

        max_uploads = request.max_uploads if request.max_uploads > 0 else DEFAULT_MAX_UPLOADS
        params = {
            UPLOADS: "",
            LIST_KEY_MARKER: request.key_marker,
            LIST_MAX_UPLOADS: str(max_uploads),
        }
        resp = self._send(
            "list_multi_uploads", "GET", request.bucket, params=params, body_style=XML_TYPE
        )
        if resp.status_code != _OK:
            raise process_server_error(resp, request.bucket, "", XML_TYPE)
        return parse_xml_body(
            resp, parse_list_multipart_uploads, format_resource(request.bucket)
        )

    def _verify_upload_id(self, upload_id: str, bucket: str, obj: str) -> None:
        if not upload_id:
            raise self.errors.client_error(
                NosRequestError.code, bucket, obj, "upload id must not be empty"
            )

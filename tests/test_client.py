"""Tests for the NosClient operation facade.

Every test runs against the StubService from conftest, so the request
the client produced can be inspected and the response it receives chosen.
"""

import hashlib
from types import MappingProxyType
from xml.etree import ElementTree
from xml.sax.saxutils import escape

import httpx
import pytest

from nosclient.auth import build_string_to_sign, compute_signature
from nosclient.client import NosClient
from nosclient.config import NosConfig
from nosclient.errors import (
    DeleteObjectsTooLarge,
    ErrorCatalog,
    InvalidBucketName,
    InvalidContentLength,
    InvalidDeleteObjects,
    InvalidFile,
    InvalidMetadata,
    InvalidObjectName,
    InvalidSource,
    NosDecodeError,
    NosRequestError,
    NosServerError,
)
from nosclient.models import (
    AbortMultiUploadRequest,
    CompleteMultiUploadRequest,
    CopyObjectRequest,
    DeleteMultiObjectsRequest,
    DeleteObjects,
    GetObjectRequest,
    InitMultiUploadRequest,
    ListMultiUploadsRequest,
    ListObjectsRequest,
    ListUploadPartsRequest,
    MoveObjectRequest,
    ObjectMetadata,
    ObjectRequest,
    Part,
    PutObjectRequest,
    UploadPartRequest,
)

from conftest import FIXED_DATE

XML_ERROR = (
    b"<Error><Code>NoSuchUpload</Code><Message>no such upload</Message>"
    b"<RequestId>req-1</RequestId></Error>"
)


class TestMissingRequest:
    """Every operation rejects a missing request object locally."""

    @pytest.mark.parametrize(
        "method",
        [
            "put_object_by_stream",
            "put_object_by_file",
            "copy_object",
            "move_object",
            "delete_object",
            "delete_multi_objects",
            "get_object",
            "does_object_exist",
            "get_object_metadata",
            "list_objects",
            "init_multi_upload",
            "upload_part",
            "complete_multi_upload",
            "abort_multi_upload",
            "list_upload_parts",
            "list_multi_uploads",
        ],
    )
    def test_none(self, nos, stub, method):
        with pytest.raises(NosRequestError):
            getattr(nos, method)(None)
        assert not stub.called


class TestValidationBeforeNetwork:
    """Invalid inputs never reach the transport."""

    @pytest.mark.parametrize(
        "call",
        [
            lambda c: c.delete_object(ObjectRequest("", "k")),
            lambda c: c.does_object_exist(ObjectRequest("b", "")),
            lambda c: c.get_object(GetObjectRequest("b", "")),
            lambda c: c.get_object_metadata(ObjectRequest("", "")),
            lambda c: c.list_objects(ListObjectsRequest("")),
            lambda c: c.put_object_by_stream(PutObjectRequest("b", "", body=b"x")),
            lambda c: c.init_multi_upload(InitMultiUploadRequest("", "k")),
            lambda c: c.list_multi_uploads(ListMultiUploadsRequest("")),
            lambda c: c.delete_multi_objects(DeleteMultiObjectsRequest("", DeleteObjects(["a"]))),
        ],
    )
    def test_invalid_names(self, nos, stub, call):
        with pytest.raises((InvalidBucketName, InvalidObjectName)):
            call(nos)
        assert not stub.called

    def test_object_name_too_long(self, nos, stub):
        with pytest.raises(InvalidObjectName):
            nos.delete_object(ObjectRequest("b", "k" * 1001))
        assert not stub.called

    def test_reserved_metadata(self, nos, stub):
        metadata = ObjectMetadata(metadata={"Authorization": "forged"})
        with pytest.raises(InvalidMetadata):
            nos.put_object_by_stream(PutObjectRequest("b", "k", body=b"x", metadata=metadata))
        assert not stub.called

    def test_content_length_too_large(self, nos, stub):
        metadata = ObjectMetadata(content_length=100 * 1024 * 1024 + 1)
        with pytest.raises(InvalidContentLength):
            nos.put_object_by_stream(PutObjectRequest("b", "k", body=b"x", metadata=metadata))
        assert not stub.called

    def test_non_ascii_metadata(self, nos, stub):
        metadata = ObjectMetadata(metadata={"x-nos-meta-name": "文件"})
        with pytest.raises(InvalidMetadata):
            nos.put_object_by_stream(PutObjectRequest("b", "k", body=b"x", metadata=metadata))
        assert not stub.called

    def test_declared_length_beyond_bytes_body(self, nos, stub):
        """A bytes body shorter than its declared length is never sent."""
        metadata = ObjectMetadata(content_length=10)
        with pytest.raises(InvalidContentLength):
            nos.put_object_by_stream(PutObjectRequest("b", "k", body=b"hello", metadata=metadata))
        assert not stub.called

    def test_custom_catalog(self, config, stub):
        catalog = ErrorCatalog(messages=MappingProxyType({"InvalidBucketName": "bucket please"}))
        client = NosClient(
            config,
            http_client=httpx.Client(transport=httpx.MockTransport(stub)),
            errors=catalog,
        )
        with pytest.raises(InvalidBucketName) as exc_info:
            client.delete_object(ObjectRequest("", "k"))
        assert exc_info.value.message == "bucket please"
        client.close()


class TestPutObject:
    """Tests for put_object_by_stream, put_object_by_file, put_object_by_bytes."""

    def test_stream_bytes(self, nos, stub):
        stub.respond(200, headers={"ETag": '"etag-1"', "x-nos-request-id": "req-1"})
        result = nos.put_object_by_stream(PutObjectRequest("bucket", "dir/a b", body=b"hello"))
        assert result.etag == "etag-1"
        assert result.request_id == "req-1"

        req = stub.last
        assert req.method == "PUT"
        assert req.url.host == "bucket.nos.example.com"
        assert req.url.raw_path == b"/dir/a%20b"
        assert req.content == b"hello"
        assert req.headers["Content-Length"] == "5"
        assert req.headers["Date"] == FIXED_DATE
        assert req.headers["x-nos-entity-type"] == "json"
        assert req.headers["Authorization"].startswith("NOS test-ak:")

    def test_stream_file_like_capped(self, nos, stub, tmp_path):
        """A stream is cut at the declared content length."""
        path = tmp_path / "data.bin"
        path.write_bytes(b"0123456789")
        metadata = ObjectMetadata(content_length=4)
        with open(path, "rb") as fh:
            nos.put_object_by_stream(PutObjectRequest("b", "k", body=fh, metadata=metadata))
        assert stub.last.content == b"0123"
        assert stub.last.headers["Content-Length"] == "4"

    def test_stream_bytes_capped(self, nos, stub):
        """A bytes body is cut at the declared content length like a stream."""
        metadata = ObjectMetadata(content_length=3)
        nos.put_object_by_stream(PutObjectRequest("b", "k", body=b"hello", metadata=metadata))
        assert stub.last.content == b"hel"
        assert stub.last.headers["Content-Length"] == "3"

    def test_metadata_headers_sent(self, nos, stub):
        metadata = ObjectMetadata(
            metadata={"Content-Type": "text/plain", "x-nos-meta-owner": "me"}
        )
        nos.put_object_by_stream(PutObjectRequest("b", "k", body=b"x", metadata=metadata))
        assert stub.last.headers["Content-Type"] == "text/plain"
        assert stub.last.headers["x-nos-meta-owner"] == "me"

    def test_caller_metadata_untouched(self, nos, stub):
        metadata = ObjectMetadata(metadata={"x-nos-meta-a": "1"})
        nos.put_object_by_stream(PutObjectRequest("b", "k", body=b"abc", metadata=metadata))
        assert metadata.content_length == 0
        assert metadata.metadata == {"x-nos-meta-a": "1"}

    def test_server_error(self, nos, stub):
        stub.respond(
            403, json={"Error": {"Code": "AccessDenied", "Message": "no", "RequestId": "r"}}
        )
        with pytest.raises(NosServerError) as exc_info:
            nos.put_object_by_stream(PutObjectRequest("b", "k", body=b"x"))
        assert exc_info.value.code == "AccessDenied"
        assert exc_info.value.http_status == 403
        assert exc_info.value.resource == "/b/k"

    def test_by_file(self, nos, stub, tmp_path):
        """A 10-byte file is sent whole with its size as Content-Length."""
        path = tmp_path / "ten.txt"
        path.write_bytes(b"0123456789")
        stub.respond(200, headers={"ETag": '"e"'})
        request = PutObjectRequest("b", "ten.txt", file_path=str(path))
        result = nos.put_object_by_file(request)
        assert result.etag == "e"
        assert stub.last.content == b"0123456789"
        assert stub.last.headers["Content-Length"] == "10"
        assert request.body is None
        assert request.metadata is None

    def test_by_file_missing(self, nos, stub, tmp_path):
        with pytest.raises(InvalidFile) as exc_info:
            nos.put_object_by_file(PutObjectRequest("b", "k", file_path=str(tmp_path / "nope")))
        assert exc_info.value.resource == "/b/k"
        assert not stub.called

    def test_by_bytes(self, nos, stub):
        nos.put_object_by_bytes("b", "k", b"payload")
        assert stub.last.content == b"payload"


class TestCopyMove:
    """Tests for copy_object and move_object."""

    def test_copy_source_header(self, nos, stub):
        nos.copy_object(CopyObjectRequest("src", "dir/a b.txt", "dst", "copy.txt"))
        req = stub.last
        assert req.method == "PUT"
        assert req.url.host == "dst.nos.example.com"
        assert req.url.raw_path == b"/copy.txt"
        assert req.headers["x-nos-copy-source"] == "/src/dir/a%20b.txt"

    def test_move_source_header(self, nos, stub):
        nos.move_object(MoveObjectRequest("src", "a b", "dst", "moved"))
        assert stub.last.headers["x-nos-move-source"] == "/src/a%20b"
        assert "x-nos-copy-source" not in stub.last.headers

    @pytest.mark.parametrize("method,request_cls", [
        ("copy_object", CopyObjectRequest),
        ("move_object", MoveObjectRequest),
    ])
    def test_bad_source(self, nos, stub, method, request_cls):
        """Source problems are reported as InvalidSource on the destination."""
        with pytest.raises(InvalidSource) as exc_info:
            getattr(nos, method)(request_cls("", "k", "dst", "dk"))
        assert exc_info.value.resource == "/dst/dk"
        assert not stub.called

    @pytest.mark.parametrize("method,request_cls", [
        ("copy_object", CopyObjectRequest),
        ("move_object", MoveObjectRequest),
    ])
    def test_bad_destination(self, nos, stub, method, request_cls):
        """Destination problems keep their own error class."""
        with pytest.raises(InvalidBucketName):
            getattr(nos, method)(request_cls("src", "k", "", "dk"))
        with pytest.raises(InvalidObjectName):
            getattr(nos, method)(request_cls("src", "k", "dst", ""))
        assert not stub.called

    def test_copy_server_error(self, nos, stub):
        stub.respond(404, content=b"")
        with pytest.raises(NosServerError) as exc_info:
            nos.copy_object(CopyObjectRequest("src", "k", "dst", "dk"))
        assert exc_info.value.http_status == 404


class TestDelete:
    """Tests for delete_object and delete_multi_objects."""

    def test_delete(self, nos, stub):
        assert nos.delete_object(ObjectRequest("b", "k")) is None
        assert stub.last.method == "DELETE"

    def test_delete_idempotent(self, nos, stub):
        """Deleting the same key twice against a stateless service succeeds both times."""
        nos.delete_object(ObjectRequest("b", "k"))
        nos.delete_object(ObjectRequest("b", "k"))
        assert len(stub.requests) == 2

    def test_delete_dot_segments(self, nos, stub):
        """A key with '..' is deleted as named, not as a parent path."""
        nos.delete_object(ObjectRequest("b", "dir/../secret.txt"))
        assert stub.last.url.raw_path == b"/dir/%2E%2E/secret.txt"

    def test_multi(self, nos, stub):
        stub.respond(
            200,
            content=b"<DeleteResult><Deleted><Key>a</Key></Deleted>"
            b"<Error><Key>b</Key><Code>AccessDenied</Code><Message>no</Message></Error>"
            b"</DeleteResult>",
        )
        result = nos.delete_multi_objects(
            DeleteMultiObjectsRequest("b", DeleteObjects(["a", "b"]))
        )
        assert result.deleted == ["a"]
        assert result.errors[0].key == "b"

        req = stub.last
        assert req.method == "POST"
        assert req.url.raw_path == b"/?delete"
        assert req.headers["x-nos-entity-type"] == "xml"
        assert req.headers["Content-MD5"] == hashlib.md5(req.content).hexdigest()
        assert req.headers["Content-Length"] == str(len(req.content))
        keys = [e.text for e in ElementTree.fromstring(req.content).findall("Object/Key")]
        assert keys == ["a", "b"]

    def test_multi_every_key_round_trips(self, nos, stub):
        """Every requested key, escaped or not, comes back in the parsed result."""
        keys = [f"dir {i}/a&b<{i}>\"q\"'文件'" for i in range(300)]

        def echo_deleted(request):
            requested = [e.text for e in ElementTree.fromstring(request.content).iter("Key")]
            deleted = "".join(f"<Deleted><Key>{escape(k)}</Key></Deleted>" for k in requested)
            return httpx.Response(
                200, content=f"<DeleteResult>{deleted}</DeleteResult>".encode("utf-8")
            )

        stub.handler = echo_deleted
        result = nos.delete_multi_objects(DeleteMultiObjectsRequest("b", DeleteObjects(keys)))
        assert result.deleted == keys
        assert result.errors == []
        assert len(stub.requests) == 1

    def test_multi_no_objects(self, nos, stub):
        with pytest.raises(InvalidDeleteObjects):
            nos.delete_multi_objects(DeleteMultiObjectsRequest("b"))
        assert not stub.called

    def test_multi_at_key_ceiling(self, nos, stub):
        stub.respond(200, content=b"<DeleteResult/>")
        nos.delete_multi_objects(
            DeleteMultiObjectsRequest("b", DeleteObjects([f"k{i}" for i in range(1000)]))
        )
        assert stub.called

    def test_multi_too_many_keys(self, nos, stub):
        with pytest.raises(DeleteObjectsTooLarge):
            nos.delete_multi_objects(
                DeleteMultiObjectsRequest("b", DeleteObjects([f"k{i}" for i in range(1001)]))
            )
        assert not stub.called

    def test_multi_body_too_large(self, nos, stub):
        keys = [f"{i:04d}" + "x" * 2200 for i in range(1000)]
        with pytest.raises(DeleteObjectsTooLarge):
            nos.delete_multi_objects(DeleteMultiObjectsRequest("b", DeleteObjects(keys)))
        assert not stub.called

    def test_multi_malformed_result(self, nos, stub):
        stub.respond(200, content=b"<DeleteResult>")
        with pytest.raises(NosDecodeError):
            nos.delete_multi_objects(DeleteMultiObjectsRequest("b", DeleteObjects(["a"])))


class TestGetObject:
    """Tests for get_object status mapping and streaming."""

    def test_ok(self, nos, stub):
        stub.respond(200, content=b"body", headers={"Content-Type": "text/plain"})
        obj = nos.get_object(GetObjectRequest("b", "k"))
        assert obj.key == "k"
        assert obj.is_partial is False
        assert obj.metadata.get("content-type") == "text/plain"
        assert obj.metadata.content_length == 4
        assert obj.read() == b"body"
        assert obj.closed

    def test_partial(self, nos, stub):
        stub.respond(206, content=b"bo")
        with nos.get_object(GetObjectRequest("b", "k", obj_range="bytes=0-1")) as obj:
            assert obj.is_partial
            assert b"".join(obj.iter_bytes()) == b"bo"
        assert stub.last.headers["Range"] == "bytes=0-1"

    def test_not_modified(self, nos, stub):
        stub.respond(304)
        result = nos.get_object(GetObjectRequest("b", "k", if_modified_since=FIXED_DATE))
        assert result is None
        assert stub.last.headers["If-Modified-Since"] == FIXED_DATE

    def test_no_conditional_headers_by_default(self, nos, stub):
        nos.get_object(GetObjectRequest("b", "k")).close()
        assert "Range" not in stub.last.headers
        assert "If-Modified-Since" not in stub.last.headers

    def test_not_found(self, nos, stub):
        stub.respond(404, json={"Error": {"Code": "NoSuchKey", "Message": "missing"}})
        with pytest.raises(NosServerError) as exc_info:
            nos.get_object(GetObjectRequest("b", "k"))
        assert exc_info.value.code == "NoSuchKey"


class TestHead:
    """Tests for does_object_exist and get_object_metadata."""

    def test_exists(self, nos, stub):
        assert nos.does_object_exist(ObjectRequest("b", "k")) is True
        assert stub.last.method == "HEAD"

    def test_not_exists(self, nos, stub):
        stub.respond(404)
        assert nos.does_object_exist(ObjectRequest("b", "k")) is False

    def test_exists_other_status(self, nos, stub):
        stub.respond(403, headers={"x-nos-request-id": "req-h"})
        with pytest.raises(NosServerError) as exc_info:
            nos.does_object_exist(ObjectRequest("b", "k"))
        assert exc_info.value.code == "Forbidden"
        assert exc_info.value.request_id == "req-h"

    def test_metadata(self, nos, stub):
        stub.respond(200, headers={"Content-Length": "12", "x-nos-meta-a": "1"})
        metadata = nos.get_object_metadata(ObjectRequest("b", "k"))
        assert metadata.content_length == 12
        assert metadata.get("x-nos-meta-a") == "1"

    def test_metadata_not_found(self, nos, stub):
        stub.respond(404)
        with pytest.raises(NosServerError) as exc_info:
            nos.get_object_metadata(ObjectRequest("b", "k"))
        assert exc_info.value.code == "NotFound"


class TestListObjects:
    """Tests for list_objects."""

    def test_defaults(self, nos, stub):
        stub.respond(200, content=b"<ListBucketResult><Name>b</Name></ListBucketResult>")
        result = nos.list_objects(ListObjectsRequest("b"))
        assert result.bucket == "b"
        assert stub.last.url.raw_path == b"/?max-keys=100"
        assert stub.last.headers["x-nos-entity-type"] == "xml"

    def test_params(self, nos, stub):
        stub.respond(200, content=b"<ListBucketResult/>")
        nos.list_objects(ListObjectsRequest("b", prefix="p/", delimiter="/", marker="m", max_keys=5))
        params = stub.last.url.params
        assert params["prefix"] == "p/"
        assert params["delimiter"] == "/"
        assert params["marker"] == "m"
        assert params["max-keys"] == "5"

    def test_xml_error(self, nos, stub):
        stub.respond(404, content=b"<Error><Code>NoSuchBucket</Code></Error>")
        with pytest.raises(NosServerError) as exc_info:
            nos.list_objects(ListObjectsRequest("b"))
        assert exc_info.value.code == "NoSuchBucket"
        assert exc_info.value.resource == "/b"


class TestMultipart:
    """Tests for the multipart upload lifecycle."""

    def test_init(self, nos, stub):
        stub.respond(
            200,
            content=b"<InitiateMultipartUploadResult><Bucket>b</Bucket><Key>k</Key>"
            b"<UploadId>up-1</UploadId></InitiateMultipartUploadResult>",
        )
        metadata = ObjectMetadata(metadata={"Content-Type": "video/mp4"})
        result = nos.init_multi_upload(InitMultiUploadRequest("b", "k", metadata))
        assert result.upload_id == "up-1"
        assert stub.last.method == "POST"
        assert stub.last.url.raw_path == b"/k?uploads"
        assert stub.last.headers["Content-Type"] == "video/mp4"

    def test_init_reserved_metadata(self, nos, stub):
        metadata = ObjectMetadata(metadata={"x-nos-entity-type": "json"})
        with pytest.raises(InvalidMetadata):
            nos.init_multi_upload(InitMultiUploadRequest("b", "k", metadata))
        assert not stub.called

    def test_upload_part(self, nos, stub):
        stub.respond(200, headers={"ETag": '"part-etag"'})
        result = nos.upload_part(UploadPartRequest("b", "k", "up-1", 2, content=b"abcdef"))
        assert result.etag == "part-etag"
        assert stub.last.content == b"abcdef"
        assert stub.last.url.params["partNumber"] == "2"
        assert stub.last.url.params["uploadId"] == "up-1"

    def test_upload_part_capped(self, nos, stub):
        """Only part_size bytes are sent and Content-Length matches."""
        nos.upload_part(UploadPartRequest("b", "k", "up", 1, content=b"0123456789", part_size=4))
        assert stub.last.content == b"0123"
        assert stub.last.headers["Content-Length"] == "4"

    def test_upload_part_size_beyond_content(self, nos, stub):
        nos.upload_part(UploadPartRequest("b", "k", "up", 1, content=b"abc", part_size=10))
        assert stub.last.content == b"abc"
        assert stub.last.headers["Content-Length"] == "3"

    def test_upload_part_bad_args(self, nos, stub):
        with pytest.raises(NosRequestError):
            nos.upload_part(UploadPartRequest("b", "k", "", 1, content=b"x"))
        with pytest.raises(NosRequestError):
            nos.upload_part(UploadPartRequest("b", "k", "up", 0, content=b"x"))
        assert not stub.called

    def test_complete(self, nos, stub):
        stub.respond(
            200,
            content=b"<CompleteMultipartUploadResult><Location>loc</Location>"
            b'<Bucket>b</Bucket><Key>k</Key><ETag>"abc123"</ETag>'
            b"</CompleteMultipartUploadResult>",
        )
        result = nos.complete_multi_upload(
            CompleteMultiUploadRequest("b", "k", "up-1", [Part(2, "e2"), Part(1, "e1")])
        )
        assert result.etag == "abc123"
        assert result.location == "loc"

        req = stub.last
        assert req.method == "POST"
        assert req.url.raw_path == b"/k?uploadId=up-1"
        root = ElementTree.fromstring(req.content)
        assert [p.findtext("PartNumber") for p in root.findall("Part")] == ["1", "2"]

    def test_complete_error(self, nos, stub):
        stub.respond(404, content=XML_ERROR)
        with pytest.raises(NosServerError) as exc_info:
            nos.complete_multi_upload(CompleteMultiUploadRequest("b", "k", "up-1", []))
        assert exc_info.value.code == "NoSuchUpload"
        assert exc_info.value.request_id == "req-1"

    def test_abort(self, nos, stub):
        assert nos.abort_multi_upload(AbortMultiUploadRequest("b", "k", "up-1")) is None
        assert stub.last.method == "DELETE"
        assert stub.last.url.raw_path == b"/k?uploadId=up-1"

    def test_abort_missing_upload_id(self, nos, stub):
        with pytest.raises(NosRequestError):
            nos.abort_multi_upload(AbortMultiUploadRequest("b", "k", ""))
        assert not stub.called

    def test_list_parts(self, nos, stub):
        stub.respond(
            200,
            content=b"<ListPartsResult><UploadId>up-1</UploadId>"
            b"<Part><PartNumber>1</PartNumber><ETag>e1</ETag><Size>3</Size></Part>"
            b"</ListPartsResult>",
        )
        result = nos.list_upload_parts(ListUploadPartsRequest("b", "k", "up-1"))
        assert [p.part_number for p in result.parts] == [1]
        params = stub.last.url.params
        assert params["max-parts"] == "1000"
        assert "part-number-marker" not in params

    def test_list_parts_marker(self, nos, stub):
        stub.respond(200, content=b"<ListPartsResult/>")
        nos.list_upload_parts(ListUploadPartsRequest("b", "k", "up-1", part_number_marker=3))
        assert stub.last.url.params["part-number-marker"] == "3"

    def test_list_uploads(self, nos, stub):
        stub.respond(
            200,
            content=b"<ListMultipartUploadsResult><Bucket>b</Bucket>"
            b"<Upload><Key>k</Key><UploadId>u</UploadId></Upload>"
            b"</ListMultipartUploadsResult>",
        )
        result = nos.list_multi_uploads(ListMultiUploadsRequest("b"))
        assert [u.upload_id for u in result.uploads] == ["u"]
        assert stub.last.url.raw_path == b"/?max-uploads=1000&uploads"

    def test_list_uploads_key_marker(self, nos, stub):
        stub.respond(200, content=b"<ListMultipartUploadsResult/>")
        nos.list_multi_uploads(ListMultiUploadsRequest("b", key_marker="k1", max_uploads=5))
        assert stub.last.url.raw_path == b"/?key-marker=k1&max-uploads=5&uploads"


class TestClientLifecycle:
    """Tests for construction, anonymous access, and transport errors."""

    def test_anonymous(self, stub):
        config = NosConfig(endpoint="nos.example.com")
        with NosClient(config, http_client=httpx.Client(transport=httpx.MockTransport(stub))) as c:
            c.delete_object(ObjectRequest("b", "k"))
        assert "Authorization" not in stub.last.headers

    def test_signature_matches_request(self, nos, stub):
        nos.delete_object(ObjectRequest("b", "k"))
        req = stub.last
        expected = compute_signature(
            "test-sk", build_string_to_sign("DELETE", dict(req.headers), "b", "k")
        )
        assert req.headers["Authorization"] == f"NOS test-ak:{expected}"

    def test_transport_error_propagates(self, nos, stub):
        def refuse(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        stub.handler = refuse
        with pytest.raises(httpx.ConnectTimeout):
            nos.delete_object(ObjectRequest("b", "k"))

    def test_from_config_file(self, tmp_path, stub):
        path = tmp_path / "nos.yaml"
        path.write_text("nos:\n  endpoint: nos.example.com\nlogging:\n  level: DEBUG\n")
        client = NosClient.from_config_file(
            path, http_client=httpx.Client(transport=httpx.MockTransport(stub))
        )
        assert client.config.endpoint == "nos.example.com"
        assert client.config.log_level == "DEBUG"
        client.close()

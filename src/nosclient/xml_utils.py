"""NOS XML request rendering and response parsing helpers."""

from xml.etree import ElementTree
from xml.sax.saxutils import escape as _sax_escape

from nosclient.models import (
    CompleteMultiUploadResult,
    DeleteError,
    DeleteObjects,
    DeleteObjectsResult,
    InitMultiUploadResult,
    ListMultiUploadsResult,
    ListObjectsResult,
    ListPartsResult,
    MultipartUpload,
    ObjectSummary,
    Owner,
    Part,
    PartInfo,
)


def _escape_xml(value: str) -> str:
    """Escape special XML characters in a string value."""
    return _sax_escape(str(value))


# -- Rendering ------------------------------------------------------------------


def render_delete_objects(objects: DeleteObjects) -> str:
    """Render the body of a multi-object delete request.

    Args:
        objects: Keys to delete and the quiet flag.

    Returns:
        An XML string with a ``Delete`` root element.
    """
    parts = [
        "<Delete>",
        f"<Quiet>{str(objects.quiet).lower()}</Quiet>",
    ]
    for key in objects.keys:
        parts.append(f"<Object><Key>{_escape_xml(key)}</Key></Object>")
    parts.append("</Delete>")
    return "".join(parts)


def render_complete_multipart_upload(parts: list[Part]) -> str:
    """Render the body of a complete-multipart-upload request.

    Parts are emitted in ascending part-number order whatever order the
    caller supplied them in.

    Args:
        parts: The uploaded parts (number and ETag).

    Returns:
        An XML string with a ``CompleteMultipartUpload`` root element.
    """
    xml_parts = ["<CompleteMultipartUpload>"]
    for part in sorted(parts, key=lambda p: p.part_number):
        xml_parts.append("<Part>")
        xml_parts.append(f"<PartNumber>{part.part_number}</PartNumber>")
        xml_parts.append(f"<ETag>{_escape_xml(part.etag)}</ETag>")
        xml_parts.append("</Part>")
    xml_parts.append("</CompleteMultipartUpload>")
    return "".join(xml_parts)


# -- Parsing --------------------------------------------------------------------


def _parse_root(body: bytes) -> tuple[ElementTree.Element, str]:
    """Parse ``body`` and return the root element and its namespace prefix.

    Raises:
        ElementTree.ParseError: If the body is not well-formed XML.
    """
    root = ElementTree.fromstring(body)
    ns = ""
    if root.tag.startswith("{"):
        ns = root.tag[: root.tag.index("}") + 1]
    return root, ns


def _find_elem(
    parent: ElementTree.Element, ns: str, name: str
) -> ElementTree.Element | None:
    """Find a child element, trying the namespaced name first, then the bare name.

    Uses explicit ``is not None`` checks to avoid ElementTree's deprecated
    truth-value testing of elements.
    """
    if ns:
        elem = parent.find(f"{ns}{name}")
        if elem is not None:
            return elem
    return parent.find(name)


def _findall(parent: ElementTree.Element, ns: str, name: str) -> list[ElementTree.Element]:
    if ns:
        found = parent.findall(f"{ns}{name}")
        if found:
            return found
    return parent.findall(name)


def _text(parent: ElementTree.Element, ns: str, name: str, default: str = "") -> str:
    elem = _find_elem(parent, ns, name)
    if elem is None or elem.text is None:
        return default
    return elem.text


def _int(parent: ElementTree.Element, ns: str, name: str) -> int:
    value = _text(parent, ns, name)
    try:
        return int(value)
    except ValueError:
        return 0


def _bool(parent: ElementTree.Element, ns: str, name: str) -> bool:
    return _text(parent, ns, name).strip().lower() == "true"


def _owner(parent: ElementTree.Element, ns: str) -> Owner | None:
    elem = _find_elem(parent, ns, "Owner")
    if elem is None:
        return None
    return Owner(id=_text(elem, ns, "ID"), display_name=_text(elem, ns, "DisplayName"))


def parse_error(body: bytes) -> dict[str, str]:
    """Parse an ``<Error>`` body into code, message, request id, and resource.

    Missing elements come back as empty strings.

    Raises:
        ElementTree.ParseError: If the body is not well-formed XML.
    """
    root, ns = _parse_root(body)
    return {
        "code": _text(root, ns, "Code"),
        "message": _text(root, ns, "Message"),
        "request_id": _text(root, ns, "RequestId"),
        "resource": _text(root, ns, "Resource"),
    }


def parse_delete_result(body: bytes) -> DeleteObjectsResult:
    """Parse a ``DeleteResult`` body."""
    root, ns = _parse_root(body)
    result = DeleteObjectsResult()
    for elem in _findall(root, ns, "Deleted"):
        result.deleted.append(_text(elem, ns, "Key"))
    for elem in _findall(root, ns, "Error"):
        result.errors.append(
            DeleteError(
                key=_text(elem, ns, "Key"),
                code=_text(elem, ns, "Code"),
                message=_text(elem, ns, "Message"),
            )
        )
    return result


def parse_list_objects(body: bytes) -> ListObjectsResult:
    """Parse a ``ListBucketResult`` body."""
    root, ns = _parse_root(body)
    result = ListObjectsResult(
        bucket=_text(root, ns, "Name"),
        prefix=_text(root, ns, "Prefix"),
        delimiter=_text(root, ns, "Delimiter"),
        marker=_text(root, ns, "Marker"),
        next_marker=_text(root, ns, "NextMarker"),
        max_keys=_int(root, ns, "MaxKeys"),
        is_truncated=_bool(root, ns, "IsTruncated"),
    )
    for elem in _findall(root, ns, "Contents"):
        result.contents.append(
            ObjectSummary(
                key=_text(elem, ns, "Key"),
                last_modified=_text(elem, ns, "LastModified"),
                etag=_text(elem, ns, "ETag").strip('"'),
                size=_int(elem, ns, "Size"),
                storage_class=_text(elem, ns, "StorageClass"),
                owner=_owner(elem, ns),
            )
        )
    for elem in _findall(root, ns, "CommonPrefixes"):
        result.common_prefixes.append(_text(elem, ns, "Prefix"))
    return result


def parse_init_multipart_upload(body: bytes) -> InitMultiUploadResult:
    """Parse an ``InitiateMultipartUploadResult`` body."""
    root, ns = _parse_root(body)
    return InitMultiUploadResult(
        bucket=_text(root, ns, "Bucket"),
        object=_text(root, ns, "Key"),
        upload_id=_text(root, ns, "UploadId"),
    )


def parse_complete_multipart_upload(body: bytes) -> CompleteMultiUploadResult:
    """Parse a ``CompleteMultipartUploadResult`` body.

    The ETag is returned exactly as the service sent it; callers strip the
    surrounding quotes.
    """
    root, ns = _parse_root(body)
    return CompleteMultiUploadResult(
        location=_text(root, ns, "Location"),
        bucket=_text(root, ns, "Bucket"),
        object=_text(root, ns, "Key"),
        etag=_text(root, ns, "ETag"),
    )


def parse_list_parts(body: bytes) -> ListPartsResult:
    """Parse a ``ListPartsResult`` body."""
    root, ns = _parse_root(body)
    result = ListPartsResult(
        bucket=_text(root, ns, "Bucket"),
        object=_text(root, ns, "Key"),
        upload_id=_text(root, ns, "UploadId"),
        owner=_owner(root, ns),
        storage_class=_text(root, ns, "StorageClass"),
        part_number_marker=_int(root, ns, "PartNumberMarker"),
        next_part_number_marker=_int(root, ns, "NextPartNumberMarker"),
        max_parts=_int(root, ns, "MaxParts"),
        is_truncated=_bool(root, ns, "IsTruncated"),
    )
    for elem in _findall(root, ns, "Part"):
        result.parts.append(
            PartInfo(
                part_number=_int(elem, ns, "PartNumber"),
                last_modified=_text(elem, ns, "LastModified"),
                etag=_text(elem, ns, "ETag").strip('"'),
                size=_int(elem, ns, "Size"),
            )
        )
    return result


def parse_list_multipart_uploads(body: bytes) -> ListMultiUploadsResult:
    """Parse a ``ListMultipartUploadsResult`` body."""
    root, ns = _parse_root(body)
    result = ListMultiUploadsResult(
        bucket=_text(root, ns, "Bucket"),
        next_key_marker=_text(root, ns, "NextKeyMarker"),
        max_uploads=_int(root, ns, "MaxUploads"),
        is_truncated=_bool(root, ns, "IsTruncated"),
    )
    for elem in _findall(root, ns, "Upload"):
        result.uploads.append(
            MultipartUpload(
                key=_text(elem, ns, "Key"),
                upload_id=_text(elem, ns, "UploadId"),
                storage_class=_text(elem, ns, "StorageClass"),
                owner=_owner(elem, ns),
                initiated=_text(elem, ns, "Initiated"),
            )
        )
    return result

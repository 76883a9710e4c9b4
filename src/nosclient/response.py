"""Mapping of NOS HTTP responses to results and errors."""

import json
import logging
from collections.abc import Callable
from typing import TypeVar
from xml.etree import ElementTree

import httpx

from nosclient.consts import CONTENT_LENGTH, ETAG, NOS_REQUEST_ID, XML_TYPE
from nosclient.errors import NosDecodeError, NosServerError, format_resource
from nosclient.models import ObjectMetadata
from nosclient.xml_utils import parse_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


def remove_quotes(value: str) -> str:
    """Strip one pair of literal double quotes wrapping ``value``."""
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def populate_response_header(resp: httpx.Response) -> tuple[str, str]:
    """Return ``(request_id, etag)`` from response headers, ETag de-quoted."""
    request_id = resp.headers.get(NOS_REQUEST_ID, "")
    etag = remove_quotes(resp.headers.get(ETAG, ""))
    return request_id, etag


def populate_all_headers(resp: httpx.Response) -> ObjectMetadata:
    """Copy every response header into an ``ObjectMetadata``.

    Header names come back lowercased.
    """
    try:
        content_length = int(resp.headers.get(CONTENT_LENGTH, "0"))
    except ValueError:
        content_length = 0
    return ObjectMetadata(metadata=dict(resp.headers.items()), content_length=content_length)


def parse_xml_body(resp: httpx.Response, parser: Callable[[bytes], T], resource: str = "") -> T:
    """Decode a success body with ``parser``.

    Raises:
        NosDecodeError: If the body is not well-formed XML.
    """
    try:
        return parser(resp.content)
    except ElementTree.ParseError as exc:
        raise NosDecodeError(
            f"Malformed XML in response: {exc}",
            resource=resource,
            http_status=resp.status_code,
        ) from exc


def process_server_error(
    resp: httpx.Response, bucket: str = "", obj: str = "", body_style: str = ""
) -> NosServerError:
    """Decode a failed response into a ``NosServerError``.

    The body is read and the response closed here so the connection can be
    reused. An XML or JSON error document is decoded according to
    ``body_style`` (falling back to the other format). When the body is
    empty, as for HEAD, the code and message come from the status line and
    the request id from the ``x-nos-request-id`` header.

    Args:
        resp: The non-success response.
        bucket: Bucket the request addressed.
        obj: Object the request addressed.
        body_style: The ``x-nos-entity-type`` the request was sent with.

    Returns:
        The error for the caller to raise.
    """
    try:
        body = resp.read()
    finally:
        resp.close()

    fields = _decode_error_body(body, prefer_xml=body_style == XML_TYPE)
    if fields is None:
        fields = {}
        text = body.decode("utf-8", errors="replace").strip()
        if text:
            fields["message"] = text

    reason = resp.reason_phrase or ""
    code = fields.get("code") or reason.replace(" ", "") or str(resp.status_code)
    message = fields.get("message") or reason or f"HTTP {resp.status_code}"
    request_id = fields.get("request_id") or resp.headers.get(NOS_REQUEST_ID, "")
    resource = fields.get("resource") or format_resource(bucket, obj)

    logger.debug(
        "server error: status=%s code=%s request_id=%s",
        resp.status_code,
        code,
        request_id,
    )
    return NosServerError(
        code=code,
        message=message,
        request_id=request_id,
        resource=resource,
        http_status=resp.status_code,
    )


def _decode_error_body(body: bytes, prefer_xml: bool) -> dict[str, str] | None:
    """Try both error formats, preferred one first; None when neither parses."""
    if not body.strip():
        return None
    decoders = (_decode_xml_error, _decode_json_error)
    if not prefer_xml:
        decoders = (_decode_json_error, _decode_xml_error)
    for decode in decoders:
        fields = decode(body)
        if fields is not None:
            return fields
    return None


def _decode_xml_error(body: bytes) -> dict[str, str] | None:
    try:
        return parse_error(body)
    except ElementTree.ParseError:
        return None


def _decode_json_error(body: bytes) -> dict[str, str] | None:
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    inner = data.get("Error", data.get("error", data))
    if not isinstance(inner, dict):
        return None

    def pick(*names: str) -> str:
        for name in names:
            value = inner.get(name)
            if value is not None:
                return str(value)
        return ""

    return {
        "code": pick("Code", "code"),
        "message": pick("Message", "message"),
        "request_id": pick("RequestId", "requestId", "request_id"),
        "resource": pick("Resource", "resource"),
    }

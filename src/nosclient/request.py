"""Signed request construction for the NOS HTTP API."""

import urllib.parse
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone

import httpx

from nosclient.auth import sign_request
from nosclient.consts import (
    AUTHORIZATION,
    CONTENT_LENGTH,
    DATE,
    JSON_TYPE,
    NOS_ENTITY_TYPE,
    RFC1123_NOS,
    SUB_RESOURCES,
)
from nosclient.errors import DEFAULT_ERROR_CATALOG, ErrorCatalog, NosRequestError
from nosclient.models import ObjectMetadata

RequestBody = bytes | Iterable[bytes] | None

_DOT_SEGMENTS = {".": "%2E", "..": "%2E%2E"}


def nos_url_encode(value: str) -> str:
    """Percent-encode an object key or source path.

    Unreserved characters and ``/`` are left alone; everything else,
    including spaces, is encoded (``%20``, never ``+``). A path segment that
    is exactly ``.`` or ``..`` is encoded as ``%2E`` or ``%2E%2E`` so the HTTP
    layer cannot collapse it and the request targets the key as named.
    """
    segments = urllib.parse.quote(value, safe="/-_.~").split("/")
    return "/".join(_DOT_SEGMENTS.get(segment, segment) for segment in segments)


def format_date(dt: datetime) -> str:
    """Render ``dt`` as an RFC 1123 date in GMT."""
    return dt.astimezone(timezone.utc).strftime(RFC1123_NOS)


def encode_query(params: Mapping[str, str] | None) -> str:
    """Encode query parameters, sorted by name.

    Sub-resources with an empty value are rendered bare (``?uploads``);
    any other parameter with an empty value is left out.
    """
    if not params:
        return ""
    pairs = []
    for name in sorted(params):
        value = params[name]
        if value == "":
            if name in SUB_RESOURCES:
                pairs.append(urllib.parse.quote(name, safe=""))
            continue
        pairs.append(
            f"{urllib.parse.quote(name, safe='')}={urllib.parse.quote(str(value), safe='')}"
        )
    return "&".join(pairs)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NosRequestBuilder:
    """Builds fully formed, signed ``httpx.Request`` objects.

    Holds only immutable configuration, so one builder can be shared by
    any number of threads.

    Attributes:
        endpoint: Service host (without scheme), e.g. ``nos-eastchina1.126.net``.
        protocol: ``http`` or ``https``.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str = "",
        secret_key: str = "",
        protocol: str = "http",
        clock: Callable[[], datetime] = _utcnow,
        errors: ErrorCatalog = DEFAULT_ERROR_CATALOG,
    ) -> None:
        self.endpoint = endpoint
        self.protocol = protocol
        self._access_key = access_key
        self._secret_key = secret_key
        self._clock = clock
        self._errors = errors

    @property
    def signs_requests(self) -> bool:
        return bool(self._access_key and self._secret_key)

    def build(
        self,
        method: str,
        bucket: str,
        obj: str = "",
        metadata: ObjectMetadata | None = None,
        body: RequestBody = None,
        params: Mapping[str, str] | None = None,
        body_style: str = JSON_TYPE,
    ) -> httpx.Request:
        """Build a signed request.

        Args:
            method: HTTP method.
            bucket: Bucket name; becomes the host prefix.
            obj: Object key; URL-encoded into the path. Empty for bucket calls.
            metadata: Headers copied verbatim (empty values skipped), plus
                the content length when positive.
            body: Request body, as bytes or an iterator of byte chunks.
            params: Query parameters.
            body_style: ``json`` or ``xml``; tells the service which error
                body format to answer with.

        Returns:
            A ready-to-send ``httpx.Request``.

        Raises:
            NosRequestError: If no valid URL can be built from the inputs, or a
                header value cannot be encoded.
        """
        encoded_object = nos_url_encode(obj)
        url = f"{self.protocol}://{bucket}.{self.endpoint}/{encoded_object}"
        query = encode_query(params)
        if query:
            url += "?" + query

        headers: dict[str, str] = {
            DATE: format_date(self._clock()),
            NOS_ENTITY_TYPE: body_style,
        }
        if metadata is not None:
            for key, value in metadata.metadata.items():
                if value != "":
                    headers[key] = value
            if metadata.content_length > 0:
                headers[CONTENT_LENGTH] = str(metadata.content_length)

        if self.signs_requests:
            headers[AUTHORIZATION] = sign_request(
                method,
                headers,
                bucket,
                encoded_object,
                self._access_key,
                self._secret_key,
                params,
            )

        try:
            return httpx.Request(method, httpx.URL(url), headers=headers, content=body)
        except (httpx.InvalidURL, UnicodeEncodeError) as exc:
            raise self._errors.client_error(
                NosRequestError.code, bucket=bucket, obj=obj, detail=str(exc)
            ) from exc

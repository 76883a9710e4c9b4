"""NOS request signing.

The string to sign is::

    METHOD \\n
    Content-MD5 \\n
    Content-Type \\n
    Date \\n
    CanonicalizedHeaders CanonicalizedResource

``CanonicalizedHeaders`` is every ``x-nos-*`` header, lowercased, sorted by
name, rendered as ``name:value\\n``. ``CanonicalizedResource`` is
``/{bucket}/{encoded object}`` followed by any sub-resources from the query
string. The signature is the base64 HMAC-SHA256 of that string under the
secret key, and the Authorization header is ``NOS {access_key}:{signature}``.

Signing is a pure function of its inputs; the Date header is supplied by
the caller and the clock is never read here.
"""

import base64
import hashlib
import hmac
from collections.abc import Mapping

from nosclient.consts import (
    AUTH_SCHEME,
    CONTENT_MD5,
    CONTENT_TYPE,
    DATE,
    NOS_HEADER_PREFIX,
    SUB_RESOURCES,
)


def sign_request(
    method: str,
    headers: Mapping[str, str],
    bucket: str,
    encoded_object: str,
    access_key: str,
    secret_key: str,
    params: Mapping[str, str] | None = None,
) -> str:
    """Compute the Authorization header value for a request.

    Args:
        method: HTTP method (uppercase).
        headers: Request headers; names are matched case-insensitively.
        bucket: Bucket name.
        encoded_object: URL-encoded object key, empty for bucket-level calls.
        access_key: Access key id.
        secret_key: Secret key used as the HMAC key.
        params: Query parameters; only sub-resources are signed.

    Returns:
        The header value ``NOS {access_key}:{signature}``.
    """
    string_to_sign = build_string_to_sign(method, headers, bucket, encoded_object, params)
    return f"{AUTH_SCHEME} {access_key}:{compute_signature(secret_key, string_to_sign)}"


def build_string_to_sign(
    method: str,
    headers: Mapping[str, str],
    bucket: str,
    encoded_object: str,
    params: Mapping[str, str] | None = None,
) -> str:
    """Assemble the canonical string that gets signed."""
    lower_headers = {name.lower(): value for name, value in headers.items()}
    parts = [
        method.upper(),
        lower_headers.get(CONTENT_MD5.lower(), ""),
        lower_headers.get(CONTENT_TYPE.lower(), ""),
        lower_headers.get(DATE.lower(), ""),
    ]
    return (
        "\n".join(parts)
        + "\n"
        + _canonicalized_headers(lower_headers)
        + _canonicalized_resource(bucket, encoded_object, params)
    )


def compute_signature(secret_key: str, string_to_sign: str) -> str:
    """Return the base64-encoded HMAC-SHA256 of ``string_to_sign``."""
    digest = hmac.new(
        secret_key.encode("utf-8"), string_to_sign.encode("utf-8"), hashlib.sha256
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def _canonicalized_headers(lower_headers: Mapping[str, str]) -> str:
    """Render the sorted ``x-nos-*`` headers, one ``name:value`` per line."""
    lines = []
    for name in sorted(lower_headers):
        if name.startswith(NOS_HEADER_PREFIX):
            lines.append(f"{name}:{lower_headers[name].strip()}\n")
    return "".join(lines)


def _canonicalized_resource(
    bucket: str, encoded_object: str, params: Mapping[str, str] | None
) -> str:
    """Render ``/{bucket}/{object}`` plus signed sub-resources.

    Sub-resources are sorted by name; valueless ones (``uploads``,
    ``delete``) are rendered bare.
    """
    resource = f"/{bucket}/{encoded_object}"
    if not params:
        return resource

    sub = []
    for name in sorted(params):
        if name not in SUB_RESOURCES:
            continue
        value = params[name]
        sub.append(f"{name}={value}" if value else name)
    if sub:
        resource += "?" + "&".join(sub)
    return resource

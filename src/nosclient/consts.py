"""Wire-level constants for the NOS HTTP API."""

from enum import Enum

# -- Header names ---------------------------------------------------------------

AUTHORIZATION = "Authorization"
DATE = "Date"
CONTENT_TYPE = "Content-Type"
CONTENT_MD5 = "Content-MD5"
CONTENT_LENGTH = "Content-Length"
ETAG = "ETag"
RANGE = "Range"
IF_MODIFIED_SINCE = "If-Modified-Since"

NOS_HEADER_PREFIX = "x-nos-"
NOS_ENTITY_TYPE = "x-nos-entity-type"
NOS_REQUEST_ID = "x-nos-request-id"
NOS_COPY_SOURCE = "x-nos-copy-source"
NOS_MOVE_SOURCE = "x-nos-move-source"

# Authorization scheme: "NOS <access_key>:<signature>"
AUTH_SCHEME = "NOS"

# -- Body styles (sent as x-nos-entity-type) ------------------------------------

JSON_TYPE = "json"
XML_TYPE = "xml"

# -- Query parameters -------------------------------------------------------------

LIST_PREFIX = "prefix"
LIST_DELIMITER = "delimiter"
LIST_MARKER = "marker"
LIST_MAX_KEYS = "max-keys"
LIST_KEY_MARKER = "key-marker"
LIST_MAX_UPLOADS = "max-uploads"
UPLOADS = "uploads"
UPLOAD_ID = "uploadId"
PART_NUMBER = "partNumber"
MAX_PARTS = "max-parts"
PART_NUMBER_MARKER = "part-number-marker"
DELETE = "delete"

# Query parameters that take part in the canonical resource when signing.
SUB_RESOURCES = frozenset(
    ["acl", "delete", "location", "partNumber", "uploadId", "uploads"]
)

# -- Limits ---------------------------------------------------------------------

MAX_FILE_SIZE = 100 * 1024 * 1024
MAX_OBJECT_NAME_LENGTH = 1000
MAX_DELETE_OBJECTS = 1000
MAX_DELETE_BODY = 2 * 1024 * 1024
DEFAULT_MAX_KEYS = 100
DEFAULT_MAX_UPLOADS = 1000

# RFC 1123 date, always rendered in GMT.
RFC1123_NOS = "%a, %d %b %Y %H:%M:%S GMT"


class ReservedHeader(str, Enum):
    """Headers owned by the client; callers may not set them via metadata."""

    AUTHORIZATION = "Authorization"
    DATE = "Date"
    CONTENT_LENGTH = "Content-Length"
    CONTENT_MD5 = "Content-MD5"
    ENTITY_TYPE = "x-nos-entity-type"
    COPY_SOURCE = "x-nos-copy-source"
    MOVE_SOURCE = "x-nos-move-source"

    @classmethod
    def contains(cls, name: str) -> bool:
        """Case-insensitive membership test for a header name."""
        lowered = name.lower()
        return any(member.value.lower() == lowered for member in cls)

"""HTTP transport for the NOS client.

A single pooled ``httpx.Client`` carries every request. Network, timeout,
and TLS failures are raised as ``httpx.TransportError`` exactly as httpx
reports them; nothing is retried.
"""

import logging
from collections.abc import Iterator
from typing import BinaryIO

import httpx

from nosclient.config import NosConfig

logger = logging.getLogger(__name__)

# Streaming chunk size: 64 KB
_CHUNK_SIZE = 64 * 1024


def new_http_client(config: NosConfig) -> httpx.Client:
    """Create the shared HTTP client from the configured timeouts and pool size.

    ``read_write_timeout`` bounds each socket read and write,
    ``connect_timeout`` the TCP/TLS handshake, and ``request_timeout`` the
    wait for a free pooled connection.
    """
    timeout = httpx.Timeout(
        connect=config.connect_timeout,
        read=config.read_write_timeout,
        write=config.read_write_timeout,
        pool=config.request_timeout,
    )
    limits = httpx.Limits(
        max_keepalive_connections=config.max_idle_connections,
        keepalive_expiry=config.keepalive_expiry,
    )
    return httpx.Client(timeout=timeout, limits=limits)


def capped_chunks(
    stream: BinaryIO, limit: int | None = None, chunk_size: int = _CHUNK_SIZE
) -> Iterator[bytes]:
    """Yield chunks from ``stream``, stopping after ``limit`` bytes.

    Args:
        stream: A binary file-like object.
        limit: Maximum number of bytes to yield; ``None`` reads to EOF.
        chunk_size: Size of each read.
    """
    remaining = limit
    while remaining is None or remaining > 0:
        size = chunk_size if remaining is None else min(chunk_size, remaining)
        chunk = stream.read(size)
        if not chunk:
            return
        if remaining is not None:
            remaining -= len(chunk)
        yield chunk


class Transport:
    """Executes prepared requests on a shared ``httpx.Client``.

    The client is safe for concurrent use, and no per-call state is kept
    here.
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def execute(self, request: httpx.Request, stream: bool = False) -> httpx.Response:
        """Send ``request`` and return the response.

        With ``stream=False`` the body is read and the connection released
        before returning. With ``stream=True`` the response is returned
        open and the caller must close it.

        Raises:
            httpx.TransportError: On any network, timeout, or TLS failure.
        """
        logger.debug("%s %s", request.method, request.url)
        return self._client.send(request, stream=stream)

    def close(self) -> None:
        self._client.close()

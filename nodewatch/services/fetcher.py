"""HTTP Fetcher — bounded-timeout GET returning raw status and body.

No parsing and no retries here.  A failed fetch ends the cycle and the
next scheduled cycle tries again.

``requests`` applies its timeout per socket operation, so a server that
keeps trickling bytes would never trip it.  The body is therefore streamed
against a wall-clock deadline and a size cap.
"""

import logging
import time

import requests

from nodewatch.errors import TransportError
from nodewatch.models import FetchResult

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # seconds
MAX_BODY_BYTES = 4 * 1024 * 1024
CHUNK_SIZE = 64 * 1024


def fetch(url, timeout=DEFAULT_TIMEOUT, max_bytes=MAX_BODY_BYTES):
    """GET *url* and return a FetchResult.

    The whole request, body included, must finish within *timeout*
    seconds and the body may not exceed *max_bytes*.

    Raises:
        TransportError: on connection failure, timeout, an oversized body,
            or any other ``requests`` error.
    """
    deadline = time.monotonic() + timeout
    try:
        resp = requests.get(url, timeout=(timeout, timeout), stream=True)
        try:
            chunks = []
            size = 0
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                size += len(chunk)
                if size > max_bytes:
                    raise TransportError(url, f"body exceeds {max_bytes} bytes")
                if time.monotonic() > deadline:
                    raise TransportError(url, f"timed out after {timeout}s")
                chunks.append(chunk)
            raw = b"".join(chunks)
        finally:
            resp.close()
    except requests.Timeout:
        raise TransportError(url, f"timed out after {timeout}s")
    except requests.ConnectionError as exc:
        raise TransportError(url, f"connection failed ({exc.__class__.__name__})")
    except requests.RequestException as exc:
        raise TransportError(url, str(exc))

    log.debug("GET %s -> %d (%d bytes)", url, resp.status_code, len(raw))
    body = raw.decode(resp.encoding or "utf-8", errors="replace")
    return FetchResult(status_code=resp.status_code, body=body)

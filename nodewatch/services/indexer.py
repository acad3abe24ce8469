"""Index Extractor — reads ``lastIndex`` from a node's JSON response."""

import json
import logging

from nodewatch.errors import ExtractionError
from nodewatch.models import INDEX_PATH
from nodewatch.services import fetcher

log = logging.getLogger(__name__)

INDEX_FIELD = "lastIndex"


def extract_index(body, field=INDEX_FIELD):
    """Parse *body* as JSON and return the non-negative integer in *field*.

    Integers, integral floats and digit-only strings are accepted.  Bodies
    nested too deeply for the JSON decoder count as malformed.

    Raises:
        ExtractionError: if the body is not JSON, the field is missing,
            or its value is not a non-negative integer.
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError, RecursionError) as exc:
        raise ExtractionError(f"malformed body: {exc}")

    if not isinstance(data, dict) or field not in data:
        raise ExtractionError(f"field {field!r} missing")

    value = data[field]
    if isinstance(value, bool):
        raise ExtractionError(f"field {field!r} is not numeric: {value!r}")
    if isinstance(value, int):
        index = value
    elif isinstance(value, float) and value.is_integer():
        index = int(value)
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        index = int(value)
    else:
        raise ExtractionError(f"field {field!r} is not numeric: {value!r}")

    if index < 0:
        raise ExtractionError(f"field {field!r} is negative: {index}")
    return index


def get_last_index(base_url, timeout=fetcher.DEFAULT_TIMEOUT, fetch=None):
    """Fetch ``<base_url>/transaction/lastIndex`` and return the index.

    Raises:
        TransportError: if the node cannot be reached.
        ExtractionError: if the node answers non-2xx or with an
            unreadable body.
    """
    fetch = fetch or fetcher.fetch
    url = base_url.rstrip("/") + INDEX_PATH
    result = fetch(url, timeout=timeout)
    if not result.ok:
        raise ExtractionError(f"{url} returned HTTP {result.status_code}")
    return extract_index(result.body)

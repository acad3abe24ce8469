"""Sync Evaluator — compares the local node's last index to a reference.

The restart-for-lag decision lives in :func:`classify` and depends only on
two integers and the tolerance.  Both readings are fetched in parallel and
joined before the diff is computed.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from nodewatch.errors import ExtractionError, IndicesUnavailable, TransportError
from nodewatch.models import SyncVerdict
from nodewatch.services import fetcher, indexer

log = logging.getLogger(__name__)


def classify(local_index, reference_index, tolerance):
    """Return the SyncVerdict for two readings.

    ``diff == tolerance`` is synced, and a negative diff (local ahead of
    the reference) is always synced.
    """
    if tolerance < 0:
        raise ValueError(f"tolerance must be >= 0, got {tolerance}")
    return SyncVerdict(
        local_index=local_index,
        reference_index=reference_index,
        tolerance=tolerance,
    )


def evaluate(local_url, reference_url, tolerance,
             timeout=fetcher.DEFAULT_TIMEOUT, fetch=None):
    """Read both indices and classify the gap.

    Raises:
        IndicesUnavailable: if either reading fails to fetch or parse.
        ValueError: if *tolerance* is negative.
    """
    if tolerance < 0:
        raise ValueError(f"tolerance must be >= 0, got {tolerance}")

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="last-index") as pool:
        futures = {
            "local": pool.submit(indexer.get_last_index, local_url, timeout, fetch),
            "reference": pool.submit(indexer.get_last_index, reference_url, timeout, fetch),
        }
        readings = {}
        for side, future in futures.items():
            try:
                readings[side] = future.result()
            except (TransportError, ExtractionError) as exc:
                log.info("Could not read %s index: %s", side, exc)
                raise IndicesUnavailable(side, exc) from exc

    return classify(readings["local"], readings["reference"], tolerance)

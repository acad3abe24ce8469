"""Beast + Edge-case tests for the sync evaluator."""

import pytest

from nodewatch.errors import ExtractionError, IndicesUnavailable, TransportError
from nodewatch.models import FetchResult
from nodewatch.services import sync

from conftest import StubFetch

LOCAL = "https://node.example.com"
REF = "https://ref.example.com"


def _fetch(local, reference):
    routes = {}
    for base, value in ((LOCAL, local), (REF, reference)):
        if isinstance(value, int):
            value = {"lastIndex": value}
        routes[base + "/transaction/lastIndex"] = value
    return StubFetch(routes)


# ── classify ───────────────────────────────────────────────────────────────

@pytest.mark.parametrize("tolerance", [0, 1, 10, 1000])
def test_within_tolerance_is_synced(tolerance):
    """Beast: reference - local <= tolerance is synced."""
    for diff in (0, tolerance):
        verdict = sync.classify(500, 500 + diff, tolerance)
        assert verdict.diff == diff
        assert verdict.synced


@pytest.mark.parametrize("tolerance", [0, 1, 10, 1000])
def test_beyond_tolerance_is_unsynced(tolerance):
    """Beast: one past the tolerance is unsynced."""
    verdict = sync.classify(500, 500 + tolerance + 1, tolerance)
    assert not verdict.synced


@pytest.mark.parametrize("tolerance", [0, 10])
def test_local_ahead_is_always_synced(tolerance):
    """4% edge: a negative diff counts as synced."""
    verdict = sync.classify(910, 905, tolerance)
    assert verdict.diff == -5
    assert verdict.synced


def test_classify_rejects_negative_tolerance():
    with pytest.raises(ValueError):
        sync.classify(1, 2, -1)


# ── evaluate ───────────────────────────────────────────────────────────────

def test_evaluate_lagging_node():
    """Beast: tolerance 10, local 890, reference 905 → diff 15, unsynced."""
    verdict = sync.evaluate(LOCAL, REF, 10, fetch=_fetch(890, 905))
    assert verdict.local_index == 890
    assert verdict.reference_index == 905
    assert verdict.diff == 15
    assert not verdict.synced


def test_evaluate_synced_node():
    """Beast: tolerance 10, local 900, reference 905 → diff 5, synced."""
    verdict = sync.evaluate(LOCAL, REF, 10, fetch=_fetch(900, 905))
    assert verdict.diff == 5
    assert verdict.synced


def test_evaluate_reads_both_nodes():
    """Beast: both the local and the reference node are queried."""
    fetch = _fetch(900, 905)
    sync.evaluate(LOCAL, REF, 10, timeout=4, fetch=fetch)
    assert sorted(fetch.calls) == sorted([
        (LOCAL + "/transaction/lastIndex", 4),
        (REF + "/transaction/lastIndex", 4),
    ])


@pytest.mark.parametrize("local, reference, side", [
    ({"lastIndex": "n/a"}, 905, "local"),
    (900, {"nothing": 1}, "reference"),
    (FetchResult(502, "bad gateway"), 905, "local"),
    (900, TransportError(REF, "timed out"), "reference"),
])
def test_evaluate_failure_is_indices_unavailable(local, reference, side):
    """4% edge: either side failing yields IndicesUnavailable."""
    with pytest.raises(IndicesUnavailable) as info:
        sync.evaluate(LOCAL, REF, 10, fetch=_fetch(local, reference))
    assert info.value.side == side
    assert isinstance(info.value.cause, (TransportError, ExtractionError))


def test_evaluate_rejects_negative_tolerance_before_fetching():
    fetch = _fetch(1, 2)
    with pytest.raises(ValueError):
        sync.evaluate(LOCAL, REF, -1, fetch=fetch)
    assert fetch.calls == []

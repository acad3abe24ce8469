"""Tests for the watchdog entry point's single-cycle mode."""

import fcntl

import pytest

import watchdog
from nodewatch.models import FetchResult
from nodewatch.services.monitor import NodeWatchdog

from conftest import StubFetch, StubRestarter, make_routes


def _wd(identity):
    fetch = StubFetch(make_routes(identity, registry=FetchResult(503, "")))
    return NodeWatchdog(identity, fetch=fetch, restarter=StubRestarter())


def test_run_once_runs_a_cycle(identity, tmp_path):
    report = watchdog.run_once(_wd(identity), lock_path=tmp_path / "wd.lock")
    assert report is not None
    assert report.registry_status == 503


def test_run_once_skips_when_locked(identity, tmp_path):
    """Beast: a second process holding the lock makes this run a no-op."""
    lock_path = tmp_path / "wd.lock"
    wd = _wd(identity)
    with open(lock_path, "w") as held:
        fcntl.flock(held.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        assert watchdog.run_once(wd, lock_path=lock_path) is None
    assert wd.history() == []


def test_main_rejects_bad_config(monkeypatch, tmp_path):
    monkeypatch.setattr(watchdog, "configure_logging", lambda: None)
    monkeypatch.delenv("NODEWATCH_NODE_HOST", raising=False)
    monkeypatch.setattr(watchdog.config, "CONFIG_FILE", "")
    assert watchdog.main(["--once"]) == 2


class _FlakyWatchdog:
    def __init__(self):
        self.calls = 0

    def run_cycle(self):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("unexpected")
        return None


def test_run_forever_survives_a_failing_cycle(caplog):
    """Beast: an error in one cycle is logged and the next cycle still runs."""
    wd = _FlakyWatchdog()
    sleeps = []

    def _sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) == 2:
            raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        watchdog.run_forever(wd, 30, sleep=_sleep)
    assert wd.calls == 2
    assert sleeps == [30, 30]
    assert "Unexpected error during watchdog cycle" in caplog.text

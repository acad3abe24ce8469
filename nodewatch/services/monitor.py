"""Node Watchdog — one registry/sync evaluation per cycle.

Responsibilities:
  - Check the node manager listing for this node
  - Compare the local node's last index to the reference node
  - Restart the node when it is unregistered or lagging
  - Keep a short in-memory history of cycle reports
  - Optionally run cycles on a background thread

Each cycle ends in exactly one CycleOutcome and issues at most one
restart.  Cycles never overlap: a call made while another cycle holds the
lock returns None without doing anything.
"""

import logging
import threading
from collections import deque
from datetime import datetime

import config
from nodewatch.errors import IndicesUnavailable, TransportError
from nodewatch.models import CycleOutcome, CycleReport
from nodewatch.services import fetcher, registry, sync
from nodewatch.services.restarter import RestartController

log = logging.getLogger(__name__)


class NodeWatchdog:
    """Registry + sync watchdog for a single node."""

    def __init__(self, identity, fetch=None, restarter=None, history_size=None):
        self.identity = identity
        self._fetch = fetch or fetcher.fetch
        self._restarter = restarter or RestartController(identity.restart_command)
        self._history = deque(maxlen=history_size or config.HISTORY_SIZE)
        self._cycle_lock = threading.Lock()
        self._history_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread = None

    # ── Single Cycle ───────────────────────────────────────────────────────

    def run_cycle(self):
        """Run one cycle and return its CycleReport.

        Returns None if another cycle is already in progress.
        """
        if not self._cycle_lock.acquire(blocking=False):
            log.warning("Cycle already in progress; skipping this invocation.")
            return None
        try:
            report = self._evaluate()
        finally:
            self._cycle_lock.release()

        with self._history_lock:
            self._history.append(report)
        return report

    @property
    def cycle_in_progress(self):
        return self._cycle_lock.locked()

    def _evaluate(self):
        ident = self.identity
        report = CycleReport(started_at=datetime.now())
        self._note(report, "Performing status check for %s on %s.",
                   ident.node_host, ident.network)

        # ── Registry ───────────────────────────────────────────────────
        try:
            status = registry.check_registry(
                ident.nodes_url, ident.node_host,
                timeout=ident.fetch_timeout, fetch=self._fetch,
            )
        except TransportError as exc:
            report.detail = str(exc)
            self._note(report, "Node manager unreachable: %s", exc)
            return self._finish(report, CycleOutcome.REGISTRY_UNREACHABLE)

        report.registry_status = status.status_code
        if not status.reachable:
            self._note(report, "Node manager returned unusual status code: %d",
                       status.status_code)
            return self._finish(report, CycleOutcome.REGISTRY_UNREACHABLE)

        if not status.present:
            self._note(report, "%s: node %s not found (status %d). Performing restart.",
                       CycleOutcome.NODE_NOT_REGISTERED.value, ident.node_host,
                       status.status_code)
            return self._restart(report, reason="unregistered")

        self._note(report, "Node %s is connected (status %d).",
                   ident.node_host, status.status_code)

        # ── Sync ───────────────────────────────────────────────────────
        report.tolerance = ident.unsync_tolerance
        self._note(report, "Performing sync check.")
        try:
            verdict = sync.evaluate(
                ident.node_url, ident.reference_url, ident.unsync_tolerance,
                timeout=ident.fetch_timeout, fetch=self._fetch,
            )
        except IndicesUnavailable as exc:
            report.detail = str(exc)
            self._note(report, "Error getting last index (%s). Try again later.", exc)
            return self._finish(report, CycleOutcome.INDICES_UNAVAILABLE)

        report.local_index = verdict.local_index
        report.reference_index = verdict.reference_index
        report.diff = verdict.diff

        if verdict.synced:
            self._note(report, "Node is synced (local=%d reference=%d difference=%d tolerance=%d).",
                       verdict.local_index, verdict.reference_index,
                       verdict.diff, verdict.tolerance)
            return self._finish(report, CycleOutcome.SYNCED)

        self._note(report, "Node is unsynced (local=%d reference=%d difference=%d tolerance=%d). "
                   "Performing restart.", verdict.local_index, verdict.reference_index,
                   verdict.diff, verdict.tolerance)
        return self._restart(report, reason="lag")

    def _restart(self, report, reason):
        result = self._restarter.restart()
        report.reason = reason
        report.restart_issued = result.issued
        report.restart_error = result.error
        if result.error:
            self._note(report, "Restart (%s) failed to complete: %s", reason, result.error)
        return self._finish(report, CycleOutcome.UNSYNCED_RESTARTED)

    def _finish(self, report, outcome):
        report.outcome = outcome
        report.finished_at = datetime.now()
        self._note(report, "Cycle outcome: %s%s", outcome.value,
                   f" (reason={report.reason})" if report.reason else "")
        return report

    @staticmethod
    def _note(report, msg, *args):
        """Log one decision point and keep it on the report."""
        log.info(msg, *args)
        report.transitions.append(msg % args if args else msg)

    # ── History ────────────────────────────────────────────────────────────

    def history(self, limit=50):
        """Return up to *limit* reports, newest first."""
        with self._history_lock:
            reports = list(self._history)
        reports.reverse()
        return reports[:max(limit, 0)]

    @property
    def last_report(self):
        with self._history_lock:
            return self._history[-1] if self._history else None

    # ── Background Loop ────────────────────────────────────────────────────

    @property
    def loop_running(self):
        return self._thread is not None and self._thread.is_alive()

    def start_loop(self):
        """Start the background cycle thread."""
        if self.loop_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, daemon=True, name="node-watchdog"
        )
        self._thread.start()
        log.info("Watchdog loop started (every %ds).", self.identity.check_interval)

    def stop_loop(self, timeout=None):
        """Signal the background thread to stop and wait for it."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def _loop(self):
        while not self._stop.is_set():
            try:
                self.run_cycle()
            except Exception:
                log.exception("Unexpected error during watchdog cycle.")
            self._stop.wait(self.identity.check_interval)

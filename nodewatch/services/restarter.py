"""Restart Controller — runs the configured service-restart command.

Fire-and-forget: the exit status is logged, never acted upon.  Whether
the restart worked is judged by the next cycle's registry and sync checks.
"""

import logging
import shlex
import subprocess

from nodewatch.models import RestartResult

log = logging.getLogger(__name__)

RESTART_TIMEOUT = 60  # seconds


class RestartController:
    """Invokes one opaque restart command, e.g. ``systemctl restart cnode``."""

    def __init__(self, command, timeout=RESTART_TIMEOUT):
        self.command = command
        self.timeout = timeout

    def restart(self):
        """Run the command once.  Never raises, never retries."""
        argv = shlex.split(self.command or "")
        if not argv:
            log.error("No restart command configured; restart skipped.")
            return RestartResult(issued=False, error="no restart command configured")

        log.warning("Restarting node: %s", self.command)
        try:
            proc = subprocess.run(
                argv,
                capture_output=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            log.error("Restart command timed out after %ds.", self.timeout)
            return RestartResult(issued=True, error=f"timed out after {self.timeout}s")
        except OSError as exc:
            log.error("Failed to run restart command: %s", exc)
            return RestartResult(issued=False, error=str(exc))

        if proc.returncode != 0:
            log.warning(
                "Restart command exited with %d: %s",
                proc.returncode,
                (proc.stderr or b"").decode(errors="replace").strip(),
            )
        else:
            log.info("Restart command sent.")
        return RestartResult(issued=True, returncode=proc.returncode)

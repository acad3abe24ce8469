"""Node Watchdog — checks registry membership and sync lag on a schedule.

If the node manager does not list this node, or the node trails the
reference node by more than the configured tolerance, the configured
restart command is run.

Run:
    python watchdog.py          # loop every NODEWATCH_CHECK_INTERVAL seconds
    python watchdog.py --once   # single cycle, for cron / systemd timers
"""

import argparse
import fcntl
import logging
import sys
import time

import config
from nodewatch import configure_logging
from nodewatch.services.monitor import NodeWatchdog

log = logging.getLogger("watchdog")


def run_once(watchdog, lock_path=None):
    """Run a single cycle unless another process holds the lock file.

    Returns the CycleReport, or None if the cycle was skipped.
    """
    lock_path = lock_path or config.LOCK_FILE
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "w", encoding="utf-8") as handle:
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            log.warning("Another watchdog cycle holds %s; skipping.", lock_path)
            return None
        try:
            return watchdog.run_cycle()
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


def run_forever(watchdog, interval, sleep=time.sleep):
    """Run cycles every *interval* seconds until interrupted.

    An unexpected error ends only the cycle that raised it.
    """
    while True:
        try:
            watchdog.run_cycle()
        except Exception:
            log.exception("Unexpected error during watchdog cycle.")
        sleep(interval)


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--once", action="store_true",
                        help="run a single cycle and exit")
    args = parser.parse_args(argv)

    configure_logging()
    try:
        identity = config.load_identity()
    except config.ConfigError as exc:
        log.error("Invalid configuration: %s", exc)
        return 2

    watchdog = NodeWatchdog(identity)
    if args.once:
        run_once(watchdog)
        return 0

    log.info("Node watchdog started. Monitoring %s on %s.",
             identity.node_host, identity.network)
    try:
        run_forever(watchdog, identity.check_interval)
    except KeyboardInterrupt:
        log.info("Watchdog stopped.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

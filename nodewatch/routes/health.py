"""Health and configuration endpoints for the watchdog API."""

import time

from flask import Blueprint, current_app, jsonify

import config

health_bp = Blueprint("health", __name__)

# Recorded at module load — used for uptime calculation.
_start_time = time.time()


def _watchdog():
    return current_app.config["WATCHDOG"]


@health_bp.route("/api/health", methods=["GET"])
def health():
    """Return watchdog process status and the last cycle outcome."""
    wd = _watchdog()
    last = wd.last_report
    return jsonify(
        {
            "status": "operational",
            "uptime_seconds": round(time.time() - _start_time, 1),
            "version": config.VERSION,
            "network": wd.identity.network,
            "node_host": wd.identity.node_host,
            "loop_running": wd.loop_running,
            "cycle_in_progress": wd.cycle_in_progress,
            "last_outcome": last.outcome.value if last else None,
            "last_cycle_at": last.finished_at.isoformat() if last else None,
        }
    )


@health_bp.route("/api/config", methods=["GET"])
def active_config():
    """Return the NodeIdentity the watchdog was started with."""
    return jsonify(_watchdog().identity.to_dict())

"""Cycle history API routes.

Endpoints:
    GET  /api/cycles          → recent cycle reports (query: limit)
    GET  /api/cycles/latest   → most recent cycle report
    POST /api/cycles/run      → run one cycle now
"""

from flask import Blueprint, current_app, jsonify, request

cycles_bp = Blueprint("cycles", __name__)


def _watchdog():
    return current_app.config["WATCHDOG"]


@cycles_bp.route("/api/cycles", methods=["GET"])
def list_cycles():
    """Return recent cycle reports, newest first."""
    limit = request.args.get("limit", 50, type=int)
    return jsonify([r.to_dict() for r in _watchdog().history(limit=limit)])


@cycles_bp.route("/api/cycles/latest", methods=["GET"])
def latest_cycle():
    report = _watchdog().last_report
    if report is None:
        return jsonify({"error": "No cycle has completed yet."}), 404
    return jsonify(report.to_dict())


@cycles_bp.route("/api/cycles/run", methods=["POST"])
def run_cycle():
    """Run one watchdog cycle synchronously and return its report."""
    report = _watchdog().run_cycle()
    if report is None:
        return jsonify({"error": "A cycle is already in progress.",
                        "status": "conflict"}), 409
    return jsonify(report.to_dict())

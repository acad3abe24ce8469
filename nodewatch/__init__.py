"""Node Watchdog — keeps a blockchain node registered and in sync.

Flask application factory lives here so the ``nodewatch`` package is
directly importable: ``from nodewatch import create_app``.
"""

import logging

from flask import Flask
from flask_cors import CORS

import config
from nodewatch.services.monitor import NodeWatchdog

LOG_FORMAT = "%(asctime)s [WATCHDOG] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(log_file=None, level=None):
    """Send log lines to stderr and append them to *log_file*."""
    log_file = log_file or config.LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, level or config.LOG_LEVEL, logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def create_app(identity=None, watchdog=None, start_loop=True):
    """Create and configure the status API.

    Args:
        identity:   NodeIdentity to watch.  Loaded from config if omitted.
        watchdog:   Pre-built NodeWatchdog (tests inject one with stubs).
        start_loop: If True, start the background watchdog thread.
            Set to False during testing.
    """
    application = Flask(__name__)

    # CORS — local-only dashboards poll the API from another origin.
    CORS(application)

    if watchdog is None:
        identity = identity or config.load_identity()
        watchdog = NodeWatchdog(identity)
    application.config["WATCHDOG"] = watchdog

    if start_loop:
        watchdog.start_loop()

    # Register blueprints
    from nodewatch.routes.health import health_bp
    from nodewatch.routes.cycles import cycles_bp

    application.register_blueprint(health_bp)
    application.register_blueprint(cycles_bp)

    return application

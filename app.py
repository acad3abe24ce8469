"""Node Watchdog — status API entry point.

Runs the watchdog loop on a background thread and serves its cycle
history.  Binds to 127.0.0.1 by default.

Run:
    python app.py
"""

import config
from nodewatch import configure_logging, create_app

configure_logging()
application = create_app()

if __name__ == "__main__":
    application.run(
        host=config.HOST,
        port=config.PORT,
        debug=False,
    )

#!/usr/bin/env python3
"""Initialise the mutualmatch store.

Configures the library log handler and Sentry from the environment and creates the match
store tables at `STORE_ENDPOINT`.

Environment Variables:
    STORE_ENDPOINT (str): SQLAlchemy URL of the backing database.
    STORE_USERNAME / STORE_PASSWORD (str): Optional credentials injected into the URL.
    STORE_TIMEOUT (float): Connect and lock timeout in seconds.
    LOG_LEVEL (str): The logging level (e.g., 'INFO', 'DEBUG').
"""

from mutualmatch.bootstrap import setup
from mutualmatch.utils.logging import get_logger

logger = get_logger("mutualmatch.main")

if __name__ == "__main__":
    service = setup(configure_logs=True)
    logger.info("Match store ready", endpoint=service.store.engine.url.render_as_string(hide_password=True))

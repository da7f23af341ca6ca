"""Bootstrap the Firestore connection and verify it.

This module is the process entry point. It owns the lifecycle of the
Firebase app instead of relying on module-load side effects:
- Read the configuration record from the environment.
- Initialize the app and derive the Firestore client.
- Run a connectivity probe and report the bound project.
- Delete the app on the way out.
"""
from __future__ import annotations

import logging

from config import APP_NAME, DEFAULT_LOG_LEVEL, ConfigError, FirebaseConfig
from src.firestore_service import FirestoreContext, check_connection


EXIT_CONFIG_ERROR = 2


def run() -> int:
    """Perform one bootstrap run and return the process exit code."""
    logging.basicConfig(
        level=getattr(logging, DEFAULT_LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger = logging.getLogger(APP_NAME)

    logger.info("Starting Firestore bootstrap")
    config = FirebaseConfig.from_env()

    try:
        ctx = FirestoreContext.create(config)
    except ConfigError as e:
        logger.error("%s", e)
        return EXIT_CONFIG_ERROR

    with ctx:
        logger.info("Connected to project %s", ctx.project_id)
        collections = check_connection(ctx.db)
        if collections:
            logger.info("Connectivity check passed; first collection: %s", collections[0])
        else:
            logger.info("Connectivity check passed; database has no collections yet")

    logger.info("Bootstrap complete")
    return 0


if __name__ == "__main__":
    raise SystemExit(run())

"""Firebase app initialization.

This module turns a :class:`config.FirebaseConfig` into an initialized
``firebase_admin.App``, the app handle every service client is derived from.

Design notes
- Presence of the six configuration keys is checked here, before the
    library is called, so an incomplete record never produces an app.
- Everything else (duplicate app names, unreadable credential files,
    malformed options) is validated by ``firebase_admin`` and its errors
    propagate unchanged.
"""
from __future__ import annotations

import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials

from config import APP_NAME, FirebaseConfig, get_app_name, get_credential


logger = logging.getLogger(APP_NAME)


def initialize(
    config: FirebaseConfig,
    credential: Optional[credentials.Base] = None,
    name: Optional[str] = None,
) -> firebase_admin.App:
    """Initialize and return the Firebase app described by ``config``.

    ``name`` defaults to ``FIREBASE_APP_NAME`` or the library default app.

    Raises :class:`config.ConfigError` when a required key is missing. A
    second call with the same ``name`` raises the library's ``ValueError``;
    use :func:`get_app` for init-once access.
    """
    config.validate()
    name = name or get_app_name()
    credential = credential or get_credential()
    app = firebase_admin.initialize_app(credential, options=config.app_options(), name=name)
    logger.info("Initialized Firebase app %r for project %s", app.name, config.project_id)
    return app


def get_app(
    config: Optional[FirebaseConfig] = None,
    credential: Optional[credentials.Base] = None,
    name: Optional[str] = None,
) -> firebase_admin.App:
    """Return the app registered under ``name``, initializing it on first use.

    When ``config`` is omitted the record is read from the environment.
    """
    name = name or get_app_name()
    try:
        return firebase_admin.get_app(name)
    except ValueError:
        # Not initialized yet in this process.
        pass
    return initialize(config or FirebaseConfig.from_env(), credential=credential, name=name)


def delete_app(app: firebase_admin.App) -> None:
    """Tear down ``app``; handles derived from it must not be used afterwards.

    :func:`src.firestore_service.get_db` notices the deletion and builds a
    fresh handle on its next call.
    """
    firebase_admin.delete_app(app)
    logger.info("Deleted Firebase app %r", app.name)

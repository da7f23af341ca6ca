"""Firestore integration helpers.

This module derives the data client from an initialized Firebase app and
exports the handle the rest of the codebase imports:
- :func:`get_data_client` binds a ``google.cloud.firestore.Client`` to an app
    and database.
- :func:`get_db` is the process-wide handle, built once from the environment.
- :class:`FirestoreContext` is the explicit alternative for entry points that
    want to own the app lifecycle instead of relying on the global.
- :func:`check_connection` is a cheap round-trip used to verify credentials.

Design notes
- Caching of clients, connection pooling and per-request retries are owned by
    ``firebase_admin`` and ``google-cloud-firestore``. The only retry here is
    the one around the connectivity probe.
"""
from __future__ import annotations

import time
import logging
from dataclasses import dataclass
from itertools import islice
from typing import List, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core.exceptions import GoogleAPICallError
from google.cloud.firestore import Client

from config import APP_NAME, FirebaseConfig, get_database_id
from src.firebase_app import delete_app, get_app, initialize


logger = logging.getLogger(APP_NAME)

_db: Optional[Client] = None
_db_app: Optional[firebase_admin.App] = None


def retry(max_attempts: int = 3, base_delay: float = 0.5, factor: float = 2.0):
    """Return a decorator that retries on transient Firestore API failures.

    Only ``GoogleAPICallError`` is retried, and only for throttling (429),
    server errors (5xx) or errors without a status code. Auth and permission
    errors (401, 403) are raised at once.
    """
    def decorator(func):
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except GoogleAPICallError as e:
                    status = getattr(e, "code", None)
                    if not isinstance(status, int):
                        status = None

                    if status in (401, 403):
                        raise

                    should_retry = status is None or status == 429 or 500 <= status < 600

                    attempt += 1
                    if not should_retry or attempt >= max_attempts:
                        raise

                    delay = base_delay * (factor ** (attempt - 1))
                    logger.warning(
                        "Firestore API error (status=%s): retrying in %.1fs (attempt %d/%d)",
                        status,
                        delay,
                        attempt,
                        max_attempts,
                    )
                    time.sleep(delay)
        return wrapper
    return decorator


def get_data_client(app: firebase_admin.App, database_id: Optional[str] = None) -> Client:
    """Return the Firestore client for ``app`` bound to ``database_id``.

    ``database_id`` defaults to ``FIRESTORE_DATABASE_ID`` or the default database.

    ``firebase_admin`` keeps one client per app and database, so repeated
    calls return the same object. Credential errors raised while building
    the client propagate unchanged.
    """
    database_id = database_id or get_database_id()
    client = firestore.client(app=app, database_id=database_id)
    logger.debug("Firestore client ready for project %s (database %s)", client.project, database_id)
    return client


def _handle_is_live() -> bool:
    """True while the app behind the exported handle is still registered."""
    try:
        return firebase_admin.get_app(_db_app.name) is _db_app
    except ValueError:
        return False


def get_db() -> Client:
    """Return the process-wide Firestore handle, creating it on first use.

    A handle whose app was deleted is replaced on the next call.
    """
    global _db, _db_app
    if _db is None or not _handle_is_live():
        app = get_app()
        _db = get_data_client(app)
        _db_app = app
    return _db


def reset_db() -> None:
    global _db, _db_app
    _db = None
    _db_app = None


def forget_app(app: firebase_admin.App) -> None:
    """Drop the exported handle if it was derived from ``app``."""
    if _db_app is app:
        reset_db()


@dataclass
class FirestoreContext:
    """An initialized app and its data client, owned by the caller."""

    config: FirebaseConfig
    app: firebase_admin.App
    db: Client

    @classmethod
    def create(
        cls,
        config: FirebaseConfig,
        credential: Optional[credentials.Base] = None,
        database_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> "FirestoreContext":
        app = initialize(config, credential=credential, name=name)
        try:
            db = get_data_client(app, database_id=database_id)
        except Exception:
            # Do not leave a half-built app registered under this name.
            delete_app(app)
            raise
        return cls(config=config, app=app, db=db)

    @property
    def project_id(self) -> str:
        return self.db.project

    def close(self) -> None:
        forget_app(self.app)
        delete_app(self.app)

    def __enter__(self) -> "FirestoreContext":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


@retry()
def check_connection(db: Client, limit: int = 1) -> List[str]:
    """List up to ``limit`` top-level collection ids.

    Any successful response, including an empty list, proves the credentials
    and project are usable.
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")
    ids = [ref.id for ref in islice(db.collections(), limit)]
    logger.debug("Connectivity probe returned %d collection(s)", len(ids))
    return ids

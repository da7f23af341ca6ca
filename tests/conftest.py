"""Shared fixtures: isolated environment, anonymous credentials, app cleanup."""
import firebase_admin
import pytest
from firebase_admin import credentials
from google.auth.credentials import AnonymousCredentials

from config import CONFIG_KEYS, FirebaseConfig
from src import firestore_service


class AnonymousCredential(credentials.Base):
    """Credential that never talks to Google; building clients stays offline."""

    def get_credential(self):
        return AnonymousCredentials()


VALID_MAPPING = {
    "apiKey": "k",
    "authDomain": "d",
    "projectId": "p",
    "storageBucket": "b",
    "messagingSenderId": "s",
    "appId": "a",
}


@pytest.fixture(autouse=True)
def clean_firebase_env(monkeypatch):
    """Keep FIREBASE_* variables from the developer shell out of the tests."""
    for _, _, env, _ in CONFIG_KEYS:
        monkeypatch.delenv(env, raising=False)
    monkeypatch.delenv("FIREBASE_DATABASE_URL", raising=False)
    monkeypatch.delenv("FIREBASE_CREDENTIALS_FILE", raising=False)
    monkeypatch.delenv("FIREBASE_APP_NAME", raising=False)
    monkeypatch.delenv("FIRESTORE_DATABASE_ID", raising=False)


@pytest.fixture(autouse=True)
def reset_firebase_state(monkeypatch):
    """Delete every app created by a test and drop the exported handle."""
    created = []
    real_initialize_app = firebase_admin.initialize_app

    def tracking_initialize_app(*args, **kwargs):
        app = real_initialize_app(*args, **kwargs)
        created.append(app)
        return app

    monkeypatch.setattr(firebase_admin, "initialize_app", tracking_initialize_app)
    yield
    firestore_service.reset_db()
    for app in created:
        try:
            firebase_admin.delete_app(app)
        except ValueError:
            # Already deleted by the test.
            pass


@pytest.fixture
def credential():
    return AnonymousCredential()


@pytest.fixture
def valid_config():
    return FirebaseConfig.from_mapping(VALID_MAPPING)


@pytest.fixture
def valid_mapping():
    return dict(VALID_MAPPING)

"""Central configuration and credential handling for the SEIMS Firestore bootstrap.

This module centralizes the Firebase configuration record and the credential
lookup so every module can initialize the Firebase app without duplicating
code.

Security and persistence notes
- Do not commit ``credentials/service_account.json``.
- The web config values (api key, app id, sender id) identify the project;
    they are not secrets, but deployments still provide them through the
    environment rather than editing this file.
"""
from __future__ import annotations

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from firebase_admin import credentials


# App constants
APP_NAME = "seims-firestore"

# firebase_admin's name for the app created without an explicit name.
DEFAULT_APP_NAME = "[DEFAULT]"
# Firestore's name for the database every project starts with.
DEFAULT_DATABASE_ID = "(default)"


# Base paths
BASE_DIR = Path(__file__).resolve().parent
CREDENTIALS_DIR = BASE_DIR / "credentials"
SERVICE_ACCOUNT_FILE = CREDENTIALS_DIR / "service_account.json"


# camelCase key -> (dataclass field, environment variable, placeholder default)
# Defaults come from Firebase Console > Project Settings; the placeholders
# must be replaced through the environment before talking to a real project.
CONFIG_KEYS = (
    ("apiKey", "api_key", "FIREBASE_API_KEY", "YOUR_API_KEY"),
    ("authDomain", "auth_domain", "FIREBASE_AUTH_DOMAIN", "seims-pro.firebaseapp.com"),
    ("projectId", "project_id", "FIREBASE_PROJECT_ID", "seims-pro"),
    ("storageBucket", "storage_bucket", "FIREBASE_STORAGE_BUCKET", "seims-pro.appspot.com"),
    ("messagingSenderId", "messaging_sender_id", "FIREBASE_MESSAGING_SENDER_ID", "YOUR_SENDER_ID"),
    ("appId", "app_id", "FIREBASE_APP_ID", "YOUR_APP_ID"),
)


# Basic logging setup; main will configure handlers/level.
DEFAULT_LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


logger = logging.getLogger(APP_NAME)


def get_database_id() -> str:
    """Firestore database to bind, read from ``FIRESTORE_DATABASE_ID`` at call time."""
    return os.environ.get("FIRESTORE_DATABASE_ID") or DEFAULT_DATABASE_ID


def get_app_name() -> str:
    """firebase_admin app name, read from ``FIREBASE_APP_NAME`` at call time."""
    return os.environ.get("FIREBASE_APP_NAME") or DEFAULT_APP_NAME


class ConfigError(ValueError):
    """Raised when the Firebase configuration record is incomplete."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(
            "Firebase configuration is missing required keys: "
            + ", ".join(self.missing)
            + ". Set the matching FIREBASE_* environment variables."
        )


@dataclass(frozen=True)
class FirebaseConfig:
    """The Firebase web configuration record.

    Values are opaque strings. The only check performed here is presence;
    whether a key is actually valid is for the Firebase backend to decide.
    """

    api_key: str = ""
    auth_domain: str = ""
    project_id: str = ""
    storage_bucket: str = ""
    messaging_sender_id: str = ""
    app_id: str = ""
    database_url: str = ""

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Optional[str]]) -> "FirebaseConfig":
        """Build a config from the camelCase mapping shown in the Firebase console.

        Missing keys become empty strings so :meth:`validate` can report all
        of them at once.
        """
        values = {attr: mapping.get(key) or "" for key, attr, _, _ in CONFIG_KEYS}
        return cls(database_url=mapping.get("databaseURL") or "", **values)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FirebaseConfig":
        """Build a config from ``FIREBASE_*`` variables, falling back to the defaults."""
        environ = os.environ if environ is None else environ
        values = {attr: environ.get(env, default) for _, attr, env, default in CONFIG_KEYS}
        return cls(database_url=environ.get("FIREBASE_DATABASE_URL", ""), **values)

    def to_dict(self) -> Dict[str, str]:
        return {key: getattr(self, attr) for key, attr, _, _ in CONFIG_KEYS}

    def missing_keys(self) -> List[str]:
        return [key for key, value in self.to_dict().items() if not value or not value.strip()]

    def validate(self) -> None:
        missing = self.missing_keys()
        if missing:
            raise ConfigError(missing)

    def app_options(self) -> Dict[str, str]:
        """Options understood by ``firebase_admin.initialize_app``."""
        options = {
            "projectId": self.project_id,
            "storageBucket": self.storage_bucket,
        }
        if self.database_url:
            options["databaseURL"] = self.database_url
        return options


@dataclass
class FirebaseCredentialFiles:
    service_account_file: Path = SERVICE_ACCOUNT_FILE
    # Set when the path was chosen explicitly; a missing file is then an error.
    required: bool = False

    @classmethod
    def from_env(cls) -> "FirebaseCredentialFiles":
        override = os.environ.get("FIREBASE_CREDENTIALS_FILE")
        if override:
            return cls(service_account_file=Path(override), required=True)
        return cls()


def get_credential(files: FirebaseCredentialFiles | None = None) -> credentials.Base:
    """
    Return the credential used to initialize the Firebase app.

    A service account JSON file is preferred when present. A file named by
    ``FIREBASE_CREDENTIALS_FILE`` must exist. Otherwise the
    Application Default Credentials are used (``GOOGLE_APPLICATION_CREDENTIALS``,
    gcloud user credentials or the metadata server). ADC is resolved lazily by
    the library, so a missing ADC setup surfaces when the first client is built.
    """
    files = files or FirebaseCredentialFiles.from_env()

    if files.service_account_file.exists():
        # Raises IOError/ValueError for unreadable or malformed files.
        cred = credentials.Certificate(str(files.service_account_file))
        logger.debug("Loaded service account credential from %s", files.service_account_file)
        return cred

    if files.required:
        raise FileNotFoundError(
            f"Missing service account file at {files.service_account_file} "
            "(set by FIREBASE_CREDENTIALS_FILE). Fix the path or unset the variable "
            "to use Application Default Credentials."
        )

    logger.debug(
        "No service account file at %s; using Application Default Credentials",
        files.service_account_file,
    )
    return credentials.ApplicationDefault()

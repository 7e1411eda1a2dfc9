# backend/inventorypro/config.py
from __future__ import annotations

import os

from sqlalchemy.engine import make_url


def remote_database_uri(url: str | None, key: str | None) -> str:
    """
    SQLAlchemy URI for the remote store.

    The credential is used as the password when the URL names a user but
    carries no password of its own.
    """
    if not url:
        # Placeholder so the SQLAlchemy extension can initialize; unused by the file store.
        return "sqlite://"
    parsed = make_url(url)
    if key and parsed.username and not parsed.password:
        parsed = parsed.set(password=key)
    return parsed.render_as_string(hide_password=False)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # JSON document used when no remote store is configured
    DATA_FILE = os.environ.get(
        "DATA_FILE",
        os.path.join(os.getcwd(), "data", "inventorypro-db.json"),
    )

    # Remote store: both must be set, otherwise the JSON file store is used
    REMOTE_STORE_URL = os.environ.get("REMOTE_STORE_URL")
    REMOTE_STORE_KEY = os.environ.get("REMOTE_STORE_KEY")

    # Database function that processes a sale atomically; empty disables it
    REMOTE_SALE_PROCEDURE = os.environ.get("REMOTE_SALE_PROCEDURE", "process_sale")
    REMOTE_RETRY_ATTEMPTS = int(os.environ.get("REMOTE_RETRY_ATTEMPTS", "3"))

    SQLALCHEMY_DATABASE_URI = remote_database_uri(REMOTE_STORE_URL, REMOTE_STORE_KEY)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

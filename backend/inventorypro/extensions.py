# Overview: Flask extension instances for database and migrations.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()

STORE_EXTENSION_KEY = "inventorypro.store"


def get_store():
    """The storage backend chosen for the running app."""
    from flask import current_app

    return current_app.extensions[STORE_EXTENSION_KEY]

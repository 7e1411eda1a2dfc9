# backend/inventorypro/__init__.py
import atexit
import logging

from flask import Flask

from .config import Config, remote_database_uri
from .extensions import STORE_EXTENSION_KEY, db, migrate
from .storage import build_store


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)
    if not test_config or "SQLALCHEMY_DATABASE_URI" not in test_config:
        app.config["SQLALCHEMY_DATABASE_URI"] = remote_database_uri(
            app.config.get("REMOTE_STORE_URL"), app.config.get("REMOTE_STORE_KEY")
        )

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # One backend per process, chosen here and injected everywhere else
    store = build_store(app.config)
    app.extensions[STORE_EXTENSION_KEY] = store
    atexit.register(store.close)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.inventory import inventory_bp
    from .routes.sales import sales_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(reports_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app

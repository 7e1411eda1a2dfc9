"""
Pytest fixtures for InventoryPro backend tests.

Provides a JSON file store per test, an app wired to it, and an app wired
to the relational store on in-memory SQLite.
"""

import pytest

from inventorypro import create_app
from inventorypro.extensions import STORE_EXTENSION_KEY, db
from inventorypro.storage import JsonFileStore


def item_payload(**overrides) -> dict:
    """Helper to build a valid camelCase inventory payload."""
    payload = {
        "name": "Green Tea",
        "category": "Tea",
        "price": 10,
        "costPrice": 2,
        "stockLevel": 5,
        "lowStockThreshold": 1,
    }
    payload.update(overrides)
    return payload


@pytest.fixture(scope='function')
def data_file(tmp_path):
    return tmp_path / "data" / "inventorypro-db.json"


@pytest.fixture(scope='function')
def file_store(data_file):
    """Fresh file-backed store per test."""
    store = JsonFileStore(data_file)
    yield store
    store.close()


@pytest.fixture(scope='function')
def app(data_file):
    """Create application backed by a temporary JSON file."""
    app = create_app({
        'TESTING': True,
        'DATA_FILE': str(data_file),
        'REMOTE_STORE_URL': None,
        'REMOTE_STORE_KEY': None,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    })
    yield app
    app.extensions[STORE_EXTENSION_KEY].close()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def remote_app():
    """Create application backed by the relational store (in-memory SQLite)."""
    app = create_app({
        'TESTING': True,
        'REMOTE_STORE_URL': 'sqlite://',
        'REMOTE_STORE_KEY': 'test-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def sql_store(remote_app):
    """The relational store, used inside the remote app's context."""
    return remote_app.extensions[STORE_EXTENSION_KEY]


@pytest.fixture(scope='function')
def remote_client(remote_app):
    return remote_app.test_client()


@pytest.fixture(scope='function')
def make_payload():
    """Factory for valid inventory payloads."""
    return item_payload


@pytest.fixture(scope='function')
def add_item():
    """Helper to add an item to any store through the service layer."""
    from inventorypro.services import inventory_service

    def _add(store, **overrides):
        return inventory_service.add_item(store, item_payload(**overrides))

    return _add

from __future__ import annotations

from datetime import timedelta

import pytest

from app.measurebook import create_app
from app.measurebook.db import session_scope
from app.measurebook.models import Base
from app.measurebook.modules.customers.models import Customer
from app.measurebook.modules.customers.service import CustomerRecord

from fakes import T0, make_record


@pytest.fixture()
def alice_bob() -> list[CustomerRecord]:
    # Alice is the newer record, so she sorts first.
    return [
        make_record("1", "Alice", "555-0001", age_days=0),
        make_record("2", "Bob", "555-0002", age_days=1),
    ]


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("STORE_BACKEND", "sql")
    for k in ("STORE_REST_URL", "STORE_REST_KEY", "STORE_TABLE", "STORE_TIMEOUT_SECONDS"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    app.config["TESTING"] = True

    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)
    return app


@pytest.fixture()
def seeded_app(app):
    with session_scope(app) as s:
        s.add_all(
            [
                Customer(id="c-alice", name="Alice", shirt="Chest: 38", pants="Waist: 28", phone="555-0001",
                         created_at=T0),
                Customer(id="c-bob", name="Bob", shirt="Chest: 42", pants="Waist: 34", phone="555-0002",
                         created_at=T0 - timedelta(days=1)),
            ]
        )
    return app


@pytest.fixture()
def client(seeded_app):
    return seeded_app.test_client()


@pytest.fixture()
def csrf():
    def _token(client) -> str:
        # Any non-health request mints the session token; a 404 avoids touching the store.
        client.get("/__csrf__")
        with client.session_transaction() as sess:
            return sess["csrf_token"]

    return _token

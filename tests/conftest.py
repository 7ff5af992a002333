from datetime import datetime, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient
from jose import jwt

import database
import main


@pytest.fixture
def db():
    client = mongomock.MongoClient()
    yield client["mangrove_watch_test"]
    client.close()


@pytest.fixture
def add_report(db):
    def _add(user_id, status="verified", **fields):
        doc = {
            "userId": user_id,
            "status": status,
            "type": "cutting",
            "description": "",
            "lat": 19.07,
            "lng": 72.87,
            "severity": 3,
            "photoPath": None,
            "createdAt": datetime(2026, 10, 1, tzinfo=timezone.utc),
        }
        doc.update(fields)
        return db[database.REPORTS].insert_one(doc).inserted_id

    return _add


@pytest.fixture
def api_client(db, monkeypatch):
    monkeypatch.setattr(database, "db", db)
    with TestClient(main.app) as client:
        yield client


@pytest.fixture
def auth_header():
    def _header(user_id="user-1"):
        token = jwt.encode({"sub": user_id}, main.JWT_SECRET, algorithm=main.JWT_ALG)
        return {"Authorization": f"Bearer {token}"}

    return _header

"""
Pytest fixtures for the volunteer mastersheet service.

- a throwaway sqlite database per test
- a Flask test client bound to that database
- a factory for volunteer records shaped like database rows
"""

import os
import tempfile
from pathlib import Path

# app.py initializes the schema on import; keep that off the real instance dir
os.environ.setdefault(
    "DATABASE_PATH", str(Path(tempfile.mkdtemp()) / "import.db"),
)

import pytest

import config
import database


@pytest.fixture
def db(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DATABASE_PATH", tmp_path / "volunteers.db")
    database.init_db()
    return database


@pytest.fixture
def client(db):
    from app import app

    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_record():
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        record = {
            "serial_number": counter["n"],
            "district": "Central",
            "event_name": "Beach Cleanup",
            "event_id": "E1",
            "event_format": "Onsite",
            "details": "",
            "name": "Alice Tan",
            "email": "alice@example.com",
            "mobile_no": "91234567",
            "role": "Usher",
            "date": "2026-03-01",
            "start_time": "09:00",
            "end_time": "17:00",
            "hours_volunteered": 8.0,
            "vms": False,
            "attendance": "attended",
            "remarks": "",
            "volunteer_shirt_taken": False,
            "shirt_size": "M",
        }
        record.update(overrides)
        return record

    return _make


@pytest.fixture
def payload():
    def _payload(**overrides):
        data = {
            "district": "Central",
            "event_name": "Beach Cleanup",
            "event_id": "E1",
            "event_format": "Onsite",
            "name": "Alice Tan",
            "email": "alice@example.com",
            "mobile_no": "91234567",
            "role": "Usher",
            "date": "2026-03-01",
            "start_time": "09:00",
            "end_time": "17:00",
        }
        data.update(overrides)
        return data

    return _payload

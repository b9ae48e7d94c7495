"""
Test configuration and shared fixtures for the ClinicOS test suite.

Each test gets a fresh database: a SQLite file under tmp_path by default, or
the database named by TEST_DATABASE_URL (e.g. a PostgreSQL test database).
Tables are created from model metadata and dropped afterwards.
"""

import os
from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from core.database import Database
from core.realtime import ConnectionManager
from main import create_app


TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")


@pytest.fixture
def test_database(tmp_path) -> Generator[Database, None, None]:
    """Fresh database with all tables created."""
    database = Database(TEST_DATABASE_URL or f"sqlite:///{tmp_path / 'test.db'}")
    if TEST_DATABASE_URL:
        database.drop_tables()  # Leftovers from an interrupted run
    database.create_tables()

    yield database

    database.drop_tables()
    database.dispose()


@pytest.fixture
def db_session(test_database: Database) -> Generator[Session, None, None]:
    """
    Session for arranging and asserting test data.

    Rows must be committed before calling the API. Call expire_all() before
    asserting on rows the API may have changed.
    """
    session = test_database.session()
    yield session
    session.close()


@pytest.fixture
def broadcaster() -> ConnectionManager:
    return ConnectionManager()


@pytest.fixture
def app(test_database: Database, broadcaster: ConnectionManager) -> FastAPI:
    """Application wired to the test database, without background jobs."""
    return create_app(database=test_database, broadcaster=broadcaster, start_scheduler=False)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client."""
    return TestClient(app)

"""
Pytest configuration and fixtures for backend tests.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text

from shared.config.settings import Settings
from shared.infrastructure.db import create_database

from qc_api.entities import ENTITY_DEFINITIONS, get_definition
from qc_api.generic import wire_entity
from qc_api.main import create_app


AUDIT_COLUMNS = """
    is_active BOOLEAN NOT NULL DEFAULT 1,
    created_by INTEGER,
    updated_by INTEGER,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
"""

SCHEMA = [
    f"CREATE TABLE customers (code VARCHAR(5) PRIMARY KEY, name VARCHAR(100), {AUDIT_COLUMNS})",
    f"CREATE TABLE line_fvi (code VARCHAR(5) PRIMARY KEY, name VARCHAR(100), {AUDIT_COLUMNS})",
    f"""CREATE TABLE defects (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name VARCHAR(100),
        description TEXT,
        defect_group VARCHAR(100),
        {AUDIT_COLUMNS})""",
    f"""CREATE TABLE sampling_reasons (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name VARCHAR(100),
        description TEXT,
        {AUDIT_COLUMNS})""",
    f"""CREATE TABLE customers_site (
        customers VARCHAR(5) NOT NULL,
        site VARCHAR(5) NOT NULL,
        code VARCHAR(10),
        {AUDIT_COLUMNS},
        PRIMARY KEY (customers, site))""",
    f"""CREATE TABLE parts (
        partno VARCHAR(25) PRIMARY KEY,
        product_families VARCHAR(10),
        versions VARCHAR(10),
        production_site VARCHAR(5),
        part_site VARCHAR(5),
        customer VARCHAR(5),
        tab VARCHAR(5),
        product_type VARCHAR(5),
        customer_driver VARCHAR(200),
        {AUDIT_COLUMNS})""",
]


@pytest.fixture
def db_url(tmp_path):
    """
    File-backed SQLite database with every entity table created.
    The schema is created with a sync engine so no async connection is
    opened outside the loop that later uses it.
    """
    path = tmp_path / "qc.db"
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        for ddl in SCHEMA:
            conn.execute(text(ddl))
    engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def test_settings():
    return Settings(environment="test", debug=False, db_echo=False)


@pytest_asyncio.fixture
async def database(db_url, test_settings):
    """Async Database over the test file, disposed after the test."""
    db = create_database(settings=test_settings, url=db_url)
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture
def stack(database):
    """Factory: wired repository/service stack for a registered entity."""
    def _stack(entity_name: str):
        return wire_entity(get_definition(entity_name), database)
    return _stack


@pytest.fixture
def client(db_url, test_settings):
    """
    Test client for the full application on the test database.
    The app's database is created here but first connects inside the
    client's event loop.
    """
    db = create_database(settings=test_settings, url=db_url)
    app = create_app(database=db, settings=test_settings, definitions=ENTITY_DEFINITIONS)

    with TestClient(app) as test_client:
        yield test_client

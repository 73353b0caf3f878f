"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from models import Base, RAW_TABLES
from reconciliation.store import InMemoryStore, SQLAlchemyStore
from datetime import datetime
from typing import AsyncGenerator

# In-process database for SQL store tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def sample_raw_tables():
    """
    Raw import rows shared by the store-level tests.

    Job 100575126 has one vendor operation (SR) and one in-house operation
    (DNI), a purchase order whose reference carries a trailing space, and
    one shipment log. Job J-1005 is referenced as "j1005" by SAP.
    """
    return {
        "jobs": [
            {"job_number": "100575126", "title": "Pump housing", "status": "In Progress", "customer": "Acme"},
            {"job_number": "J-1005", "title": "Bracket", "status": "Released", "customer": "Globex"},
        ],
        "sap_operations": [
            {
                "order_number": "100575126", "operation_number": "0010", "work_center": "DNI",
                "description": "Deburr", "planned_work": 4.0, "actual_work": 4.0,
            },
            {
                "order_number": "100575126", "operation_number": "0020", "work_center": "SR",
                "description": "Heat treat", "short_text": "Ship to heat treater",
                "planned_work": 8.0, "actual_work": 2.0,
                "start_date": datetime(2024, 1, 3), "finish_date": datetime(2024, 1, 17),
            },
            {
                "order_number": "j1005", "operation_number": "0010", "work_center": "ASM",
                "description": "Assemble", "planned_work": 2.0, "actual_work": 0.0,
            },
        ],
        "purchase_orders": [
            {
                "purchasing_document": "4500001", "job_number_raw": "100575126 ",
                "vendor": "Acme Heat", "material": "HT-01", "order_quantity": 1.0,
                "remaining_quantity": 1.0, "document_date": datetime(2024, 1, 5),
            },
            {
                "purchasing_document": "4500002", "job_number_raw": "999999",
                "vendor": "Nobody Inc", "document_date": datetime(2024, 1, 6),
            },
        ],
        "shipment_logs": [
            {
                "job_number": "100575126", "vendor": "Acme Heat", "status": "Shipped",
                "description": "Sent for heat treat", "severity": "Normal",
                "shipment_date": datetime(2024, 1, 3),
            },
        ],
    }


@pytest.fixture
def raw_tables():
    return sample_raw_tables()


@pytest.fixture
def memory_store(raw_tables):
    """In-memory store holding the raw tables only"""
    return InMemoryStore(raw_tables)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine with the raw tables"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,  # the in-memory database lives on this single connection
        connect_args={"check_same_thread": False},
    )

    # Engine-owned tables are left to the provisioner
    raw = [Base.metadata.tables[name] for name in RAW_TABLES]
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, tables=raw)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def sql_store(db_session, raw_tables) -> SQLAlchemyStore:
    """SQLAlchemy store over SQLite, seeded with the raw tables"""
    for name, rows in raw_tables.items():
        table = Base.metadata.tables[name]
        for row in rows:
            await db_session.execute(insert(table).values(**row))
    await db_session.commit()

    return SQLAlchemyStore(db_session, timeout_seconds=5, batch_size=2)

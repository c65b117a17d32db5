"""Shared test fixtures for all test modules."""

import contextlib
import uuid
from datetime import date
from decimal import Decimal
from typing import Any

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import commission_ledger.models  # noqa: F401
from commission_ledger.core import database as db_module
from commission_ledger.core.auth import Actor, ActorRole, create_actor_token
from commission_ledger.core.database import Base
from commission_ledger.models.ledger_entry import LedgerEntry

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)

ADMIN = Actor(id="admin-1", name="Ana Admin", role=ActorRole.ADMIN)
STAFF = Actor(id="staff-1", name="Sam Staff", role=ActorRole.STAFF)


def auth_headers(actor: Actor) -> dict[str, str]:
    """Bearer header for an actor."""
    return {"Authorization": f"Bearer {create_actor_token(actor)}"}


def create_commission(session: Session, **overrides: Any) -> LedgerEntry:
    """Insert an open salesperson commission (USD 100.00 by default)."""
    values: dict[str, Any] = {
        "kind": "commission",
        "subject_name": "Maria Lopez",
        "recipient_type": "salesperson",
        "reservation_id": uuid.uuid4(),
        "reservation_number": f"R-{uuid.uuid4().hex[:6].upper()}",
        "tour_name": "Atacama Stargazing",
        "tour_id": "tour-1",
        "client_name": "John Smith",
        "adults": 2,
        "children": 0,
        "infants": 0,
        "sale_date": date(2026, 3, 1),
        "operation_date": date(2026, 3, 10),
        "gross_amount": Decimal("1000.00"),
        "currency": "USD",
        "rate": Decimal("10"),
        "computed_amount": Decimal("100.00"),
        "status": "pending",
    }
    values.update(overrides)
    entry = LedgerEntry(**values)
    session.add(entry)
    session.commit()
    session.refresh(entry)
    return entry


def create_operator_payment(session: Session, **overrides: Any) -> LedgerEntry:
    """Insert an open operator payment for a completed tour (USD 60.00 by default)."""
    values: dict[str, Any] = {
        "kind": "operator_payment",
        "subject_name": "Andes Transfers",
        "recipient_type": None,
        "gross_amount": Decimal("1000.00"),
        "rate": None,
        "computed_amount": None,
        "cost_amount": Decimal("60.00"),
        "operation_type": "third-party",
        "logistic_status": "completed",
    }
    values.update(overrides)
    return create_commission(session, **values)


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database. Clears data after each test.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    """Create a database session for direct service testing."""
    gen = db_module.get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass

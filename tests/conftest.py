import os

# Settings are cached on first import; rate limits would trip across tests.
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("DB_URL", None)

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.database import get_db
from app.models import Base, Customer, Item, RecurringInvoice

# Setup in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with overridden dependencies."""

    # Override get_db
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides = {}


@pytest.fixture
def customer(db_session):
    customer = Customer(
        reference_id="CUST-0001",
        billing_name="Sunrise Apartments Owners Association",
        city="Bengaluru",
    )
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer


@pytest.fixture
def item(db_session):
    item = Item(
        name="AMC - Passenger lift",
        part_no="AMC-PL",
        rate=Decimal("100.00"),
        tax_percent=Decimal("18.00"),
        unit="visit",
    )
    db_session.add(item)
    db_session.commit()
    db_session.refresh(item)
    return item


@pytest.fixture
def make_profile(db_session, customer, item):
    """Insert a recurring invoice row directly, bypassing the API."""

    def _make(**overrides):
        values = dict(
            customer_id=customer.id,
            profile_name="Lift AMC",
            repeat_every="month",
            start_date=date(2024, 1, 1),
            end_date=None,
            status="active",
            item_id=item.id,
            rate=Decimal("100.00"),
            qty=2,
            tax=Decimal("18.00"),
            last_invoice_date=None,
        )
        values.update(overrides)
        row = RecurringInvoice(**values)
        db_session.add(row)
        db_session.commit()
        db_session.refresh(row)
        return row

    return _make


@pytest.fixture
def session_factory(db_session):
    """Sessionmaker bound to the test database, for code that opens its own sessions."""
    return TestingSessionLocal

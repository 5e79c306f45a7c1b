"""Shared fixtures for backend tests.

- Every test gets its own in-memory SQLite database (StaticPool, one connection).
- HTTP tests go through FastAPI's TestClient with `get_db` overridden, so no
  server and no database file is needed.
- `file_database` is the same seed in a SQLite file, for multi-threaded tests.
- Seed data: two customers, one admin, a small inventory and two catalogs
  (one with items, one empty).
"""
from datetime import date
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace
import sys

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so that `server` module is importable
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from database.base import Database, get_db
from modules.auth.service import AuthService
from modules.catalogs.models import Catalog, CatalogHotel, CatalogTransport, CatalogFood
from modules.inventory.models import Hotel, Transport, Food
from modules.users.models import Admin, Customer, UserRole
from shared.utils import hash_password

PASSWORD = "secret123"


@pytest.fixture()
def database():
    database = Database("sqlite://")
    database.init()
    database.create_all()
    try:
        yield database
    finally:
        database.close()


@pytest.fixture()
def db(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


def populate(session):
    """Insert the shared seed rows and return their ids."""
    password_hash = hash_password(PASSWORD)

    alice = Customer(id=1, name="Alice Khan", email="alice@example.com", phone="03001234567",
                     username="alice", password_hash=password_hash)
    bob = Customer(id=2, name="Bob Ali", email="bob@example.com", phone="03007654321",
                   username="bob", password_hash=password_hash)
    admin = Admin(id=1, username="admin", email="admin@example.com", password_hash=password_hash)

    pearl = Hotel(id=1, name="Pearl Continental", address="Mall Road, Lahore", available_rooms=20, rent=Decimal("10000.00"))
    serena = Hotel(id=2, name="Serena Gilgit", address="Jutial, Gilgit", available_rooms=5, rent=Decimal("7500.50"))
    bus = Transport(id=1, type="Bus", no_of_seats=40, fare=Decimal("2500.00"))
    flight = Transport(id=2, type="Flight", no_of_seats=150, fare=Decimal("18000.00"))
    breakfast = Food(id=1, meals="Breakfast", price=Decimal("1200.00"))
    full_board = Food(id=2, meals="Full board", price=Decimal("3500.00"))

    northern = Catalog(
        id=1,
        package_name="Northern Escape",
        destination="Gilgit",
        description="Three days in the north",
        no_of_days=3,
        budget=Decimal("80000.00"),
        departure=date(2026, 6, 1),
        arrival=date(2026, 6, 4),
    )
    northern.hotels = [CatalogHotel(hotel_id=2, rooms_included=2)]
    northern.transport = [CatalogTransport(transport_id=1, seats_included=2)]
    northern.food = [CatalogFood(food_id=2)]

    empty = Catalog(id=2, package_name="Placeholder", destination="TBD", no_of_days=1)

    session.add_all([alice, bob, admin, pearl, serena, bus, flight, breakfast, full_board, northern, empty])
    session.commit()

    return SimpleNamespace(
        alice_id=1,
        bob_id=2,
        admin_id=1,
        hotel_id=1,
        gilgit_hotel_id=2,
        bus_id=1,
        flight_id=2,
        breakfast_id=1,
        full_board_id=2,
        catalog_id=1,
        empty_catalog_id=2,
    )


@pytest.fixture()
def seed(db):
    return populate(db)


@pytest.fixture()
def file_database(tmp_path):
    """Seeded file-backed database, for tests that need several connections at once."""
    database = Database(f"sqlite:///{tmp_path / 'travel.db'}")
    database.init()
    database.create_all()
    session = database.session()
    try:
        populate(session)
    finally:
        session.close()
    try:
        yield database
    finally:
        database.close()


def _auth_headers(account_id: int, role: UserRole) -> dict:
    return {"Authorization": f"Bearer {AuthService.create_access_token(account_id, role)}"}


@pytest.fixture()
def alice_headers(seed):
    return _auth_headers(seed.alice_id, UserRole.CUSTOMER)


@pytest.fixture()
def bob_headers(seed):
    return _auth_headers(seed.bob_id, UserRole.CUSTOMER)


@pytest.fixture()
def admin_headers(seed):
    return _auth_headers(seed.admin_id, UserRole.ADMIN)


@pytest.fixture()
def client(database, seed):
    from server import app

    def override_get_db():
        session = database.session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

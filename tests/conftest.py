import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import date, datetime, time
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.auth.utils import create_access_token
from src.bookings.schemas import BookingCreateRequest, PassengerDetail
from src.database import Base, get_db
from src.main import app
from src.models import ScheduledDeparture, Station
from src.schedules.search_cache import InMemorySearchCache, search_cache as default_search_cache

JOURNEY_DATE = date(2026, 11, 20)
DEPARTURE_TIME = time(8, 0)
NOW = datetime(2026, 11, 1, 12, 0)


@pytest.fixture()
def engine(tmp_path):
    # File-backed so that concurrent sessions see one shared database
    engine = create_engine(
        f"sqlite:///{tmp_path / 'transit.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def clear_default_search_cache():
    default_search_cache.clear()
    yield
    default_search_cache.clear()


@pytest.fixture()
def search_cache():
    return InMemorySearchCache(ttl_seconds=1800)


@pytest.fixture()
def stations(db):
    origin = Station(code="ALV", name="Aluva", is_active=True)
    destination = Station(code="EKM", name="Ernakulam", is_active=True)
    db.add_all([origin, destination])
    db.commit()
    return origin.id, destination.id


@pytest.fixture()
def make_departure(db, stations):
    origin_id, destination_id = stations

    def _make(
        capacity=10,
        available_seats=None,
        price="100.00",
        status="active",
        departure_time=DEPARTURE_TIME,
        days_of_week=None,
        valid_from=date(2026, 1, 1),
        valid_until=None,
        from_station_id=None,
        to_station_id=None,
    ) -> int:
        departure = ScheduledDeparture(
            train_name="Metro Express",
            train_number="KM101",
            departure_station_id=from_station_id or origin_id,
            arrival_station_id=to_station_id or destination_id,
            departure_time=departure_time,
            arrival_time=time(departure_time.hour + 1, departure_time.minute),
            days_of_week=days_of_week or [1, 2, 3, 4, 5, 6, 7],
            valid_from=valid_from,
            valid_until=valid_until,
            status=status,
            delay_minutes=0,
            capacity=capacity,
            available_seats=capacity if available_seats is None else available_seats,
            price=Decimal(price),
        )
        db.add(departure)
        db.commit()
        return departure.id

    return _make


@pytest.fixture()
def make_request(stations):
    origin_id, destination_id = stations

    def _make(schedule_id: int, passengers: int = 1, journey_date: date = JOURNEY_DATE) -> BookingCreateRequest:
        return BookingCreateRequest(
            schedule_id=schedule_id,
            departure_station_id=origin_id,
            arrival_station_id=destination_id,
            journey_date=journey_date,
            passengers=[
                PassengerDetail(name=f"Passenger {i + 1}", age=30 + i, gender="female")
                for i in range(passengers)
            ],
            payment_method="card",
        )

    return _make


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    def _headers(user_id: int = 7) -> dict:
        token = create_access_token({"sub": str(user_id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers

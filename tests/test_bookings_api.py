from datetime import date
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, inspect

import src.main

from tests.conftest import JOURNEY_DATE

BOOKINGS_URL = "/api/v1/bookings"
SCHEDULES_URL = "/api/v1/schedules"

# Far enough ahead that cancellations always land in the top refund tier
FAR_JOURNEY_DATE = date(2099, 6, 1)


def _create(client, headers, request):
    return client.post(BOOKINGS_URL, json=request.model_dump(mode="json"), headers=headers)


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_booking(client, auth_headers, make_departure, make_request):
    departure_id = make_departure(capacity=4, price="120.00")

    response = _create(client, auth_headers(), make_request(departure_id, passengers=2))

    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] == 7
    assert body["booking_reference"].startswith("TRNB")
    assert body["payment_status"] == "pending"
    assert body["booking_status"] == "confirmed"
    assert Decimal(str(body["total_amount"])) == Decimal("240.00")
    assert len(body["passenger_details"]) == 2

    schedule = client.get(f"{SCHEDULES_URL}/{departure_id}").json()
    assert schedule["available_seats"] == 2


def test_create_booking_requires_token(client, make_departure, make_request):
    departure_id = make_departure()
    response = client.post(BOOKINGS_URL, json=make_request(departure_id).model_dump(mode="json"))
    assert response.status_code == 401

    bad = {"Authorization": "Bearer not-a-token"}
    assert _create(client, bad, make_request(departure_id)).status_code == 401


def test_sold_out_departure_is_conflict(client, auth_headers, make_departure, make_request):
    departure_id = make_departure(capacity=1)

    response = _create(client, auth_headers(), make_request(departure_id, passengers=2))

    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "error": "insufficient_capacity",
        "message": "Not enough seats available",
    }


def test_too_many_passengers(client, auth_headers, make_departure, make_request):
    departure_id = make_departure(capacity=20)

    response = _create(client, auth_headers(), make_request(departure_id, passengers=7))

    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


def test_unknown_schedule(client, auth_headers, make_request):
    response = _create(client, auth_headers(), make_request(9999))
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_get_booking_is_owner_only(client, auth_headers, make_departure, make_request):
    departure_id = make_departure()
    booking = _create(client, auth_headers(7), make_request(departure_id)).json()

    assert client.get(f"{BOOKINGS_URL}/{booking['id']}", headers=auth_headers(7)).status_code == 200
    assert client.get(f"{BOOKINGS_URL}/{booking['id']}", headers=auth_headers(8)).status_code == 404

    by_reference = client.get(f"{BOOKINGS_URL}/reference/{booking['booking_reference']}")
    assert by_reference.status_code == 200
    assert by_reference.json()["id"] == booking["id"]


def test_cancel_booking(client, auth_headers, make_departure, make_request):
    departure_id = make_departure(capacity=3, price="100.00")
    headers = auth_headers()
    booking = _create(client, headers, make_request(departure_id, journey_date=FAR_JOURNEY_DATE)).json()

    response = client.post(f"{BOOKINGS_URL}/{booking['id']}/cancel", json={"reason": "Plans changed"}, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert Decimal(str(body["refund_amount"])) == Decimal("90.00")
    assert client.get(f"{SCHEDULES_URL}/{departure_id}").json()["available_seats"] == 3

    again = client.post(f"{BOOKINGS_URL}/{booking['id']}/cancel", json={}, headers=headers)
    assert again.status_code == 409
    assert again.json()["error"] == "already_cancelled"


def test_payment_callback_issues_ticket(client, auth_headers, make_departure, make_request):
    departure_id = make_departure()
    headers = auth_headers()
    booking = _create(client, headers, make_request(departure_id)).json()

    assert client.get(f"{BOOKINGS_URL}/{booking['id']}/ticket/qr", headers=headers).status_code == 404

    response = client.post(
        f"{BOOKINGS_URL}/payment-status",
        json={"booking_id": booking["id"], "payment_status": "paid", "payment_reference": "GW-123"},
    )
    assert response.status_code == 200
    assert response.json()["payment_status"] == "paid"

    paid = client.get(f"{BOOKINGS_URL}/{booking['id']}", headers=headers).json()
    assert paid["ticket_credential"]
    assert paid["payment_reference"] == "GW-123"

    qr = client.get(f"{BOOKINGS_URL}/{booking['id']}/ticket/qr", headers=headers)
    assert qr.status_code == 200
    assert qr.headers["content-type"] == "image/png"
    assert qr.content.startswith(b"\x89PNG")


def test_payment_callback_rejects_unknown_status(client, auth_headers, make_departure, make_request):
    departure_id = make_departure()
    booking = _create(client, auth_headers(), make_request(departure_id)).json()

    response = client.post(
        f"{BOOKINGS_URL}/payment-status",
        json={"booking_id": booking["id"], "payment_status": "bogus"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_status"


def test_simulate_payment(client, auth_headers, make_departure, make_request, monkeypatch):
    monkeypatch.setattr("src.config.settings.PAYMENT_SIMULATION_SUCCESS_RATE", 1.0)
    departure_id = make_departure(price="55.00")
    headers = auth_headers()
    booking = _create(client, headers, make_request(departure_id)).json()

    response = client.post(
        f"{BOOKINGS_URL}/simulate-payment",
        json={"booking_id": booking["id"], "payment_method": "upi"},
        headers=headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["payment_status"] == "paid"
    assert body["payment_reference"].startswith("PAY_")
    assert Decimal(str(body["amount"])) == Decimal("55.00")


def test_list_and_stats(client, auth_headers, make_departure, make_request):
    departure_id = make_departure(capacity=10)
    headers = auth_headers()
    for _ in range(3):
        _create(client, headers, make_request(departure_id))
    _create(client, auth_headers(8), make_request(departure_id))

    listing = client.get(BOOKINGS_URL, params={"page": 1, "limit": 2}, headers=headers).json()
    assert listing["total"] == 3
    assert listing["pages"] == 2
    assert len(listing["items"]) == 2

    stats = client.get(f"{BOOKINGS_URL}/stats", headers=headers).json()
    assert stats["total"] == 3
    assert stats["confirmed"] == 3
    assert stats["cancelled"] == 0


def test_search_schedules(client, stations, make_departure):
    departure_id = make_departure()
    origin_id, destination_id = stations

    response = client.get(
        f"{SCHEDULES_URL}/search",
        params={"from_station": origin_id, "to_station": destination_id, "date": JOURNEY_DATE.isoformat()},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["departures"][0]["id"] == departure_id

    bad_time = client.get(
        f"{SCHEDULES_URL}/search",
        params={"from_station": origin_id, "to_station": destination_id, "date": JOURNEY_DATE.isoformat(), "time": "25:00"},
    )
    assert bad_time.status_code == 422


def test_unknown_schedule_detail(client):
    assert client.get(f"{SCHEDULES_URL}/4242").status_code == 404


def test_update_booking_status(client, auth_headers, make_departure, make_request):
    departure_id = make_departure()
    booking = _create(client, auth_headers(7), make_request(departure_id)).json()
    url = f"{BOOKINGS_URL}/{booking['id']}/status"

    response = client.put(url, json={"booking_status": "completed"}, headers=auth_headers(7))
    assert response.status_code == 200
    assert response.json()["booking_status"] == "completed"

    assert client.put(url, json={"booking_status": "no_show"}, headers=auth_headers(8)).status_code == 404
    assert client.put(url, json={"booking_status": "cancelled"}, headers=auth_headers(7)).status_code == 422


def test_unsupported_payment_method_is_rejected(client, auth_headers, make_departure, make_request):
    departure_id = make_departure(capacity=3)
    headers = auth_headers()
    payload = make_request(departure_id).model_dump(mode="json")
    payload["payment_method"] = "bitcoin"

    assert client.post(BOOKINGS_URL, json=payload, headers=headers).status_code == 422
    assert client.get(f"{SCHEDULES_URL}/{departure_id}").json()["available_seats"] == 3

    booking = _create(client, headers, make_request(departure_id)).json()
    response = client.post(
        f"{BOOKINGS_URL}/simulate-payment",
        json={"booking_id": booking["id"], "payment_method": "cash"},
        headers=headers,
    )
    assert response.status_code == 422


def test_startup_creates_tables_in_development(tmp_path, monkeypatch):
    dev_engine = create_engine(f"sqlite:///{tmp_path / 'dev.db'}")
    monkeypatch.setattr(src.main, "engine", dev_engine)
    monkeypatch.setattr(src.main.settings, "ENVIRONMENT", "development")

    with TestClient(src.main.app):
        pass

    assert {"stations", "schedules", "bookings"} <= set(inspect(dev_engine).get_table_names())
    dev_engine.dispose()

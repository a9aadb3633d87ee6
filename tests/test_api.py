"""
HTTP tests for table, guest and seating routes
"""

import asyncio

import pytest

from app.core.config import settings
from app.models import AuditEvent
from app.services.repositories import GuestRepo, TableRepo

AUTH = {"Authorization": f"Bearer {settings.ADMIN_TOKEN}"}

def create_table(client, name="Table 1", seats=4, **extra):
    response = client.post("/tables", json={"name": name, "seats": seats, **extra}, headers=AUTH)
    assert response.status_code == 201
    return response.json()["data"]

def create_guest(client, **payload):
    payload.setdefault("first_name", "Guest")
    response = client.post("/guests", json=payload, headers=AUTH)
    assert response.status_code == 201
    return response.json()["data"]

def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}

def test_requires_admin_token(client):
    response = client.get("/tables", headers={"Authorization": "Bearer wrong"})
    assert response.status_code == 401

def test_assign_seat_flow(client):
    table = create_table(client, seats=2)
    guest = create_guest(client, full_name="Anna Maria Nowak", rsvp_status="confirmed")

    assert guest["first_name"] == "Anna"
    assert guest["last_name"] == "Maria Nowak"

    response = client.post("/seating/assign-table", json={"guest_id": guest["id"], "table_id": table["id"]}, headers=AUTH)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["seat_index"] == 0

    response = client.get(f"/tables/{table['id']}/first-free-seat", headers=AUTH)
    assert response.json()["data"]["seat_index"] == 1

    response = client.post("/seating/unassign", json={"guest_id": guest["id"]}, headers=AUTH)
    assert response.status_code == 200
    assert response.json()["data"]["table_id"] is None

@pytest.mark.parametrize("seat_index,status_code,error_code", [
    (7, 422, "OUT_OF_RANGE"),
    (-1, 422, "OUT_OF_RANGE"),
    (0, 409, "SEAT_TAKEN"),
])
def test_assign_seat_errors(client, seat_index, status_code, error_code):
    table = create_table(client, seats=4)
    holder = create_guest(client, first_name="Holder", rsvp_status="confirmed")
    client.post("/seating/assign-seat", json={"guest_id": holder["id"], "table_id": table["id"], "seat_index": 0}, headers=AUTH)
    guest = create_guest(client, first_name="Other")

    response = client.post(
        "/seating/assign-seat",
        json={"guest_id": guest["id"], "table_id": table["id"], "seat_index": seat_index},
        headers=AUTH
    )

    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == error_code

def test_declined_guest_rejected(client):
    table = create_table(client)
    guest = create_guest(client, rsvp_status="declined")

    response = client.post("/seating/assign-seat", json={"guest_id": guest["id"], "table_id": table["id"], "seat_index": 0}, headers=AUTH)

    assert response.status_code == 409
    assert response.json()["error_code"] == "GUEST_DECLINED"

def test_table_full(client):
    table = create_table(client, seats=1)
    first = create_guest(client, first_name="First")
    second = create_guest(client, first_name="Second")
    client.post("/seating/assign-table", json={"guest_id": first["id"], "table_id": table["id"]}, headers=AUTH)

    response = client.post("/seating/assign-table", json={"guest_id": second["id"], "table_id": table["id"]}, headers=AUTH)
    assert response.status_code == 409
    assert response.json()["error_code"] == "TABLE_FULL"

    response = client.get(f"/tables/{table['id']}/first-free-seat", headers=AUTH)
    assert response.status_code == 409

def test_unknown_guest(client):
    table = create_table(client)
    response = client.post("/seating/assign-table", json={"guest_id": "nope", "table_id": table["id"]}, headers=AUTH)
    assert response.status_code == 404
    assert response.json()["error_code"] == "NOT_FOUND"

def test_delete_table_cascade(client):
    table = create_table(client)
    guest = create_guest(client)
    client.post("/seating/assign-table", json={"guest_id": guest["id"], "table_id": table["id"]}, headers=AUTH)

    response = client.delete(f"/tables/{table['id']}", headers=AUTH)
    assert response.status_code == 200
    assert response.json()["data"]["unassigned_guest_ids"] == [guest["id"]]

    assert client.get(f"/tables/{table['id']}", headers=AUTH).status_code == 404
    guest_after = client.get(f"/guests/{guest['id']}", headers=AUTH).json()["data"]
    assert guest_after["table_id"] is None
    assert guest_after["seat_index"] is None

def test_guest_contact_data_masked_unless_revealed(client, db_session):
    guest = create_guest(client, first_name="Jan", email="john@example.com", phone="+48123456789")

    assert guest["email"] == "jo**@example.com"

    listed = client.get("/guests", params={"search": "jan"}, headers=AUTH).json()["data"]
    assert listed["pagination"]["total"] == 1
    assert listed["guests"][0]["phone"] == "+48******789"

    revealed = client.get(f"/guests/{guest['id']}", params={"reveal": "true"}, headers=AUTH).json()["data"]
    assert revealed["email"] == "john@example.com"
    assert db_session.query(AuditEvent).filter(AuditEvent.action == "pii_revealed").count() == 1

def test_guest_filters(client):
    table = create_table(client)
    seated = create_guest(client, first_name="Seated", rsvp_status="confirmed")
    create_guest(client, first_name="Waiting")
    create_guest(client, first_name="Gone", rsvp_status="declined")
    client.post("/seating/assign-table", json={"guest_id": seated["id"], "table_id": table["id"]}, headers=AUTH)

    unassigned = client.get("/guests", params={"unassigned": "true"}, headers=AUTH).json()["data"]
    assert {g["first_name"] for g in unassigned["guests"]} == {"Waiting", "Gone"}

    declined = client.get("/guests", params={"rsvp_status": "declined"}, headers=AUTH).json()["data"]
    assert [g["first_name"] for g in declined["guests"]] == ["Gone"]

    at_table = client.get("/guests", params={"table_id": table["id"]}, headers=AUTH).json()["data"]
    assert [g["id"] for g in at_table["guests"]] == [seated["id"]]

def test_declining_releases_seat(client, db_session):
    table = create_table(client, seats=2)
    guest = create_guest(client, rsvp_status="confirmed")
    client.post("/seating/assign-seat", json={"guest_id": guest["id"], "table_id": table["id"], "seat_index": 0}, headers=AUTH)

    response = client.patch(f"/guests/{guest['id']}", json={"rsvp_status": "declined"}, headers=AUTH)

    data = response.json()["data"]
    assert data["rsvp_status"] == "declined"
    assert data["table_id"] is None
    assert data["seat_index"] is None
    assert data["released_seat"] == {"table_id": table["id"], "seat_index": 0}

    response = client.get(f"/tables/{table['id']}/first-free-seat", headers=AUTH)
    assert response.json()["data"]["seat_index"] == 0
    assert db_session.query(AuditEvent).filter(AuditEvent.action == "guest_unassigned").count() == 1

def test_other_updates_keep_seat(client):
    table = create_table(client)
    guest = create_guest(client, rsvp_status="pending")
    client.post("/seating/assign-table", json={"guest_id": guest["id"], "table_id": table["id"]}, headers=AUTH)

    data = client.patch(f"/guests/{guest['id']}", json={"rsvp_status": "confirmed", "dietary": "vegan"}, headers=AUTH).json()["data"]

    assert data["table_id"] == table["id"]
    assert data["seat_index"] == 0
    assert data["released_seat"] is None

def test_guest_requires_a_name(client):
    response = client.post("/guests", json={"email": "x@example.com"}, headers=AUTH)
    assert response.status_code == 422

def test_head_table_and_summary(client):
    head = client.post("/tables/head", headers=AUTH).json()["data"]
    create_table(client, name="Friends", seats=8)

    response = client.post("/tables", json={"name": "Second head", "seats": 6, "is_head_table": True}, headers=AUTH)
    assert response.status_code == 409
    assert response.json()["error_code"] == "HEAD_TABLE_EXISTS"

    summary = client.get("/seating/summary", headers=AUTH).json()["data"]
    assert summary["total_tables"] == 2
    assert summary["total_seats"] == 14
    assert summary["tables"][0]["table_id"] == head["id"]

def test_seat_map_route(client):
    table = create_table(client, seats=3)
    guest = create_guest(client)
    client.post("/seating/assign-seat", json={"guest_id": guest["id"], "table_id": table["id"], "seat_index": 2}, headers=AUTH)

    seat_map = client.get(f"/tables/{table['id']}/seats", headers=AUTH).json()["data"]

    assert seat_map["seats"][2]["guest"]["id"] == guest["id"]
    assert seat_map["seats"][0]["guest"] is None

def test_seating_rate_limit(client, monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_PER_MINUTE", 2)
    guest = create_guest(client)

    statuses = [
        client.post("/seating/unassign", json={"guest_id": guest["id"]}, headers=AUTH).status_code
        for _ in range(3)
    ]

    assert statuses == [200, 200, 429]

def test_websocket_ping_pong(client):
    with client.websocket_connect("/ws/seating") as websocket:
        welcome = websocket.receive_json()
        assert welcome["type"] == "connection"
        assert welcome["connection_count"] == 1

        websocket.send_json({"type": "ping", "timestamp": 1})
        assert websocket.receive_json() == {"type": "pong", "timestamp": 1}

def on_event_loop():
    try:
        asyncio.get_running_loop()
        return True
    except RuntimeError:
        return False

def test_store_calls_run_off_the_event_loop(client, monkeypatch):
    table = create_table(client)
    guest = create_guest(client, rsvp_status="confirmed")
    loop_flags = []

    def recording(original):
        def wrapper(db, record_id):
            loop_flags.append(on_event_loop())
            return original(db, record_id)
        return staticmethod(wrapper)

    monkeypatch.setattr(GuestRepo, "get", recording(GuestRepo.get))
    monkeypatch.setattr(TableRepo, "get", recording(TableRepo.get))

    client.post("/seating/assign-seat", json={"guest_id": guest["id"], "table_id": table["id"], "seat_index": 1}, headers=AUTH)
    client.post("/seating/assign-table", json={"guest_id": guest["id"], "table_id": table["id"]}, headers=AUTH)
    client.patch(f"/guests/{guest['id']}", json={"rsvp_status": "declined"}, headers=AUTH)
    client.post("/seating/unassign", json={"guest_id": guest["id"]}, headers=AUTH)
    client.patch(f"/tables/{table['id']}", json={"notes": "by the door"}, headers=AUTH)
    client.delete(f"/tables/{table['id']}", headers=AUTH)

    assert loop_flags
    assert not any(loop_flags)

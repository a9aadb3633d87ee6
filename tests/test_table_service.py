"""
Tests for table management
"""

import pytest
from pydantic import ValidationError

from app.core.errors import HeadTableExistsError, NotFoundError, OutOfRangeError
from app.schemas.table import TableCreate, TableUpdate
from app.services.table_service import HEAD_TABLE_NAME, TableService

def test_create_table(db_session):
    table = TableService.create_table(db_session, TableCreate(name="  Family  ", seats=8, notes="near the window"))

    assert table["name"] == "Family"
    assert table["seats"] == 8
    assert table["table_type"] == "regular"
    assert table["is_head_table"] is False

@pytest.mark.parametrize("payload", [
    {"name": "", "seats": 4},
    {"name": "x" * 101, "seats": 4},
    {"name": "Too small", "seats": 0},
    {"name": "Too big", "seats": 21},
    {"name": "Long notes", "seats": 4, "notes": "n" * 501},
])
def test_table_validation(payload):
    with pytest.raises(ValidationError):
        TableCreate(**payload)

def test_only_one_head_table(db_session):
    TableService.create_table(db_session, TableCreate(name="Couple", seats=6, is_head_table=True))

    with pytest.raises(HeadTableExistsError):
        TableService.create_table(db_session, TableCreate(name="Another", seats=6, is_head_table=True))

def test_ensure_head_table_is_idempotent(db_session):
    first = TableService.ensure_head_table(db_session)
    second = TableService.ensure_head_table(db_session)

    assert first["id"] == second["id"]
    assert first["name"] == HEAD_TABLE_NAME
    assert first["seats"] == 6
    assert first["is_head_table"] is True

def test_list_tables_head_first_with_occupancy(db_session, make_guest):
    regular = TableService.create_table(db_session, TableCreate(name="Friends", seats=4))
    head = TableService.ensure_head_table(db_session)
    make_guest("Ola", table_id=regular["id"], seat_index=0)

    tables = TableService.list_tables(db_session)

    assert [t["id"] for t in tables] == [head["id"], regular["id"]]
    assert tables[1]["occupancy"] == {"assigned_count": 1, "free_seats": 3, "is_full": False}

def test_get_table_includes_guests(db_session, make_table, make_guest):
    table_id = make_table(seats=4)
    guest_id = make_guest("Ola", table_id=table_id, seat_index=2)

    table = TableService.get_table(db_session, table_id)

    assert [g["id"] for g in table["guests"]] == [guest_id]
    assert table["occupancy"]["free_seats"] == 3

def test_update_table(db_session, make_table):
    table_id = make_table(name="Old", seats=4)

    table = TableService.update_table(db_session, table_id, TableUpdate(name="New", notes="kids"))

    assert table["name"] == "New"
    assert table["notes"] == "kids"
    assert table["seats"] == 4

def test_shrinking_below_occupied_seat_is_rejected(db_session, make_table, make_guest):
    table_id = make_table(seats=6)
    make_guest("Ola", table_id=table_id, seat_index=4)

    with pytest.raises(OutOfRangeError):
        TableService.update_table(db_session, table_id, TableUpdate(seats=4))

    table = TableService.update_table(db_session, table_id, TableUpdate(seats=5))
    assert table["seats"] == 5

def test_update_missing_table(db_session):
    with pytest.raises(NotFoundError):
        TableService.update_table(db_session, "missing", TableUpdate(name="x"))

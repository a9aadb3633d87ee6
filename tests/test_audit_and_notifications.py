"""
Tests for audit logging and seating broadcasts
"""

import asyncio
import logging

from app.api.ws import SEATING_CHANNEL, WebSocketManager
from app.models import AuditEvent
from app.services.notification_service import SeatingNotifier
from app.services.repositories import AuditRepo
from app.services.seating_service import SeatingService

class RecordingWebSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(text)

def test_seat_changes_are_audited(db_session, make_table, make_guest):
    table_id = make_table(seats=2)
    guest_id = make_guest("Anna")

    SeatingService.assign_guest_to_seat(db_session, guest_id, table_id, 1)
    SeatingService.unassign_guest(db_session, guest_id)

    actions = sorted(e.action for e in db_session.query(AuditEvent).all())
    assert actions == ["guest_unassigned", "seat_assigned"]

def test_audit_failure_does_not_block_assignment(db_session, make_table, make_guest, monkeypatch, caplog):
    table_id = make_table(seats=2)
    guest_id = make_guest("Anna")

    def broken_add(*args, **kwargs):
        raise RuntimeError("audit store down")

    monkeypatch.setattr(AuditRepo, "add", staticmethod(broken_add))

    with caplog.at_level(logging.WARNING, logger="app.audit"):
        guest = SeatingService.assign_guest_to_seat(db_session, guest_id, table_id, 0)

    assert guest["seat_index"] == 0
    assert "Audit log write failed" in caplog.text

def test_broadcast_reaches_channel_and_drops_dead_sockets():
    manager = WebSocketManager()
    alive = RecordingWebSocket()
    dead = RecordingWebSocket(fail=True)
    manager.active_connections[SEATING_CHANNEL] = [alive, dead]
    notifier = SeatingNotifier(manager)

    guest = {"id": "g1", "first_name": "Anna", "last_name": "", "table_id": "t1", "seat_index": 2}
    asyncio.run(notifier.broadcast_seat_change(guest))

    assert len(alive.sent) == 1
    assert '"seat_assigned"' in alive.sent[0]
    assert manager.get_connection_count(SEATING_CHANNEL) == 1

def test_table_deleted_message_lists_unassigned_guests():
    manager = WebSocketManager()
    socket = RecordingWebSocket()
    manager.active_connections[SEATING_CHANNEL] = [socket]

    asyncio.run(SeatingNotifier(manager).broadcast_table_change(
        "t1", update_type="table_deleted", unassigned_guest_ids=["g1", "g2"]
    ))

    assert '"unassigned_guest_ids": ["g1", "g2"]' in socket.sent[0]

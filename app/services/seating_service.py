"""
Seat allocation service.

Guest records are the single source of truth for occupancy. Every seat write
goes through ``SeatingService.assign_guest_to_seat`` and every seat clear
through ``SeatingService.unassign_guest`` or the table deletion cascade.
"""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.errors import (
    GuestDeclinedError,
    NotFoundError,
    OutOfRangeError,
    SeatTakenError,
    TableFullError,
)
from app.schemas.table import Occupancy
from app.services.audit_service import record_audit_event
from app.services.repositories import GuestRepo, TableRepo
from app.utils.retry import with_retry

logger = logging.getLogger(__name__)


def occupancy(table: Dict, guests: Iterable[Dict]) -> Occupancy:
    """Seat usage of ``table`` derived from a guest collection.

    Counts guests whose ``table_id`` matches, with or without a seat index.
    ``free_seats`` is never negative.
    """
    assigned_count = sum(1 for g in guests if g.get("table_id") == table["id"])
    remaining = table["seats"] - assigned_count
    return Occupancy(
        assigned_count=assigned_count,
        free_seats=max(remaining, 0),
        is_full=remaining <= 0,
    )


def first_free_seat(seat_indices: Iterable[Optional[int]], total_seats: int) -> Optional[int]:
    """Lowest index in ``range(total_seats)`` not in ``seat_indices``, or None if all are taken"""
    occupied = {idx for idx in seat_indices if idx is not None}
    for i in range(total_seats):
        if i not in occupied:
            return i
    return None


class SeatingService:
    """Service for seat assignment operations"""

    @staticmethod
    def get_table(db: Session, table_id: str) -> Dict:
        table = with_retry(lambda: TableRepo.get(db, table_id))
        if not table:
            raise NotFoundError("Table", table_id)
        return table

    @staticmethod
    def get_guest(db: Session, guest_id: str) -> Dict:
        guest = with_retry(lambda: GuestRepo.get(db, guest_id))
        if not guest:
            raise NotFoundError("Guest", guest_id)
        return guest

    @staticmethod
    def find_first_free_seat(db: Session, table_id: str, total_seats: int) -> Optional[int]:
        """Lowest unoccupied seat index at a table, or None when the table is full.

        Guests assigned to the table without a seat index do not occupy a seat.
        """
        guests = with_retry(lambda: GuestRepo.list_at_table(db, table_id))
        return first_free_seat((g["seat_index"] for g in guests), total_seats)

    @staticmethod
    def get_table_occupancy(db: Session, table_id: str) -> Occupancy:
        table = SeatingService.get_table(db, table_id)
        guests = with_retry(lambda: GuestRepo.list_at_table(db, table_id))
        return occupancy(table, guests)

    @staticmethod
    def get_table_seats(db: Session, table_id: str) -> Dict:
        """Seat map of a table: one entry per seat index plus unseated table guests"""
        table = SeatingService.get_table(db, table_id)
        guests = with_retry(lambda: GuestRepo.list_at_table(db, table_id))

        by_seat = {g["seat_index"]: g for g in guests if g["seat_index"] is not None}
        seats = [
            {
                "seat_index": i,
                "guest": by_seat.get(i),
            }
            for i in range(table["seats"])
        ]

        return {
            "table": table,
            "occupancy": occupancy(table, guests).model_dump(),
            "seats": seats,
            "unseated_guests": [g for g in guests if g["seat_index"] is None],
        }

    @staticmethod
    def get_seating_summary(db: Session) -> Dict:
        """Totals over all tables plus each table's occupancy"""
        tables = with_retry(lambda: TableRepo.list_all(db))
        assigned = with_retry(lambda: GuestRepo.list_assigned(db))
        table_ids = {t["id"] for t in tables}

        table_stats = []
        for table in tables:
            table_guests = [g for g in assigned if g["table_id"] == table["id"]]
            table_stats.append({
                "table_id": table["id"],
                "name": table["name"],
                "seats": table["seats"],
                "is_head_table": table["is_head_table"],
                **occupancy(table, table_guests).model_dump(),
            })

        live_assignments = [g for g in assigned if g["table_id"] in table_ids]
        return {
            "total_tables": len(tables),
            "total_seats": sum(t["seats"] for t in tables),
            "assigned_guests": len(live_assignments),
            "occupied_seats": sum(1 for g in live_assignments if g["seat_index"] is not None),
            "free_seats": sum(t["free_seats"] for t in table_stats),
            "tables": table_stats,
        }

    @staticmethod
    def assign_guest_to_seat(db: Session, guest_id: str, table_id: str, seat_index: int) -> Dict:
        """Seat a guest at a specific seat.

        Checks, in order: the table exists, the seat index is within the
        table's capacity, the guest exists, the seat is not held by another
        guest (read fresh from the ledger, not from any earlier snapshot), and
        the guest has not declined. Re-seating a guest on the seat they
        already hold succeeds.
        """
        table = SeatingService.get_table(db, table_id)
        if seat_index < 0 or seat_index >= table["seats"]:
            logger.warning(f"Seat {seat_index} out of range for table {table_id} ({table['seats']} seats)")
            raise OutOfRangeError(seat_index, table["seats"])

        guest = SeatingService.get_guest(db, guest_id)

        occupant = with_retry(lambda: GuestRepo.find_seat_occupant(db, table_id, seat_index))
        if occupant and occupant["id"] != guest_id:
            logger.warning(f"Seat {seat_index} at table {table_id} already held by guest {occupant['id']}")
            raise SeatTakenError(table_id, seat_index, occupant["id"])

        if guest["rsvp_status"] == "declined":
            logger.warning(f"Refusing to seat declined guest {guest_id}")
            raise GuestDeclinedError(guest_id)

        updated = with_retry(lambda: GuestRepo.set_seat(db, guest_id, table_id, seat_index))
        logger.info(f"Guest {guest_id} assigned to table {table_id} seat {seat_index}")
        record_audit_event(db, "seat_assigned", guest_id, table_id=table_id, seat_index=seat_index)
        return updated

    @staticmethod
    def assign_to_table(db: Session, guest_id: str, table_id: str) -> Dict:
        """Seat a guest at the lowest free seat of a table.

        A guest already holding a seat at this table keeps it.
        """
        table = SeatingService.get_table(db, table_id)
        guest = SeatingService.get_guest(db, guest_id)

        if guest["rsvp_status"] == "declined":
            raise GuestDeclinedError(guest_id)

        if guest["table_id"] == table_id and guest["seat_index"] is not None:
            return guest

        seat_index = SeatingService.find_first_free_seat(db, table_id, table["seats"])
        if seat_index is None:
            logger.warning(f"Table {table_id} is full")
            raise TableFullError(table_id)

        return SeatingService.assign_guest_to_seat(db, guest_id, table_id, seat_index)

    @staticmethod
    def unassign_guest(db: Session, guest_id: str) -> Dict:
        """Clear a guest's table and seat. Unassigning an unseated guest is a no-op."""
        guest = SeatingService.get_guest(db, guest_id)
        if guest["table_id"] is None and guest["seat_index"] is None:
            return guest

        updated = with_retry(lambda: GuestRepo.clear_seat(db, guest_id))
        logger.info(f"Guest {guest_id} unassigned from table {guest['table_id']}")
        record_audit_event(db, "guest_unassigned", guest_id, table_id=guest["table_id"], seat_index=guest["seat_index"])
        return updated

    @staticmethod
    def delete_table(db: Session, table_id: str) -> List[str]:
        """Unassign every guest at a table, then delete the table.

        Both steps are committed together by the repository, so a failure
        leaves neither dangling guest references nor a half-emptied table.
        Returns the ids of the guests that were unassigned.
        """
        SeatingService.get_table(db, table_id)
        guest_ids = with_retry(lambda: TableRepo.delete_with_guests(db, table_id))
        logger.info(f"Table {table_id} deleted, {len(guest_ids)} guests unassigned")
        record_audit_event(db, "table_deleted", table_id, unassigned_guest_ids=guest_ids)
        return guest_ids

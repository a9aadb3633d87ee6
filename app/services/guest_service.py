"""
Guest management service
"""

import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.schemas.guest import GuestCreate, GuestUpdate
from app.services.audit_service import record_audit_event
from app.services.repositories import GuestRepo
from app.services.seating_service import SeatingService
from app.utils.retry import with_retry
from app.utils.security import mask_guest

logger = logging.getLogger(__name__)

# Optional fields a PATCH may set back to null
CLEARABLE_FIELDS = {"last_name", "email", "phone", "dietary", "notes"}


class GuestService:
    """Service for guest list operations.

    Seating fields are never written here; see ``SeatingService``.
    """

    @staticmethod
    def create_guest(db: Session, guest_data: GuestCreate) -> Dict:
        data = guest_data.model_dump(exclude={"full_name"})
        data["last_name"] = data.get("last_name") or ""
        guest = with_retry(lambda: GuestRepo.create(db, data))
        logger.info(f"Guest {guest['id']} created")
        return guest

    @staticmethod
    def get_guest(db: Session, guest_id: str, reveal: bool = False) -> Dict:
        """Guest detail with PII masked unless ``reveal`` is set; reveals are audited"""
        guest = SeatingService.get_guest(db, guest_id)
        if not reveal:
            return mask_guest(guest)

        record_audit_event(db, "pii_revealed", guest_id, fields=["email", "phone"])
        return guest

    @staticmethod
    def list_guests(
        db: Session,
        search: Optional[str] = None,
        rsvp_status: Optional[str] = None,
        table_id: Optional[str] = None,
        unassigned: bool = False,
        page: int = 1,
        per_page: int = 50,
    ) -> Dict:
        offset = (page - 1) * per_page
        guests, total = with_retry(lambda: GuestRepo.search(
            db, search, rsvp_status, table_id, unassigned, offset, per_page
        ))
        return {
            "guests": [mask_guest(g) for g in guests],
            "pagination": {
                "page": page,
                "per_page": per_page,
                "total": total,
                "pages": (total + per_page - 1) // per_page
            }
        }

    @staticmethod
    def update_guest(db: Session, guest_id: str, guest_update: GuestUpdate) -> Dict:
        """Apply a partial update.

        A seated guest whose RSVP becomes ``declined`` loses the seat. The
        result carries ``released_seat`` with the freed table and seat, or None.
        """
        SeatingService.get_guest(db, guest_id)
        changes = {
            field: value
            for field, value in guest_update.model_dump(exclude_unset=True).items()
            if value is not None or field in CLEARABLE_FIELDS
        }

        if changes:
            guest = with_retry(lambda: GuestRepo.update(db, guest_id, changes))
        else:
            guest = SeatingService.get_guest(db, guest_id)
        logger.info(f"Guest {guest_id} updated: {sorted(changes)}")

        released_seat = None
        if guest["rsvp_status"] == "declined" and guest["table_id"] is not None:
            released_seat = {"table_id": guest["table_id"], "seat_index": guest["seat_index"]}
            guest = SeatingService.unassign_guest(db, guest_id)
            logger.info(f"Guest {guest_id} declined, released seat {released_seat}")

        return {**guest, "released_seat": released_seat}

    @staticmethod
    def delete_guest(db: Session, guest_id: str) -> None:
        SeatingService.get_guest(db, guest_id)
        with_retry(lambda: GuestRepo.delete(db, guest_id))
        logger.info(f"Guest {guest_id} deleted")

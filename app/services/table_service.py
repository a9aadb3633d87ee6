"""
Table management service
"""

import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import HeadTableExistsError, OutOfRangeError
from app.models.table import HEAD_TABLE_TYPE, REGULAR_TABLE_TYPE
from app.schemas.table import TableCreate, TableUpdate
from app.services.repositories import GuestRepo, TableRepo
from app.services.seating_service import SeatingService, occupancy
from app.utils.retry import with_retry

logger = logging.getLogger(__name__)

HEAD_TABLE_NAME = "Head Table"
HEAD_TABLE_NOTES = "Table for the couple and their closest family"


class TableService:
    """Service for creating, editing and listing tables"""

    @staticmethod
    def list_tables(db: Session) -> List[Dict]:
        """All tables with their occupancy, head table first"""
        tables = with_retry(lambda: TableRepo.list_all(db))
        assigned = with_retry(lambda: GuestRepo.list_assigned(db))
        return [
            {**table, "occupancy": occupancy(table, assigned).model_dump()}
            for table in tables
        ]

    @staticmethod
    def get_table(db: Session, table_id: str) -> Dict:
        table = SeatingService.get_table(db, table_id)
        guests = with_retry(lambda: GuestRepo.list_at_table(db, table_id))
        return {
            **table,
            "occupancy": occupancy(table, guests).model_dump(),
            "guests": guests,
        }

    @staticmethod
    def create_table(db: Session, table_data: TableCreate) -> Dict:
        if table_data.is_head_table:
            head = with_retry(lambda: TableRepo.get_head(db))
            if head:
                raise HeadTableExistsError(head["id"])

        table_type = HEAD_TABLE_TYPE if table_data.is_head_table else REGULAR_TABLE_TYPE
        table = with_retry(lambda: TableRepo.create(
            db, table_data.name, table_data.seats, table_data.notes, table_type
        ))
        logger.info(f"Table {table['id']} created ({table['name']}, {table['seats']} seats)")
        return table

    @staticmethod
    def ensure_head_table(db: Session) -> Dict:
        """Return the head table, creating the default one if none exists"""
        head = with_retry(lambda: TableRepo.get_head(db))
        if head:
            return head

        logger.info("No head table found, creating default")
        return TableService.create_table(db, TableCreate(
            name=HEAD_TABLE_NAME,
            seats=settings.HEAD_TABLE_SEATS,
            notes=HEAD_TABLE_NOTES,
            is_head_table=True,
        ))

    @staticmethod
    def update_table(db: Session, table_id: str, table_update: TableUpdate) -> Dict:
        """Apply a partial update.

        Shrinking a table is rejected while a guest sits at a seat index the
        new size would no longer contain.
        """
        SeatingService.get_table(db, table_id)
        changes = table_update.model_dump(exclude_unset=True, exclude_none=True)

        if "seats" in changes:
            guests = with_retry(lambda: GuestRepo.list_at_table(db, table_id))
            seat_indices = [g["seat_index"] for g in guests if g["seat_index"] is not None]
            if seat_indices and max(seat_indices) >= changes["seats"]:
                raise OutOfRangeError(max(seat_indices), changes["seats"])

        if not changes:
            return SeatingService.get_table(db, table_id)

        table = with_retry(lambda: TableRepo.update(db, table_id, changes))
        logger.info(f"Table {table_id} updated: {sorted(changes)}")
        return table

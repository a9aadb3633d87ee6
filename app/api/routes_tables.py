"""
Table management routes
"""

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.errors import TableFullError
from app.schemas.table import TableCreate, TableUpdate
from app.services.notification_service import SeatingNotifier
from app.services.seating_service import SeatingService
from app.services.table_service import TableService
from app.api.ws import websocket_manager
from app.utils.security import verify_admin_token
from app.utils.responses import success_response

router = APIRouter()

notifier = SeatingNotifier(websocket_manager)

@router.get("")
def list_tables(
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """List tables with occupancy, head table first"""
    tables = TableService.list_tables(db)
    return success_response(
        message="Tables retrieved successfully",
        data={"tables": tables}
    )

@router.post("")
async def create_table(
    table_data: TableCreate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Create a new table"""
    table = await run_in_threadpool(TableService.create_table, db, table_data)
    await notifier.broadcast_table_change(table["id"], update_type="table_created")
    return success_response(
        message="Table created successfully",
        data=table,
        status_code=201
    )

@router.post("/head")
def ensure_head_table(
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Create the default head table unless one already exists"""
    table = TableService.ensure_head_table(db)
    return success_response(message="Head table ready", data=table)

@router.get("/{table_id}")
def get_table(
    table_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Table detail with occupancy and assigned guests"""
    return success_response(
        message="Table retrieved",
        data=TableService.get_table(db, table_id)
    )

@router.patch("/{table_id}")
async def update_table(
    table_id: str,
    table_update: TableUpdate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Update table name, seat count or notes"""
    table = await run_in_threadpool(TableService.update_table, db, table_id, table_update)
    await notifier.broadcast_table_change(table_id)
    return success_response(message="Table updated successfully", data=table)

@router.delete("/{table_id}")
async def delete_table(
    table_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Unassign all guests at the table, then delete it"""
    guest_ids = await run_in_threadpool(SeatingService.delete_table, db, table_id)
    await notifier.broadcast_table_change(
        table_id,
        update_type="table_deleted",
        unassigned_guest_ids=guest_ids
    )
    return success_response(
        message="Table deleted successfully",
        data={"deleted_table_id": table_id, "unassigned_guest_ids": guest_ids}
    )

@router.get("/{table_id}/seats")
def get_table_seats(
    table_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Seat map of a table"""
    return success_response(
        message="Seat map retrieved",
        data=SeatingService.get_table_seats(db, table_id)
    )

@router.get("/{table_id}/first-free-seat")
def first_free_seat(
    table_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Lowest free seat index of a table"""
    table = SeatingService.get_table(db, table_id)
    seat_index = SeatingService.find_first_free_seat(db, table_id, table["seats"])
    if seat_index is None:
        raise TableFullError(table_id)
    return success_response(
        message="Free seat found",
        data={"table_id": table_id, "seat_index": seat_index}
    )

"""
Seat assignment routes
"""

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.seating import AssignTableRequest, AssignSeatRequest, UnassignRequest
from app.services.notification_service import SeatingNotifier
from app.services.seating_service import SeatingService
from app.api.ws import websocket_manager
from app.utils.security import verify_admin_token, rate_limit_check, get_client_ip, mask_guest
from app.utils.responses import success_response, rate_limit_error

router = APIRouter()

notifier = SeatingNotifier(websocket_manager)

def check_rate_limit(request: Request):
    """Per-IP rate limit for seat mutations"""
    if not rate_limit_check(get_client_ip(request)):
        rate_limit_error()

@router.get("/summary")
def seating_summary(
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Seat totals and per-table occupancy"""
    return success_response(
        message="Seating summary retrieved",
        data=SeatingService.get_seating_summary(db)
    )

# Store calls may sleep between retries, so they run off the event loop

@router.post("/assign-table")
async def assign_to_table(
    request: Request,
    assignment: AssignTableRequest,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Seat a guest at the first free seat of a table"""
    check_rate_limit(request)

    guest = await run_in_threadpool(
        SeatingService.assign_to_table, db, assignment.guest_id, assignment.table_id
    )
    await notifier.broadcast_seat_change(guest)
    return success_response(message="Guest assigned to table", data=mask_guest(guest))

@router.post("/assign-seat")
async def assign_to_seat(
    request: Request,
    assignment: AssignSeatRequest,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Seat a guest at a specific seat"""
    check_rate_limit(request)

    guest = await run_in_threadpool(
        SeatingService.assign_guest_to_seat,
        db, assignment.guest_id, assignment.table_id, assignment.seat_index
    )
    await notifier.broadcast_seat_change(guest)
    return success_response(message="Guest assigned to seat", data=mask_guest(guest))

@router.post("/unassign")
async def unassign(
    request: Request,
    unassignment: UnassignRequest,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Remove a guest from their table and seat"""
    check_rate_limit(request)

    guest = await run_in_threadpool(SeatingService.unassign_guest, db, unassignment.guest_id)
    await notifier.broadcast_seat_change(guest, update_type="guest_unassigned")
    return success_response(message="Guest unassigned", data=mask_guest(guest))

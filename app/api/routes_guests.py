"""
Guest list routes
"""

from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.guest import GuestCreate, GuestUpdate
from app.services.guest_service import GuestService
from app.services.notification_service import SeatingNotifier
from app.api.ws import websocket_manager
from app.utils.security import verify_admin_token, mask_guest
from app.utils.responses import success_response

router = APIRouter()

notifier = SeatingNotifier(websocket_manager)

@router.get("")
def search_guests(
    search: Optional[str] = Query(None),
    rsvp_status: Optional[Literal["pending", "confirmed", "declined"]] = Query(None),
    table_id: Optional[str] = Query(None),
    unassigned: bool = Query(False),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Search and list guests; email and phone are masked"""
    result = GuestService.list_guests(
        db,
        search=search,
        rsvp_status=rsvp_status,
        table_id=table_id,
        unassigned=unassigned,
        page=page,
        per_page=per_page
    )
    return success_response(message="Guests retrieved successfully", data=result)

@router.post("")
def create_guest(
    guest_data: GuestCreate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Add a guest to the list"""
    guest = GuestService.create_guest(db, guest_data)
    return success_response(
        message="Guest created successfully",
        data=mask_guest(guest),
        status_code=201
    )

@router.get("/{guest_id}")
def get_guest(
    guest_id: str,
    reveal: bool = Query(False),
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Guest detail; ``reveal=true`` returns unmasked contact data and is audited"""
    guest = GuestService.get_guest(db, guest_id, reveal=reveal)
    return success_response(message="Guest retrieved", data=guest)

@router.patch("/{guest_id}")
async def update_guest(
    guest_id: str,
    guest_update: GuestUpdate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Update guest details and RSVP status; declining releases the guest's seat"""
    guest = await run_in_threadpool(GuestService.update_guest, db, guest_id, guest_update)
    if guest["released_seat"]:
        await notifier.broadcast_seat_change(guest, update_type="guest_unassigned")
    return success_response(message="Guest updated successfully", data=mask_guest(guest))

@router.delete("/{guest_id}")
def delete_guest(
    guest_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    GuestService.delete_guest(db, guest_id)
    return success_response(
        message="Guest deleted successfully",
        data={"deleted_guest_id": guest_id}
    )

"""
Real-time seating notifications
"""

from datetime import datetime
from typing import Dict, List, Optional

from app.api.ws import SEATING_CHANNEL, WebSocketManager

class SeatingNotifier:
    """Broadcasts seating changes to connected clients"""

    def __init__(self, websocket_manager: WebSocketManager):
        self.websocket_manager = websocket_manager

    async def _send(self, message: Dict):
        message["timestamp"] = datetime.utcnow().isoformat()
        await self.websocket_manager.broadcast(SEATING_CHANNEL, message)

    async def broadcast_seat_change(self, guest: Dict, update_type: str = "seat_assigned"):
        """Broadcast a guest's new table/seat (both null after an unassign)"""
        await self._send({
            "type": update_type,
            "guest": {
                "id": guest["id"],
                "first_name": guest["first_name"],
                "last_name": guest["last_name"],
                "table_id": guest["table_id"],
                "seat_index": guest["seat_index"],
            },
        })

    async def broadcast_table_change(
        self,
        table_id: str,
        update_type: str = "table_updated",
        unassigned_guest_ids: Optional[List[str]] = None
    ):
        message = {"type": update_type, "table_id": table_id}
        if unassigned_guest_ids is not None:
            message["unassigned_guest_ids"] = unassigned_guest_ids
        await self._send(message)

"""
Domain errors raised by the seating, task and budget services.

Every error is recoverable and user-facing. Services raise them and the
exception handler registered in ``main.py`` renders them with the standard
error envelope, using ``error_code`` and ``status_code`` from the class.
"""

from typing import Any, Optional


class SeatingError(Exception):
    """Base class for all seating errors"""

    error_code = "SEATING_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class OutOfRangeError(SeatingError):
    """Seat index outside the table's capacity"""

    error_code = "OUT_OF_RANGE"
    status_code = 422

    def __init__(self, seat_index: int, total_seats: int):
        super().__init__(
            f"Invalid seat number (0-{total_seats - 1})",
            details={"seat_index": seat_index, "total_seats": total_seats},
        )


class SeatTakenError(SeatingError):
    """Seat already held by a different guest"""

    error_code = "SEAT_TAKEN"
    status_code = 409

    def __init__(self, table_id: str, seat_index: int, occupant_id: Optional[str] = None):
        super().__init__(
            "This seat is already taken",
            details={"table_id": table_id, "seat_index": seat_index, "occupant_id": occupant_id},
        )


class GuestDeclinedError(SeatingError):
    error_code = "GUEST_DECLINED"
    status_code = 409

    def __init__(self, guest_id: str):
        super().__init__(
            "This guest has declined the invitation and cannot be seated",
            details={"guest_id": guest_id},
        )


class TableFullError(SeatingError):
    error_code = "TABLE_FULL"
    status_code = 409

    def __init__(self, table_id: str):
        super().__init__("This table has no free seats left", details={"table_id": table_id})


class NotFoundError(SeatingError):
    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} not found", details={"id": resource_id})


class HeadTableExistsError(SeatingError):
    error_code = "HEAD_TABLE_EXISTS"
    status_code = 409

    def __init__(self, table_id: str):
        super().__init__("A head table already exists", details={"table_id": table_id})


class AmountRequiredError(SeatingError):
    """An expense cannot be marked paid without a positive amount"""

    error_code = "AMOUNT_REQUIRED"
    status_code = 422

    def __init__(self, expense_id: Optional[str] = None):
        super().__init__(
            "Set an amount greater than zero before marking the expense as paid",
            details={"expense_id": expense_id},
        )

"""
Repository layer abstracting storage (SQLAlchemy vs Firebase Firestore).

Guest records are the seat ledger: a guest's ``table_id`` and ``seat_index``
are the only place seat occupancy is stored. Tables never keep a list of
occupants. Tasks, expenses and the budget total sit alongside
the seating records in the same store.

Each repository exposes backend-neutral methods that dispatch to a ``*_sql``
or ``*_fs`` implementation. All of them return plain dicts shaped like the
response schemas so services never see ORM objects or Firestore snapshots.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import SeatTakenError
from app.models import AuditEvent, BudgetSettings, Expense, Guest, Table, Task
from app.models.budget import BUDGET_SETTINGS_ID
from app.models.table import HEAD_TABLE_TYPE
from app.schemas.budget import ExpenseResponse
from app.schemas.guest import GuestResponse
from app.schemas.table import TableResponse
from app.schemas.task import TaskResponse
from app.services.firebase_client import get_firestore_client

logger = logging.getLogger(__name__)

TABLES = "tables"
GUESTS = "guests"
AUDIT_EVENTS = "audit_events"
TASKS = "tasks"
EXPENSES = "expenses"
SETTINGS = "settings"


def use_firestore() -> bool:
    return settings.USE_FIREBASE is True


def _now_iso() -> str:
    return datetime.utcnow().isoformat()


def _table_row(source: Any) -> Dict[str, Any]:
    if isinstance(source, dict):
        source = {**source, "is_head_table": source.get("table_type") == HEAD_TABLE_TYPE}
    return TableResponse.model_validate(source).model_dump()


def _guest_row(source: Any) -> Dict[str, Any]:
    return GuestResponse.model_validate(source).model_dump()


def _task_row(source: Any) -> Dict[str, Any]:
    return TaskResponse.model_validate(source).model_dump()


def _expense_row(source: Any) -> Dict[str, Any]:
    return ExpenseResponse.model_validate(source).model_dump()


def _doc_dict(doc) -> Dict[str, Any]:
    data = doc.to_dict()
    data["id"] = doc.id
    return data


def _seat_order(guest: Dict[str, Any]) -> Tuple[bool, int]:
    """Sort key: ascending seat index, guests without a seat last"""
    seat_index = guest.get("seat_index")
    return (seat_index is None, seat_index if seat_index is not None else 0)


def _head_first(table: Dict[str, Any]):
    return (not table["is_head_table"], table["created_at"])


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def _rename_category_fs(collection: str, old_name: str, new_name: str) -> int:
    fs = get_firestore_client()
    docs = fs.collection(collection).where("category", "==", old_name).get()
    if not docs:
        return 0
    batch = fs.batch()
    for doc in docs:
        batch.update(doc.reference, {"category": new_name, "updated_at": _now_iso()})
    batch.commit()
    return len(docs)


# -------- Table repository --------

class TableRepo:
    @staticmethod
    def get(db: Optional[Session], table_id: str) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return TableRepo.get_fs(table_id)
        return TableRepo.get_sql(db, table_id)

    @staticmethod
    def list_all(db: Optional[Session]) -> List[Dict[str, Any]]:
        """All tables, head table first, then oldest first"""
        rows = TableRepo.list_fs() if use_firestore() else TableRepo.list_sql(db)
        return sorted(rows, key=_head_first)

    @staticmethod
    def get_head(db: Optional[Session]) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return TableRepo.get_head_fs()
        return TableRepo.get_head_sql(db)

    @staticmethod
    def create(db: Optional[Session], name: str, seats: int, notes: str, table_type: str) -> Dict[str, Any]:
        if use_firestore():
            return TableRepo.create_fs(name, seats, notes, table_type)
        return TableRepo.create_sql(db, name, seats, notes, table_type)

    @staticmethod
    def update(db: Optional[Session], table_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        if use_firestore():
            return TableRepo.update_fs(table_id, changes)
        return TableRepo.update_sql(db, table_id, changes)

    @staticmethod
    def delete_with_guests(db: Optional[Session], table_id: str) -> List[str]:
        """Clear every guest's seat at the table, then delete the table.

        Both steps commit together. Returns the ids of the unassigned guests.
        """
        if use_firestore():
            return TableRepo.delete_with_guests_fs(table_id)
        return TableRepo.delete_with_guests_sql(db, table_id)

    # SQL

    @staticmethod
    def get_sql(db: Session, table_id: str) -> Optional[Dict[str, Any]]:
        table = db.query(Table).filter(Table.id == table_id).first()
        return _table_row(table) if table else None

    @staticmethod
    def list_sql(db: Session) -> List[Dict[str, Any]]:
        return [_table_row(t) for t in db.query(Table).order_by(Table.created_at).all()]

    @staticmethod
    def get_head_sql(db: Session) -> Optional[Dict[str, Any]]:
        table = db.query(Table).filter(Table.table_type == HEAD_TABLE_TYPE).first()
        return _table_row(table) if table else None

    @staticmethod
    def create_sql(db: Session, name: str, seats: int, notes: str, table_type: str) -> Dict[str, Any]:
        table = Table(name=name, seats=seats, notes=notes, table_type=table_type)
        db.add(table)
        _commit(db)
        db.refresh(table)
        return _table_row(table)

    @staticmethod
    def update_sql(db: Session, table_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        table = db.query(Table).filter(Table.id == table_id).first()
        for field, value in changes.items():
            setattr(table, field, value)
        table.updated_at = datetime.utcnow()
        _commit(db)
        db.refresh(table)
        return _table_row(table)

    @staticmethod
    def delete_with_guests_sql(db: Session, table_id: str) -> List[str]:
        guests = db.query(Guest).filter(Guest.table_id == table_id).all()
        guest_ids = [g.id for g in guests]
        try:
            for guest in guests:
                guest.table_id = None
                guest.seat_index = None
                guest.updated_at = datetime.utcnow()
            # Guest references must be cleared before the table row goes away
            db.flush()
            db.query(Table).filter(Table.id == table_id).delete()
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        return guest_ids

    # Firestore shape: collection "tables/{table_id}"

    @staticmethod
    def get_fs(table_id: str) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        doc = fs.collection(TABLES).document(table_id).get()
        return _table_row(_doc_dict(doc)) if doc.exists else None

    @staticmethod
    def list_fs() -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        return [_table_row(_doc_dict(d)) for d in fs.collection(TABLES).get()]

    @staticmethod
    def get_head_fs() -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        docs = fs.collection(TABLES).where("table_type", "==", HEAD_TABLE_TYPE).limit(1).get()
        return _table_row(_doc_dict(docs[0])) if docs else None

    @staticmethod
    def create_fs(name: str, seats: int, notes: str, table_type: str) -> Dict[str, Any]:
        fs = get_firestore_client()
        table_id = str(uuid.uuid4())
        data = {
            "name": name,
            "seats": seats,
            "notes": notes,
            "table_type": table_type,
            "created_at": _now_iso(),
            "updated_at": _now_iso(),
        }
        fs.collection(TABLES).document(table_id).set(data)
        return _table_row({**data, "id": table_id})

    @staticmethod
    def update_fs(table_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        fs = get_firestore_client()
        ref = fs.collection(TABLES).document(table_id)
        ref.set({**changes, "updated_at": _now_iso()}, merge=True)
        return _table_row(_doc_dict(ref.get()))

    @staticmethod
    def delete_with_guests_fs(table_id: str) -> List[str]:
        fs = get_firestore_client()
        guest_docs = fs.collection(GUESTS).where("table_id", "==", table_id).get()
        batch = fs.batch()
        for doc in guest_docs:
            batch.update(doc.reference, {"table_id": None, "seat_index": None, "updated_at": _now_iso()})
        batch.delete(fs.collection(TABLES).document(table_id))
        batch.commit()
        return [doc.id for doc in guest_docs]


# -------- Guest repository --------

class GuestRepo:
    @staticmethod
    def get(db: Optional[Session], guest_id: str) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return GuestRepo.get_fs(guest_id)
        return GuestRepo.get_sql(db, guest_id)

    @staticmethod
    def search(
        db: Optional[Session],
        search: Optional[str] = None,
        rsvp_status: Optional[str] = None,
        table_id: Optional[str] = None,
        unassigned: bool = False,
        offset: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Dict[str, Any]], int]:
        if use_firestore():
            return GuestRepo.search_fs(search, rsvp_status, table_id, unassigned, offset, limit)
        return GuestRepo.search_sql(db, search, rsvp_status, table_id, unassigned, offset, limit)

    @staticmethod
    def list_at_table(db: Optional[Session], table_id: str) -> List[Dict[str, Any]]:
        """Guests assigned to a table, ordered by seat index with nulls last"""
        if use_firestore():
            return GuestRepo.list_at_table_fs(table_id)
        return GuestRepo.list_at_table_sql(db, table_id)

    @staticmethod
    def list_assigned(db: Optional[Session]) -> List[Dict[str, Any]]:
        """(id, table_id, seat_index) for every guest holding a table reference"""
        if use_firestore():
            return GuestRepo.list_assigned_fs()
        return GuestRepo.list_assigned_sql(db)

    @staticmethod
    def find_seat_occupant(db: Optional[Session], table_id: str, seat_index: int) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return GuestRepo.find_seat_occupant_fs(table_id, seat_index)
        return GuestRepo.find_seat_occupant_sql(db, table_id, seat_index)

    @staticmethod
    def set_seat(db: Optional[Session], guest_id: str, table_id: str, seat_index: int) -> Dict[str, Any]:
        if use_firestore():
            return GuestRepo.set_seat_fs(guest_id, table_id, seat_index)
        return GuestRepo.set_seat_sql(db, guest_id, table_id, seat_index)

    @staticmethod
    def clear_seat(db: Optional[Session], guest_id: str) -> Dict[str, Any]:
        if use_firestore():
            return GuestRepo.clear_seat_fs(guest_id)
        return GuestRepo.clear_seat_sql(db, guest_id)

    @staticmethod
    def create(db: Optional[Session], data: Dict[str, Any]) -> Dict[str, Any]:
        if use_firestore():
            return GuestRepo.create_fs(data)
        return GuestRepo.create_sql(db, data)

    @staticmethod
    def update(db: Optional[Session], guest_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        if use_firestore():
            return GuestRepo.update_fs(guest_id, changes)
        return GuestRepo.update_sql(db, guest_id, changes)

    @staticmethod
    def delete(db: Optional[Session], guest_id: str) -> None:
        if use_firestore():
            GuestRepo.delete_fs(guest_id)
        else:
            GuestRepo.delete_sql(db, guest_id)

    # SQL

    @staticmethod
    def get_sql(db: Session, guest_id: str) -> Optional[Dict[str, Any]]:
        guest = db.query(Guest).filter(Guest.id == guest_id).first()
        return _guest_row(guest) if guest else None

    @staticmethod
    def search_sql(db, search, rsvp_status, table_id, unassigned, offset, limit):
        query = db.query(Guest)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(or_(
                func.lower(Guest.first_name).like(pattern),
                func.lower(Guest.last_name).like(pattern),
            ))
        if rsvp_status:
            query = query.filter(Guest.rsvp_status == rsvp_status)
        if table_id:
            query = query.filter(Guest.table_id == table_id)
        if unassigned:
            query = query.filter(Guest.table_id.is_(None))

        total = query.count()
        guests = query.order_by(Guest.created_at).offset(offset).limit(limit).all()
        return [_guest_row(g) for g in guests], total

    @staticmethod
    def list_at_table_sql(db: Session, table_id: str) -> List[Dict[str, Any]]:
        guests = db.query(Guest).filter(Guest.table_id == table_id).order_by(
            Guest.seat_index.is_(None), Guest.seat_index
        ).all()
        return [_guest_row(g) for g in guests]

    @staticmethod
    def list_assigned_sql(db: Session) -> List[Dict[str, Any]]:
        rows = db.query(Guest.id, Guest.table_id, Guest.seat_index).filter(Guest.table_id.isnot(None)).all()
        return [{"id": r.id, "table_id": r.table_id, "seat_index": r.seat_index} for r in rows]

    @staticmethod
    def find_seat_occupant_sql(db: Session, table_id: str, seat_index: int) -> Optional[Dict[str, Any]]:
        # Bypass the identity map so a concurrent writer's commit is visible
        guest = db.query(Guest).populate_existing().filter(
            Guest.table_id == table_id,
            Guest.seat_index == seat_index
        ).first()
        return _guest_row(guest) if guest else None

    @staticmethod
    def set_seat_sql(db: Session, guest_id: str, table_id: str, seat_index: int) -> Dict[str, Any]:
        guest = db.query(Guest).filter(Guest.id == guest_id).first()
        guest.table_id = table_id
        guest.seat_index = seat_index
        guest.updated_at = datetime.utcnow()
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(f"Seat {seat_index} at table {table_id} was filled concurrently")
            occupant = GuestRepo.find_seat_occupant_sql(db, table_id, seat_index)
            raise SeatTakenError(table_id, seat_index, occupant["id"] if occupant else None)
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(guest)
        return _guest_row(guest)

    @staticmethod
    def clear_seat_sql(db: Session, guest_id: str) -> Dict[str, Any]:
        guest = db.query(Guest).filter(Guest.id == guest_id).first()
        guest.table_id = None
        guest.seat_index = None
        guest.updated_at = datetime.utcnow()
        _commit(db)
        db.refresh(guest)
        return _guest_row(guest)

    @staticmethod
    def create_sql(db: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        guest = Guest(**data)
        db.add(guest)
        _commit(db)
        db.refresh(guest)
        return _guest_row(guest)

    @staticmethod
    def update_sql(db: Session, guest_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        guest = db.query(Guest).filter(Guest.id == guest_id).first()
        for field, value in changes.items():
            setattr(guest, field, value)
        guest.updated_at = datetime.utcnow()
        _commit(db)
        db.refresh(guest)
        return _guest_row(guest)

    @staticmethod
    def delete_sql(db: Session, guest_id: str) -> None:
        db.query(Guest).filter(Guest.id == guest_id).delete()
        _commit(db)

    # Firestore guest docs under collection "guests/{guest_id}"

    @staticmethod
    def get_fs(guest_id: str) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        doc = fs.collection(GUESTS).document(guest_id).get()
        return _guest_row(_doc_dict(doc)) if doc.exists else None

    @staticmethod
    def search_fs(search, rsvp_status, table_id, unassigned, offset, limit):
        fs = get_firestore_client()
        query = fs.collection(GUESTS)
        if rsvp_status:
            query = query.where("rsvp_status", "==", rsvp_status)
        if table_id:
            query = query.where("table_id", "==", table_id)
        guests = [_doc_dict(d) for d in query.get()]

        # Firestore has no substring match; guest lists are small enough to filter here
        if search:
            needle = search.lower()
            guests = [
                g for g in guests
                if needle in (g.get("first_name") or "").lower() or needle in (g.get("last_name") or "").lower()
            ]
        if unassigned:
            guests = [g for g in guests if not g.get("table_id")]

        guests.sort(key=lambda g: g.get("created_at") or "")
        return [_guest_row(g) for g in guests[offset:offset + limit]], len(guests)

    @staticmethod
    def list_at_table_fs(table_id: str) -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        docs = fs.collection(GUESTS).where("table_id", "==", table_id).get()
        return [_guest_row(g) for g in sorted((_doc_dict(d) for d in docs), key=_seat_order)]

    @staticmethod
    def list_assigned_fs() -> List[Dict[str, Any]]:
        fs = get_firestore_client()
        results = []
        for d in fs.collection(GUESTS).get():
            data = d.to_dict()
            if data.get("table_id") is None:
                continue
            results.append({"id": d.id, "table_id": data.get("table_id"), "seat_index": data.get("seat_index")})
        return results

    @staticmethod
    def find_seat_occupant_fs(table_id: str, seat_index: int) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        docs = fs.collection(GUESTS).where("table_id", "==", table_id).where("seat_index", "==", seat_index).limit(1).get()
        return _guest_row(_doc_dict(docs[0])) if docs else None

    @staticmethod
    def set_seat_fs(guest_id: str, table_id: str, seat_index: int) -> Dict[str, Any]:
        fs = get_firestore_client()
        ref = fs.collection(GUESTS).document(guest_id)
        ref.update({"table_id": table_id, "seat_index": seat_index, "updated_at": _now_iso()})
        return _guest_row(_doc_dict(ref.get()))

    @staticmethod
    def clear_seat_fs(guest_id: str) -> Dict[str, Any]:
        fs = get_firestore_client()
        ref = fs.collection(GUESTS).document(guest_id)
        ref.update({"table_id": None, "seat_index": None, "updated_at": _now_iso()})
        return _guest_row(_doc_dict(ref.get()))

    @staticmethod
    def create_fs(data: Dict[str, Any]) -> Dict[str, Any]:
        fs = get_firestore_client()
        guest_id = str(uuid.uuid4())
        payload = {
            **data,
            "table_id": None,
            "seat_index": None,
            "created_at": _now_iso(),
            "updated_at": _now_iso(),
        }
        fs.collection(GUESTS).document(guest_id).set(payload)
        return _guest_row({**payload, "id": guest_id})

    @staticmethod
    def update_fs(guest_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        fs = get_firestore_client()
        ref = fs.collection(GUESTS).document(guest_id)
        ref.set({**changes, "updated_at": _now_iso()}, merge=True)
        return _guest_row(_doc_dict(ref.get()))

    @staticmethod
    def delete_fs(guest_id: str) -> None:
        fs = get_firestore_client()
        fs.collection(GUESTS).document(guest_id).delete()


# -------- Task repository --------

class TaskRepo:
    @staticmethod
    def get(db: Optional[Session], task_id: str) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return TaskRepo.get_fs(task_id)
        return TaskRepo.get_sql(db, task_id)

    @staticmethod
    def list_filtered(
        db: Optional[Session],
        category: Optional[str] = None,
        completed: Optional[bool] = None,
        is_priority: Optional[bool] = None,
    ) -> List[Dict[str, Any]]:
        """Tasks matching every given filter, oldest first"""
        if use_firestore():
            return TaskRepo.list_filtered_fs(category, completed, is_priority)
        return TaskRepo.list_filtered_sql(db, category, completed, is_priority)

    @staticmethod
    def create(db: Optional[Session], data: Dict[str, Any]) -> Dict[str, Any]:
        if use_firestore():
            return TaskRepo.create_fs(data)
        return TaskRepo.create_sql(db, data)

    @staticmethod
    def update(db: Optional[Session], task_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        if use_firestore():
            return TaskRepo.update_fs(task_id, changes)
        return TaskRepo.update_sql(db, task_id, changes)

    @staticmethod
    def delete(db: Optional[Session], task_id: str) -> None:
        if use_firestore():
            fs = get_firestore_client()
            fs.collection(TASKS).document(task_id).delete()
            return
        db.query(Task).filter(Task.id == task_id).delete()
        _commit(db)

    @staticmethod
    def rename_category(db: Optional[Session], old_name: str, new_name: str) -> int:
        """Move every task in ``old_name`` to ``new_name``; returns the count"""
        if use_firestore():
            return _rename_category_fs(TASKS, old_name, new_name)
        count = db.query(Task).filter(Task.category == old_name).update(
            {Task.category: new_name, Task.updated_at: datetime.utcnow()},
            synchronize_session=False
        )
        _commit(db)
        return count

    # SQL

    @staticmethod
    def get_sql(db: Session, task_id: str) -> Optional[Dict[str, Any]]:
        task = db.query(Task).filter(Task.id == task_id).first()
        return _task_row(task) if task else None

    @staticmethod
    def list_filtered_sql(db, category, completed, is_priority):
        query = db.query(Task)
        if category is not None:
            query = query.filter(Task.category == category)
        if completed is not None:
            query = query.filter(Task.completed == completed)
        if is_priority is not None:
            query = query.filter(Task.is_priority == is_priority)
        return [_task_row(t) for t in query.order_by(Task.created_at).all()]

    @staticmethod
    def create_sql(db: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        task = Task(**data)
        db.add(task)
        _commit(db)
        db.refresh(task)
        return _task_row(task)

    @staticmethod
    def update_sql(db: Session, task_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        task = db.query(Task).filter(Task.id == task_id).first()
        for field, value in changes.items():
            setattr(task, field, value)
        task.updated_at = datetime.utcnow()
        _commit(db)
        db.refresh(task)
        return _task_row(task)

    # Firestore task docs under collection "tasks/{task_id}"

    @staticmethod
    def get_fs(task_id: str) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        doc = fs.collection(TASKS).document(task_id).get()
        return _task_row(_doc_dict(doc)) if doc.exists else None

    @staticmethod
    def list_filtered_fs(category, completed, is_priority):
        fs = get_firestore_client()
        query = fs.collection(TASKS)
        if category is not None:
            query = query.where("category", "==", category)
        if completed is not None:
            query = query.where("completed", "==", completed)
        if is_priority is not None:
            query = query.where("is_priority", "==", is_priority)
        tasks = sorted((_doc_dict(d) for d in query.get()), key=lambda t: t.get("created_at") or "")
        return [_task_row(t) for t in tasks]

    @staticmethod
    def create_fs(data: Dict[str, Any]) -> Dict[str, Any]:
        fs = get_firestore_client()
        task_id = str(uuid.uuid4())
        payload = {
            **data,
            "completed": False,
            "created_at": _now_iso(),
            "updated_at": _now_iso(),
        }
        fs.collection(TASKS).document(task_id).set(payload)
        return _task_row({**payload, "id": task_id})

    @staticmethod
    def update_fs(task_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        fs = get_firestore_client()
        ref = fs.collection(TASKS).document(task_id)
        ref.set({**changes, "updated_at": _now_iso()}, merge=True)
        return _task_row(_doc_dict(ref.get()))


# -------- Budget repositories --------

class ExpenseRepo:
    @staticmethod
    def get(db: Optional[Session], expense_id: str) -> Optional[Dict[str, Any]]:
        if use_firestore():
            return ExpenseRepo.get_fs(expense_id)
        return ExpenseRepo.get_sql(db, expense_id)

    @staticmethod
    def list_filtered(
        db: Optional[Session],
        category: Optional[str] = None,
        payment_status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Expenses matching every given filter, oldest first"""
        if use_firestore():
            return ExpenseRepo.list_filtered_fs(category, payment_status)
        return ExpenseRepo.list_filtered_sql(db, category, payment_status)

    @staticmethod
    def create(db: Optional[Session], data: Dict[str, Any]) -> Dict[str, Any]:
        if use_firestore():
            return ExpenseRepo.create_fs(data)
        return ExpenseRepo.create_sql(db, data)

    @staticmethod
    def update(db: Optional[Session], expense_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        if use_firestore():
            return ExpenseRepo.update_fs(expense_id, changes)
        return ExpenseRepo.update_sql(db, expense_id, changes)

    @staticmethod
    def delete(db: Optional[Session], expense_id: str) -> None:
        if use_firestore():
            fs = get_firestore_client()
            fs.collection(EXPENSES).document(expense_id).delete()
            return
        db.query(Expense).filter(Expense.id == expense_id).delete()
        _commit(db)

    @staticmethod
    def rename_category(db: Optional[Session], old_name: str, new_name: str) -> int:
        if use_firestore():
            return _rename_category_fs(EXPENSES, old_name, new_name)
        count = db.query(Expense).filter(Expense.category == old_name).update(
            {Expense.category: new_name, Expense.updated_at: datetime.utcnow()},
            synchronize_session=False
        )
        _commit(db)
        return count

    # SQL

    @staticmethod
    def get_sql(db: Session, expense_id: str) -> Optional[Dict[str, Any]]:
        expense = db.query(Expense).filter(Expense.id == expense_id).first()
        return _expense_row(expense) if expense else None

    @staticmethod
    def list_filtered_sql(db, category, payment_status):
        query = db.query(Expense)
        if category is not None:
            query = query.filter(Expense.category == category)
        if payment_status is not None:
            query = query.filter(Expense.payment_status == payment_status)
        return [_expense_row(e) for e in query.order_by(Expense.created_at).all()]

    @staticmethod
    def create_sql(db: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        expense = Expense(**data)
        db.add(expense)
        _commit(db)
        db.refresh(expense)
        return _expense_row(expense)

    @staticmethod
    def update_sql(db: Session, expense_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        expense = db.query(Expense).filter(Expense.id == expense_id).first()
        for field, value in changes.items():
            setattr(expense, field, value)
        expense.updated_at = datetime.utcnow()
        _commit(db)
        db.refresh(expense)
        return _expense_row(expense)

    # Firestore expense docs under collection "expenses/{expense_id}"

    @staticmethod
    def get_fs(expense_id: str) -> Optional[Dict[str, Any]]:
        fs = get_firestore_client()
        doc = fs.collection(EXPENSES).document(expense_id).get()
        return _expense_row(_doc_dict(doc)) if doc.exists else None

    @staticmethod
    def list_filtered_fs(category, payment_status):
        fs = get_firestore_client()
        query = fs.collection(EXPENSES)
        if category is not None:
            query = query.where("category", "==", category)
        if payment_status is not None:
            query = query.where("payment_status", "==", payment_status)
        expenses = sorted((_doc_dict(d) for d in query.get()), key=lambda e: e.get("created_at") or "")
        return [_expense_row(e) for e in expenses]

    @staticmethod
    def create_fs(data: Dict[str, Any]) -> Dict[str, Any]:
        fs = get_firestore_client()
        expense_id = str(uuid.uuid4())
        payload = {**data, "created_at": _now_iso(), "updated_at": _now_iso()}
        fs.collection(EXPENSES).document(expense_id).set(payload)
        return _expense_row({**payload, "id": expense_id})

    @staticmethod
    def update_fs(expense_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        fs = get_firestore_client()
        ref = fs.collection(EXPENSES).document(expense_id)
        ref.set({**changes, "updated_at": _now_iso()}, merge=True)
        return _expense_row(_doc_dict(ref.get()))


class BudgetRepo:
    """Planned total, stored as a single settings record"""

    @staticmethod
    def get_total(db: Optional[Session]) -> Optional[float]:
        if use_firestore():
            fs = get_firestore_client()
            doc = fs.collection(SETTINGS).document(BUDGET_SETTINGS_ID).get()
            return doc.to_dict().get("total_budget") if doc.exists else None

        row = db.query(BudgetSettings).filter(BudgetSettings.id == BUDGET_SETTINGS_ID).first()
        return row.total_budget if row else None

    @staticmethod
    def set_total(db: Optional[Session], amount: float) -> None:
        if use_firestore():
            fs = get_firestore_client()
            fs.collection(SETTINGS).document(BUDGET_SETTINGS_ID).set(
                {"total_budget": amount, "updated_at": _now_iso()}, merge=True
            )
            return

        row = db.query(BudgetSettings).filter(BudgetSettings.id == BUDGET_SETTINGS_ID).first()
        if row is None:
            db.add(BudgetSettings(id=BUDGET_SETTINGS_ID, total_budget=amount))
        else:
            row.total_budget = amount
            row.updated_at = datetime.utcnow()
        _commit(db)


# -------- Audit repository --------

class AuditRepo:
    @staticmethod
    def add(db: Optional[Session], action: str, target_id: Optional[str], details: Dict[str, Any]) -> None:
        if use_firestore():
            fs = get_firestore_client()
            fs.collection(AUDIT_EVENTS).document(str(uuid.uuid4())).set({
                "action": action,
                "target_id": target_id,
                "details": details,
                "created_at": _now_iso(),
            })
            return

        db.add(AuditEvent(action=action, target_id=target_id, details=details))
        _commit(db)

"""
Task checklist routes
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.task import CategoryRename, TaskCreate, TaskUpdate
from app.services.task_service import TaskService
from app.utils.security import verify_admin_token
from app.utils.responses import success_response

router = APIRouter()

@router.get("")
def list_tasks(
    category: Optional[str] = Query(None),
    completed: Optional[bool] = Query(None),
    is_priority: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    tasks = TaskService.list_tasks(db, category=category, completed=completed, is_priority=is_priority)
    return success_response(message="Tasks retrieved successfully", data={"tasks": tasks})

@router.post("")
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    task = TaskService.create_task(db, task_data)
    return success_response(message="Task created successfully", data=task, status_code=201)

@router.get("/progress")
def task_progress(
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Completion counts overall and per category"""
    return success_response(message="Task progress retrieved", data=TaskService.get_progress(db))

@router.post("/categories/rename")
def rename_category(
    rename: CategoryRename,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    result = TaskService.rename_category(db, rename.old_name, rename.new_name)
    return success_response(message="Category renamed", data=result)

@router.get("/{task_id}")
def get_task(
    task_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    return success_response(message="Task retrieved", data=TaskService.get_task(db, task_id))

@router.patch("/{task_id}")
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    task = TaskService.update_task(db, task_id, task_update)
    return success_response(message="Task updated successfully", data=task)

@router.post("/{task_id}/toggle")
def toggle_task(
    task_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Mark a task done, or open again"""
    task = TaskService.toggle_task(db, task_id)
    return success_response(message="Task toggled", data=task)

@router.delete("/{task_id}")
def delete_task(
    task_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    TaskService.delete_task(db, task_id)
    return success_response(message="Task deleted successfully", data={"deleted_task_id": task_id})

"""
Wedding task checklist service
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.repositories import TaskRepo
from app.utils.retry import with_retry

logger = logging.getLogger(__name__)


def task_progress(tasks: List[Dict]) -> Dict:
    """Completion counts overall and per category"""
    total = len(tasks)
    completed = sum(1 for t in tasks if t["completed"])

    by_category: Dict[str, Dict] = {}
    for task in tasks:
        entry = by_category.setdefault(task["category"], {"category": task["category"], "total": 0, "completed": 0})
        entry["total"] += 1
        if task["completed"]:
            entry["completed"] += 1

    return {
        "total": total,
        "completed": completed,
        "remaining": total - completed,
        "completed_pct": round(completed / total * 100, 1) if total else 0.0,
        "open_priority": sum(1 for t in tasks if t["is_priority"] and not t["completed"]),
        "categories": [by_category[name] for name in sorted(by_category)],
    }


class TaskService:
    """Service for the planning checklist"""

    @staticmethod
    def get_task(db: Session, task_id: str) -> Dict:
        task = with_retry(lambda: TaskRepo.get(db, task_id))
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    @staticmethod
    def list_tasks(
        db: Session,
        category: Optional[str] = None,
        completed: Optional[bool] = None,
        is_priority: Optional[bool] = None,
    ) -> List[Dict]:
        return with_retry(lambda: TaskRepo.list_filtered(db, category, completed, is_priority))

    @staticmethod
    def create_task(db: Session, task_data: TaskCreate) -> Dict:
        task = with_retry(lambda: TaskRepo.create(db, task_data.model_dump()))
        logger.info(f"Task {task['id']} created in {task['category']}")
        return task

    @staticmethod
    def update_task(db: Session, task_id: str, task_update: TaskUpdate) -> Dict:
        TaskService.get_task(db, task_id)
        changes = task_update.model_dump(exclude_unset=True, exclude_none=True)
        if "description" in task_update.model_fields_set and task_update.description is None:
            changes["description"] = None
        if not changes:
            return TaskService.get_task(db, task_id)

        task = with_retry(lambda: TaskRepo.update(db, task_id, changes))
        logger.info(f"Task {task_id} updated: {sorted(changes)}")
        return task

    @staticmethod
    def toggle_task(db: Session, task_id: str) -> Dict:
        """Flip a task between done and open"""
        task = TaskService.get_task(db, task_id)
        return with_retry(lambda: TaskRepo.update(db, task_id, {"completed": not task["completed"]}))

    @staticmethod
    def delete_task(db: Session, task_id: str) -> None:
        TaskService.get_task(db, task_id)
        with_retry(lambda: TaskRepo.delete(db, task_id))
        logger.info(f"Task {task_id} deleted")

    @staticmethod
    def rename_category(db: Session, old_name: str, new_name: str) -> Dict:
        count = 0
        if old_name != new_name:
            count = with_retry(lambda: TaskRepo.rename_category(db, old_name, new_name))
            logger.info(f"Task category {old_name!r} renamed to {new_name!r} on {count} tasks")
        return {"old_name": old_name, "new_name": new_name, "updated_count": count}

    @staticmethod
    def get_progress(db: Session) -> Dict:
        return task_progress(TaskService.list_tasks(db))

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from ..database import get_db
from ..models import Task as TaskModel, TaskStatus, User
from ..schemas.task import Task as TaskSchema, TaskCreate, TaskParentChange, TaskUpdate
from ..services.reminders import CeleryReminderQueue, ReminderQueue, ReminderScheduler
from ..services.task_service import TaskService
from .auth import get_current_user

router = APIRouter()


def get_reminder_queue() -> ReminderQueue:
    return CeleryReminderQueue()


def get_task_service(
    db: Session = Depends(get_db),
    queue: ReminderQueue = Depends(get_reminder_queue),
) -> TaskService:
    return TaskService(db, listeners=[ReminderScheduler(queue)])


def _ensure_owner(task: TaskModel, current_user: User) -> None:
    if task.owner_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This action is unauthorized.",
        )


def _get_update_data(task_update: TaskUpdate) -> dict:
    return task_update.model_dump(exclude_unset=True)


def _owned_task(task_id: str, current_user: User, service: TaskService) -> TaskModel:
    task = service.get_task(task_id)
    _ensure_owner(task, current_user)
    return task


@router.get("/tasks", response_model=List[TaskSchema])
def list_tasks(
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """List every task with its owner and parent."""
    return service.list_tasks()


@router.post("/tasks", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Create a task owned by the authenticated user."""
    return service.create_task(task.model_dump(), owner_id=current_user.id)


@router.get("/tasks/{task_id}", response_model=TaskSchema)
def get_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return service.get_task(task_id)


@router.put("/tasks/{task_id}", response_model=TaskSchema)
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Update a task; a status change is checked against its direct subtasks."""
    task = _owned_task(task_id, current_user, service)
    return service.update_task(task, _get_update_data(task_update))


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Delete a task. Its subtasks are left in place."""
    task = _owned_task(task_id, current_user, service)
    service.delete_task(task)


def _set_status(task_id: str, new_status: TaskStatus, current_user: User, service: TaskService):
    task = _owned_task(task_id, current_user, service)
    return service.set_status(task, new_status)


@router.put("/tasks/{task_id}/todo", response_model=TaskSchema)
def mark_as_todo(
    task_id: str,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return _set_status(task_id, TaskStatus.TODO, current_user, service)


@router.put("/tasks/{task_id}/in-progress", response_model=TaskSchema)
def mark_as_in_progress(
    task_id: str,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return _set_status(task_id, TaskStatus.IN_PROGRESS, current_user, service)


@router.put("/tasks/{task_id}/done", response_model=TaskSchema)
def mark_as_done(
    task_id: str,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return _set_status(task_id, TaskStatus.DONE, current_user, service)


@router.put("/tasks/{task_id}/change-parent", response_model=TaskSchema)
def change_parent(
    task_id: str,
    payload: TaskParentChange,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Move a task under another task, or to the root with ``parent_id: null``."""
    task = _owned_task(task_id, current_user, service)
    return service.change_parent(task, payload.parent_id)

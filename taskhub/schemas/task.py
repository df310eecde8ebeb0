from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

from ..models.task import TaskStatus
from .user import User


class TaskBase(BaseModel):
    """Base task schema with common fields."""
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    parent_id: Optional[str] = None


class TaskCreate(TaskBase):
    """Schema for creating new tasks.

    The owner is always the authenticated user; an ``owner_id`` in the
    payload is dropped.
    """
    pass


class TaskUpdate(BaseModel):
    """Schema for updating existing tasks."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    parent_id: Optional[str] = None

    @field_validator("title", "status")
    @classmethod
    def reject_null(cls, value):
        # Omit the key to leave the field unchanged
        if value is None:
            raise ValueError("This field may not be null.")
        return value


class TaskParentChange(BaseModel):
    """Schema for moving a task under another parent (or to the root)."""
    parent_id: Optional[str] = None


class TaskParent(BaseModel):
    id: str
    title: str
    status: TaskStatus
    parent_id: Optional[str] = None

    class Config:
        from_attributes = True


class Task(TaskBase):
    """Complete task schema with resolved owner and parent."""
    id: str
    owner_id: str
    created_at: datetime
    updated_at: datetime
    owner: Optional[User] = None
    parent: Optional[TaskParent] = None

    class Config:
        from_attributes = True

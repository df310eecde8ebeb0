from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import Optional
from uuid import uuid4
import enum


class TaskStatus(str, enum.Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class Task(SQLModel, table=True):
    """Task model; tasks nest through ``parent_id`` into a forest.

    ``parent_id`` carries no database foreign key: deleting a parent leaves
    its children pointing at a missing row, and ``parent`` resolves to None.
    """
    __tablename__ = "tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str
    description: Optional[str] = None
    status: TaskStatus = Field(default=TaskStatus.TODO, index=True)
    parent_id: Optional[str] = Field(default=None, index=True)
    owner_id: str = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    owner: Optional["User"] = Relationship(back_populates="tasks")
    parent: Optional["Task"] = Relationship(
        sa_relationship_kwargs={
            "primaryjoin": "remote(Task.id) == foreign(Task.parent_id)",
            "viewonly": True,
        }
    )

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from ..errors import TaskNotFound
from ..models import Task, TaskStatus

# owner_id is assigned once at creation and id never changes
WRITABLE_FIELDS = ("title", "description", "status", "parent_id")
# None for these means "leave unchanged"
NOT_NULLABLE_FIELDS = ("title", "status")


def _writable(fields: dict) -> dict:
    data = {
        field: value
        for field, value in fields.items()
        if field in WRITABLE_FIELDS and not (field in NOT_NULLABLE_FIELDS and value is None)
    }
    if data.get("status") is not None:
        data["status"] = TaskStatus(data["status"])
    return data


class TaskStore:
    """Persistence for tasks on top of a SQLModel session.

    Every mutating call commits, then hands back a fresh copy of the row with
    ``owner`` and ``parent`` loaded.
    """

    def __init__(self, session: Session):
        self.session = session

    def _with_relations(self):
        return select(Task).options(selectinload(Task.owner), selectinload(Task.parent))

    def create(self, fields: dict, owner_id: str) -> Task:
        task = Task(**_writable(fields), owner_id=owner_id)
        self.session.add(task)
        self.session.commit()
        return self.get(task.id)

    def get(self, task_id: str) -> Task:
        statement = (
            self._with_relations()
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        task = self.session.exec(statement).first()
        if task is None:
            raise TaskNotFound(task_id)
        return task

    def list_all(self) -> List[Task]:
        statement = self._with_relations().order_by(Task.created_at)
        return list(self.session.exec(statement).all())

    def update(self, task: Task, fields: dict) -> Task:
        for field, value in _writable(fields).items():
            setattr(task, field, value)
        task.updated_at = datetime.utcnow()

        self.session.add(task)
        self.session.commit()
        return self.get(task.id)

    def delete(self, task: Task) -> None:
        # Children keep their parent_id; nothing cascades.
        self.session.delete(task)
        self.session.commit()

    def direct_children(self, task: Task) -> List[Task]:
        statement = select(Task).where(Task.parent_id == task.id).order_by(Task.created_at)
        return list(self.session.exec(statement).all())

    def has_child_outside(self, task: Task, status: TaskStatus) -> bool:
        """True if some direct child of ``task`` has a status other than ``status``."""
        statement = (
            select(Task.id)
            .where(Task.parent_id == task.id, Task.status != status)
            .limit(1)
        )
        return self.session.exec(statement).first() is not None

    def exists(self, task_id: str) -> bool:
        return self.session.exec(select(Task.id).where(Task.id == task_id)).first() is not None

    def parent_id_of(self, task_id: str) -> Optional[str]:
        row = self.session.exec(select(Task.id, Task.parent_id).where(Task.id == task_id)).first()
        if row is None:
            raise TaskNotFound(task_id)
        return row[1]

    def lock(self, task: Task) -> None:
        """Row-lock ``task`` until the next commit (ignored by SQLite)."""
        self.session.exec(select(Task.id).where(Task.id == task.id).with_for_update()).first()

    def rollback(self) -> None:
        """End the current transaction without writing, releasing any lock."""
        self.session.rollback()

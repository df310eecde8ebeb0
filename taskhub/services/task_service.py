from typing import Iterable, List, Optional

from sqlmodel import Session

from ..errors import ParentNotFound
from ..models import Task, TaskStatus
from .hierarchy import HierarchyEvaluator
from .parents import ParentReassignment
from .task_store import TaskStore
from .transitions import StatusChangedListener, TransitionEngine


class TaskService:
    """Task operations offered to the request layer.

    Callers pass the acting user's id explicitly; ownership checks happen
    before these methods are called.
    """

    def __init__(self, session: Session, listeners: Optional[Iterable[StatusChangedListener]] = None):
        self.store = TaskStore(session)
        self.hierarchy = HierarchyEvaluator(self.store)
        self.parents = ParentReassignment(self.store, self.hierarchy)
        self.transitions = TransitionEngine(
            self.store, self.hierarchy, self.parents, listeners=listeners
        )

    def create_task(self, fields: dict, owner_id: str) -> Task:
        parent_id = fields.get("parent_id")
        if parent_id is not None and not self.store.exists(parent_id):
            raise ParentNotFound(parent_id)
        return self.store.create(fields, owner_id=owner_id)

    def get_task(self, task_id: str) -> Task:
        return self.store.get(task_id)

    def list_tasks(self) -> List[Task]:
        return self.store.list_all()

    def update_task(self, task: Task, fields: dict) -> Task:
        return self.transitions.apply_update(task, fields)

    def set_status(self, task: Task, status: TaskStatus) -> Task:
        return self.transitions.set_status(task, status)

    def change_parent(self, task: Task, parent_id: Optional[str]) -> Task:
        return self.parents.change_parent(task, parent_id)

    def delete_task(self, task: Task) -> None:
        self.store.delete(task)

from typing import Optional

from ..errors import InvalidParent, ParentNotFound, TaskhubError
from ..models import Task
from .hierarchy import HierarchyEvaluator
from .task_store import TaskStore


class ParentReassignment:
    """Moves tasks between parents, refusing moves that would close a cycle."""

    def __init__(self, store: TaskStore, hierarchy: HierarchyEvaluator):
        self.store = store
        self.hierarchy = hierarchy

    def validate(self, task: Task, new_parent_id: Optional[str]) -> None:
        if new_parent_id is None:
            return
        if not self.store.exists(new_parent_id):
            raise ParentNotFound(new_parent_id)
        if self.hierarchy.in_subtree_of(new_parent_id, task):
            raise InvalidParent("A task cannot be moved under itself or one of its subtasks.")

    def change_parent(self, task: Task, new_parent_id: Optional[str]) -> Task:
        self.store.lock(task)
        try:
            self.validate(task, new_parent_id)
        except TaskhubError:
            self.store.rollback()
            raise
        return self.store.update(task, {"parent_id": new_parent_id})

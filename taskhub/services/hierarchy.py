from typing import Optional

from ..errors import TaskNotFound
from ..models import Task, TaskStatus
from .task_store import TaskStore


class HierarchyEvaluator:
    """Read-only questions about a task's place in the tree.

    The status predicates look at direct children only; grandchildren are
    never consulted. Nothing is cached, every call re-reads the store.
    """

    def __init__(self, store: TaskStore):
        self.store = store

    def all_children_in(self, task: Task, status: TaskStatus) -> bool:
        return not self.store.has_child_outside(task, TaskStatus(status))

    def all_children_in_progress(self, task: Task) -> bool:
        return self.all_children_in(task, TaskStatus.IN_PROGRESS)

    def all_children_done(self, task: Task) -> bool:
        return self.all_children_in(task, TaskStatus.DONE)

    def all_children_todo(self, task: Task) -> bool:
        return self.all_children_in(task, TaskStatus.TODO)

    def in_subtree_of(self, candidate_id: Optional[str], task: Task) -> bool:
        """Walk up from ``candidate_id``; True if the walk reaches ``task``.

        A dangling parent pointer ends the walk, as does a loop that was
        already in the data.
        """
        seen = set()
        current = candidate_id
        while current is not None and current not in seen:
            if current == task.id:
                return True
            seen.add(current)
            try:
                current = self.store.parent_id_of(current)
            except TaskNotFound:
                return False
        return False

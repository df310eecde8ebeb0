"""Status transitions for tasks.

The engine is the only writer of ``Task.status``. A requested status is
accepted only when every direct subtask already has that status, so a parent
can never run ahead of its children:

    todo         all direct subtasks are todo
    in_progress  all direct subtasks are in_progress
    done         all direct subtasks are done

Any state may move to any other state (``todo -> done`` included) as long as
the children agree. Childless tasks always pass.

A successful update that supplied ``status=in_progress`` is announced to the
listeners as a ``StatusChanged`` event after the row is committed. Updates
without a ``status`` key are plain field edits: no check, no event.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List, Optional

import structlog

from ..errors import InvalidTransition, TaskhubError
from ..models import Task, TaskStatus
from .hierarchy import HierarchyEvaluator
from .parents import ParentReassignment
from .task_store import TaskStore

logger = structlog.get_logger(__name__)

TRANSITION_MESSAGES = {
    TaskStatus.IN_PROGRESS: "All subtasks must be in progress before setting the task to in progress.",
    TaskStatus.DONE: "All subtasks must be done before setting the task to done.",
    TaskStatus.TODO: "All subtasks must be in todo before setting the task to todo.",
}


@dataclass(frozen=True)
class StatusChanged:
    task: Task
    occurred_at: datetime = field(default_factory=datetime.utcnow)


StatusChangedListener = Callable[[StatusChanged], object]


class TransitionEngine:
    def __init__(
        self,
        store: TaskStore,
        hierarchy: HierarchyEvaluator,
        parents: ParentReassignment,
        listeners: Optional[Iterable[StatusChangedListener]] = None,
    ):
        self.store = store
        self.hierarchy = hierarchy
        self.parents = parents
        self.listeners: List[StatusChangedListener] = list(listeners or [])

    def check_transition(self, task: Task, status: TaskStatus) -> None:
        if not self.hierarchy.all_children_in(task, status):
            raise InvalidTransition(status, TRANSITION_MESSAGES[status])

    def apply_update(self, task: Task, fields: dict) -> Task:
        fields = dict(fields)
        requested = fields.get("status")

        self.store.lock(task)
        try:
            if requested is not None:
                requested = TaskStatus(requested)
                fields["status"] = requested
                self.check_transition(task, requested)
            if "parent_id" in fields:
                self.parents.validate(task, fields["parent_id"])
        except TaskhubError:
            self.store.rollback()
            raise

        previous = task.status
        updated = self.store.update(task, fields)

        if requested is not None:
            logger.info(
                "task_status_changed",
                task_id=updated.id,
                previous=previous.value,
                status=updated.status.value,
            )
        if requested == TaskStatus.IN_PROGRESS:
            self.publish(StatusChanged(task=updated))

        return updated

    def set_status(self, task: Task, status: TaskStatus) -> Task:
        return self.apply_update(task, {"status": status})

    def publish(self, event: StatusChanged) -> None:
        # The update is already committed; a failing listener must not undo it.
        for listener in self.listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("status_changed_listener_failed", task_id=event.task.id)

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Protocol

import structlog

from ..config import REMINDER_DELAY_SECONDS
from ..models import TaskStatus
from ..worker import send_task_reminder
from .transitions import StatusChanged

logger = structlog.get_logger(__name__)

REMINDER_DELAY = timedelta(seconds=REMINDER_DELAY_SECONDS)


@dataclass(frozen=True)
class ReminderJob:
    task_id: str
    delay: timedelta
    scheduled_for: datetime


class ReminderQueue(Protocol):
    def enqueue(self, task_id: str, delay: timedelta) -> None:
        ...


class CeleryReminderQueue:
    """Hands reminder jobs to the Celery worker with a countdown."""

    def enqueue(self, task_id: str, delay: timedelta) -> None:
        send_task_reminder.apply_async(args=[task_id], countdown=delay.total_seconds())


class ReminderScheduler:
    """StatusChanged listener that queues a one-shot reminder for in-progress tasks.

    Scheduling is fire-and-forget. There is no cancellation: if the task
    leaves in_progress before the delay runs out, the job still fires and
    reports whatever state the task is in by then.
    """

    def __init__(self, queue: ReminderQueue, delay: timedelta = REMINDER_DELAY):
        self.queue = queue
        self.delay = delay

    def __call__(self, event: StatusChanged) -> Optional[ReminderJob]:
        return self.handle_status_changed(event)

    def handle_status_changed(self, event: StatusChanged) -> Optional[ReminderJob]:
        if event.task.status != TaskStatus.IN_PROGRESS:
            return None

        job = ReminderJob(
            task_id=event.task.id,
            delay=self.delay,
            scheduled_for=event.occurred_at + self.delay,
        )
        self.queue.enqueue(job.task_id, job.delay)
        logger.info(
            "reminder_enqueued",
            task_id=job.task_id,
            scheduled_for=job.scheduled_for.isoformat(),
        )
        return job

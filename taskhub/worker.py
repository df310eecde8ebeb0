"""Celery worker for deferred reminder jobs.

Run with:
    celery -A taskhub.worker worker --loglevel=info
"""

from contextlib import AbstractContextManager
from typing import Callable, Optional

import structlog
from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from .config import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, CELERY_TASK_ALWAYS_EAGER
from .database import get_session
from .errors import OwnerNotFound
from .logging_config import setup_logging
from .services.notifications import ReminderMessage, SmtpReminderTransport, render_reminder
from .services.task_store import TaskStore

logger = structlog.get_logger(__name__)

celery_app = Celery("taskhub", broker=CELERY_BROKER_URL, backend=CELERY_RESULT_BACKEND)
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    task_always_eager=CELERY_TASK_ALWAYS_EAGER,
    task_acks_late=True,
)


@celery_setup_logging.connect
def _configure_worker_logging(**kwargs):
    setup_logging()


def deliver_reminder(
    task_id: str,
    session_factory: Callable[[], AbstractContextManager] = get_session,
    transport: Optional[SmtpReminderTransport] = None,
) -> ReminderMessage:
    """Load the task and its owner now and mail the owner a reminder.

    Raises TaskNotFound / OwnerNotFound when either has been deleted since the
    job was queued.
    """
    with session_factory() as session:
        task = TaskStore(session).get(task_id)
        if task.owner is None:
            raise OwnerNotFound(task_id)
        message = render_reminder(task, task.owner)

    (transport or SmtpReminderTransport()).send(message)
    logger.info("reminder_sent", task_id=task_id, to=message.to)
    return message


@celery_app.task(name="taskhub.send_task_reminder", ignore_result=True)
def send_task_reminder(task_id: str) -> None:
    deliver_reminder(task_id)

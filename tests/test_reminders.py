from datetime import datetime, timedelta
from unittest.mock import patch

from taskhub.models import Task, TaskStatus
from taskhub.services.reminders import CeleryReminderQueue, ReminderJob, ReminderScheduler
from taskhub.services.transitions import StatusChanged
from taskhub.worker import send_task_reminder

from .conftest import FakeReminderQueue


def _task(status):
    return Task(id="task-1", title="Ship it", owner_id="user-1", status=status)


def test_in_progress_event_enqueues_job_one_minute_out():
    queue = FakeReminderQueue()
    scheduler = ReminderScheduler(queue)
    occurred_at = datetime(2024, 5, 1, 12, 0, 0)

    job = scheduler(StatusChanged(task=_task(TaskStatus.IN_PROGRESS), occurred_at=occurred_at))

    assert job == ReminderJob(
        task_id="task-1",
        delay=timedelta(minutes=1),
        scheduled_for=datetime(2024, 5, 1, 12, 1, 0),
    )
    assert queue.jobs == [("task-1", timedelta(seconds=60))]


def test_event_for_task_no_longer_in_progress_is_ignored():
    queue = FakeReminderQueue()
    scheduler = ReminderScheduler(queue)

    assert scheduler.handle_status_changed(StatusChanged(task=_task(TaskStatus.DONE))) is None
    assert queue.jobs == []


def test_custom_delay():
    queue = FakeReminderQueue()
    scheduler = ReminderScheduler(queue, delay=timedelta(seconds=5))

    job = scheduler(StatusChanged(task=_task(TaskStatus.IN_PROGRESS)))

    assert job.delay == timedelta(seconds=5)
    assert queue.jobs == [("task-1", timedelta(seconds=5))]


def test_celery_queue_uses_countdown():
    with patch("taskhub.services.reminders.send_task_reminder") as task:
        CeleryReminderQueue().enqueue("task-1", timedelta(minutes=1))

    task.apply_async.assert_called_once_with(args=["task-1"], countdown=60.0)


def test_celery_task_delivers_by_id():
    with patch("taskhub.worker.deliver_reminder") as deliver:
        send_task_reminder("task-1")

    deliver.assert_called_once_with("task-1")

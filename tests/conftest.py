import os

# Keep the module-level engine and the Celery app away from real services.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")

from contextlib import contextmanager
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from taskhub.database import get_db
from taskhub.main import app
from taskhub.models import User
from taskhub.routers.auth import get_password_hash
from taskhub.routers.tasks import get_reminder_queue
from taskhub.services.reminders import ReminderScheduler
from taskhub.services.task_service import TaskService

PASSWORD = "secret-password"


class FakeReminderQueue:
    """Records enqueued reminder jobs instead of sending them to Celery."""

    def __init__(self):
        self.jobs = []

    def enqueue(self, task_id: str, delay: timedelta) -> None:
        self.jobs.append((task_id, delay))


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def session_factory(engine):
    @contextmanager
    def factory():
        with Session(engine) as session:
            yield session

    return factory


@pytest.fixture()
def queue():
    return FakeReminderQueue()


@pytest.fixture()
def service(session, queue):
    return TaskService(session, listeners=[ReminderScheduler(queue)])


@pytest.fixture()
def make_user(session):
    def _make(email="alice@example.com", name="Alice"):
        user = User(name=name, email=email, hashed_password=get_password_hash(PASSWORD))
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture()
def owner(make_user):
    return make_user()


@pytest.fixture()
def make_task(service, owner):
    def _make(title="Task", **fields):
        return service.create_task({"title": title, **fields}, owner_id=owner.id)

    return _make


@pytest.fixture()
def client(engine, queue):
    def override_get_db():
        with Session(engine) as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_reminder_queue] = lambda: queue
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers(client):
    def _register(email="alice@example.com", name="Alice"):
        response = client.post(
            "/api/register",
            json={"name": name, "email": email, "password": PASSWORD},
        )
        assert response.status_code == 201
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _register

from contextlib import contextmanager

from sqlalchemy.orm import sessionmaker
from sqlmodel import Session, SQLModel, create_engine

from .config import DATABASE_URL

# Registers the tables on SQLModel.metadata before create_tables runs
from .models import Task, User  # noqa: F401


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Requests and the reminder worker share one SQLite file across threads
        return {"connect_args": {"check_same_thread": False}}
    # Status updates hold a FOR UPDATE row lock; drop dead connections up front
    return {"pool_pre_ping": True}


engine = create_engine(DATABASE_URL, echo=False, **_engine_options(DATABASE_URL))

SessionLocal = sessionmaker(class_=Session, autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Request-scoped session for FastAPI dependencies."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_session():
    """Session for code running outside a request, such as the reminder job."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def create_tables():
    SQLModel.metadata.create_all(bind=engine)

from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import List
from uuid import uuid4

class User(SQLModel, table=True):
    """User model for authentication and task ownership."""
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationship to owned tasks
    tasks: List["Task"] = Relationship(back_populates="owner")

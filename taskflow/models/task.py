from datetime import date, datetime
from typing import Any, Dict, List, Optional
from enum import Enum
from uuid import uuid4
from sqlmodel import Field, SQLModel, Column, JSON

from .user import utcnow


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(SQLModel, table=True):
    """A task as persisted.

    ``priority``, ``due_date`` and ``tags`` are nullable: rows written by older
    clients keep those values inside ``extras`` instead. Read rows through
    ``services.normalizer`` rather than directly.
    """
    __tablename__ = "tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    owner_id: str = Field(foreign_key="users.id", index=True)
    title: str = Field(max_length=255)
    description: str = Field(default="", max_length=1000)
    status: str = Field(default=TaskStatus.PENDING.value, max_length=20)
    priority: Optional[str] = Field(default=None, max_length=20)
    due_date: Optional[date] = None
    tags: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    extras: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)

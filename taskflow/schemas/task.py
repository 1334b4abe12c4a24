from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from ..models import TaskPriority, TaskStatus

# Field names an update may carry; anything else in the body is ignored.
RECOGNIZED_FIELDS = ("title", "description", "status", "priority", "due_date", "tags", "extras")


def parse_due_date(value: Any) -> Optional[date]:
    """Parse a due date from a date, datetime or ISO string.

    Empty strings and None mean "no due date".

    Raises:
        ValueError: If the value is not a recognisable date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text)
        except ValueError:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    raise ValueError(f"invalid date: {value!r}")


class TaskPayload(BaseModel):
    """Fields shared by the create and update payloads.

    ``priority``, ``dueDate`` and ``tags`` may also arrive inside ``extras``;
    those nested values are checked here and coerced in place, and the
    normalizer decides which of the two wins.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = Field(None, alias="dueDate")
    tags: Optional[List[str]] = None
    extras: Optional[Dict[str, Any]] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("title must not be empty")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def empty_description(cls, v):
        return "" if v is None else v

    @field_validator("due_date", mode="before")
    @classmethod
    def coerce_due_date(cls, v):
        return parse_due_date(v)

    @model_validator(mode="after")
    def check_nested_reserved(self):
        if not self.extras:
            return self
        extras = dict(self.extras)
        if "priority" in extras and extras["priority"] is not None:
            try:
                extras["priority"] = TaskPriority(extras["priority"])
            except ValueError:
                raise ValueError("extras.priority must be one of low, medium, high") from None
        for key in ("dueDate", "due_date"):
            if key in extras:
                try:
                    extras[key] = parse_due_date(extras[key])
                except (TypeError, ValueError):
                    raise ValueError(f"extras.{key} must be an ISO date") from None
        if "tags" in extras and extras["tags"] is not None:
            tags = extras["tags"]
            if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
                raise ValueError("extras.tags must be a list of strings")
        self.extras = extras
        return self


class TaskCreate(TaskPayload):
    title: str = Field(..., max_length=255)
    description: str = Field("", max_length=1000)
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdate(TaskPayload):
    @model_validator(mode="after")
    def check_fields_present(self):
        # a null or empty extras alone changes nothing
        sent = self.model_fields_set - (set() if self.extras else {"extras"})
        if not sent:
            raise ValueError("No valid fields to update")
        for name in ("title", "status", "priority"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} may not be null")
        return self


class TaskRead(BaseModel):
    """A task as returned to clients, always in canonical shape."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    owner_id: str
    title: str
    description: str = ""
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date] = None
    tags: List[str] = Field(default_factory=list)
    extras: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class TaskStatistics(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    pending_tasks: int
    completion_rate: int


class InsightsRequest(BaseModel):
    tasks: List[Dict[str, Any]]


class InsightsResponse(BaseModel):
    insight: str
    statistics: TaskStatistics

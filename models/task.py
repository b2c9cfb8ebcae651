from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional, Literal, List
from datetime import datetime, date
import uuid

from utils.dates import utcnow, to_naive_utc

TaskStatusValue = Literal['todo', 'in-progress', 'review', 'completed']
TaskPriorityValue = Literal['low', 'medium', 'high', 'urgent']
RecurringTypeValue = Literal['daily', 'weekly', 'monthly', 'none']


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def _check_recurrence(is_recurring: bool, recurring_type: str):
    if is_recurring and recurring_type == 'none':
        raise ValueError("A recurring task needs a recurring_type other than 'none'")


class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)

    # State
    status: TaskStatusValue = 'todo'
    priority: TaskPriorityValue = 'medium'

    # Assignment
    assigned_to: Optional[str] = None # user_id
    tags: List[str] = Field(default_factory=list)

    # Timing
    due_date: Optional[datetime] = None

    # Recurrence
    is_recurring: bool = False
    recurring_type: RecurringTypeValue = 'none'
    recurring_end_date: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @field_validator('due_date', 'recurring_end_date')
    @classmethod
    def normalize_datetime(cls, v):
        return to_naive_utc(v)

    @field_validator('tags')
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)

    @model_validator(mode='after')
    def recurrence_needs_type(self):
        _check_recurrence(self.is_recurring, self.recurring_type)
        return self


class TaskCreate(TaskBase):
    """Payload for POST /api/tasks. created_by always comes from the principal."""
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class TaskModel(TaskBase):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_by: str # user_id (Set by backend, never changes)

    # Set once the due-date reminder went out; cleared when due_date moves
    reminder_sent: bool = False

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# Fields that may be sent as null in an update to clear them
NULLABLE_UPDATE_FIELDS = {'description', 'due_date', 'assigned_to', 'recurring_end_date'}


class TaskUpdate(BaseModel):
    """Partial update for PUT /api/tasks/{id}. Only fields present in the payload are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[TaskStatusValue] = None
    priority: Optional[TaskPriorityValue] = None
    assigned_to: Optional[str] = None
    tags: Optional[List[str]] = None
    due_date: Optional[datetime] = None
    is_recurring: Optional[bool] = None
    recurring_type: Optional[RecurringTypeValue] = None
    recurring_end_date: Optional[datetime] = None

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @field_validator('due_date', 'recurring_end_date')
    @classmethod
    def normalize_datetime(cls, v):
        return to_naive_utc(v)

    @field_validator('tags')
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)

    @model_validator(mode='after')
    def reject_null_required(self):
        for name in self.model_fields_set - NULLABLE_UPDATE_FIELDS:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class BatchTaskUpdate(BaseModel):
    """Values accepted by the batch update; keys are checked against BATCH_UPDATE_FIELDS first."""
    status: Optional[TaskStatusValue] = None
    priority: Optional[TaskPriorityValue] = None
    assigned_to: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode='after')
    def reject_null_enums(self):
        for name in ('status', 'priority'):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class TaskFilters(BaseModel):
    """Query-string filters for GET /api/tasks."""
    status: Optional[TaskStatusValue] = None
    priority: Optional[TaskPriorityValue] = None
    due_date: Optional[date] = None
    search: Optional[str] = None
    assigned_to: Optional[str] = None # user_id or "me"
    created_by: Optional[str] = None # user_id or "me"
    overdue: Optional[bool] = None

    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)
    sort_by: str = "created_at"
    order: Literal['asc', 'desc'] = 'desc'


def check_task_invariants(task: dict):
    """Raise ValueError if a merged task document breaks the recurrence invariant."""
    _check_recurrence(task.get("is_recurring", False), task.get("recurring_type", "none"))

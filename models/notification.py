from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, Literal
from datetime import datetime
import uuid

from utils.dates import utcnow

NotificationTypeValue = Literal['task-assigned', 'task-updated', 'task-completed', 'task-deleted', 'task-reminder']


class NotificationModel(BaseModel):
    """Stored in-app notification. Only is_read ever changes after creation."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    recipient: str  # Who receives the notification
    sender: Optional[str] = None  # None for system-generated reminders
    type: NotificationTypeValue

    message: str

    # Weak reference: the task may have been deleted since
    related_task: Optional[str] = None

    is_read: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(populate_by_name=True)

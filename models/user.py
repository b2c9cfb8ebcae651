from pydantic import BaseModel, Field, EmailStr, ConfigDict, StrictBool
from typing import Optional, Literal
from datetime import datetime
import uuid

from utils.dates import utcnow

RoleValue = Literal['admin', 'manager', 'user']


class UserModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: EmailStr
    name: str
    role: RoleValue = "user"
    active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    last_login: Optional[datetime] = None

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore"
    )


class RoleUpdate(BaseModel):
    role: RoleValue


class StatusUpdate(BaseModel):
    active: StrictBool

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .gallery_model import utcnow


class ContactStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"
    REPLIED = "replied"


class ContactIn(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    subject: str = Field(min_length=1)
    message: str = Field(min_length=1)


class ContactMessage(ContactIn):
    id: str
    status: ContactStatus = ContactStatus.UNREAD
    created_at: datetime = Field(default_factory=utcnow)


class ContactStatusUpdate(BaseModel):
    status: ContactStatus

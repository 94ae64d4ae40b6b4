from pydantic import Field, EmailStr, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum
from app.models.common import CamelModel, Pagination
from app.models.property import PropertyImage


class MessageType(str, Enum):
    INQUIRY = "inquiry"
    CALLBACK_REQUEST = "callback_request"
    GENERAL = "general"


class MessageBox(str, Enum):
    SENT = "sent"
    RECEIVED = "received"
    ALL = "all"


class ContactPreferences(CamelModel):
    phone: bool = False
    email: bool = False
    whatsapp: bool = False


class SenderContact(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    phone: Optional[str] = Field(None, pattern=r"^[0-9]{10}$")
    email: Optional[EmailStr] = None

    @field_validator('name', mode='before')
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class MessageCreate(CamelModel):
    property_id: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=5, max_length=100)
    content: str = Field(..., min_length=10, max_length=1000)
    message_type: MessageType = MessageType.INQUIRY
    contact_preferences: ContactPreferences = ContactPreferences()
    sender_contact: SenderContact = SenderContact()

    @field_validator('subject', 'content', mode='before')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class Participant(CamelModel):
    id: str
    name: str
    email: str


class MessageProperty(CamelModel):
    id: str
    title: str
    city: str
    area: str
    images: List[PropertyImage] = []


class StoredSenderContact(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class MessageView(CamelModel):
    id: str
    sender: Participant
    receiver: Participant
    property: MessageProperty
    subject: str
    content: str
    message_type: MessageType
    is_read: bool
    read_at: Optional[datetime] = None
    is_archived: bool
    contact_preferences: ContactPreferences
    sender_contact: StoredSenderContact
    created_at: datetime
    updated_at: datetime


class MessageCreatedResponse(CamelModel):
    message: str
    data: MessageView


class MessageResponse(CamelModel):
    message: MessageView


class MessageListResponse(CamelModel):
    messages: List[MessageView]
    pagination: Pagination
    unread_count: int


class UnreadCountResponse(CamelModel):
    unread_count: int

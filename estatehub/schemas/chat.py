from pydantic import Field, field_validator
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from estatehub.schemas.common import CamelModel
from estatehub.schemas.property import PropertySummary
from estatehub.schemas.user import UserSummary


class ChatCreate(CamelModel):
    property_id: UUID
    owner_id: UUID


class MessageCreate(CamelModel):
    text: str = Field(..., max_length=5000)

    @field_validator("text")
    @classmethod
    def text_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message text is required")
        return v.strip()


class MessageSender(CamelModel):
    id: UUID
    name: str
    avatar: Optional[str] = None


class ChatMessageResponse(CamelModel):
    id: int
    sender_id: UUID
    sender: Optional[MessageSender] = None
    text: str
    read: bool
    created_at: datetime


class ChatResponse(CamelModel):
    id: UUID
    property_id: UUID
    # None once the property has been deleted
    property: Optional[PropertySummary] = None
    participants: List[UserSummary]
    messages: List[ChatMessageResponse] = []
    last_message: Optional[str] = None
    last_message_time: datetime
    created_at: datetime
    updated_at: Optional[datetime] = None


class ChatEnvelope(CamelModel):
    success: bool = True
    chat: ChatResponse


class ChatCreateResponse(ChatEnvelope):
    is_new: bool


class ChatListResponse(CamelModel):
    success: bool = True
    chats: List[ChatResponse]

from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from estatehub.core.database import Base
from estatehub.models.base import BaseModel


def pair_key(user_a, user_b) -> str:
    """Order-independent key for a participant pair."""
    return ":".join(sorted((str(user_a), str(user_b))))


class Chat(BaseModel):
    __tablename__ = "chats"
    __table_args__ = (
        UniqueConstraint("property_id", "participant_key", name="uq_chats_property_participants"),
    )

    # Not a foreign key: chats outlive a deleted property.
    property_id = Column(Uuid, nullable=False, index=True)

    # Participants in the order given at creation; participant_key is their sorted pair.
    user_a_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    user_b_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    participant_key = Column(String(80), nullable=False)

    last_message = Column(Text, nullable=True)
    last_message_time = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Defined before the `property` relationship, which shadows the builtin
    # for the rest of the class body.
    @property
    def participants(self):
        return [self.user_a, self.user_b]

    @property
    def participant_ids(self):
        return [self.user_a_id, self.user_b_id]

    def has_participant(self, user_id) -> bool:
        return user_id in (self.user_a_id, self.user_b_id)

    property = relationship(
        "Property",
        primaryjoin="foreign(Chat.property_id) == Property.id",
        viewonly=True,
        lazy="joined",
    )
    user_a = relationship("User", foreign_keys=[user_a_id], lazy="joined")
    user_b = relationship("User", foreign_keys=[user_b_id], lazy="joined")
    messages = relationship(
        "ChatMessage",
        back_populates="chat",
        order_by="ChatMessage.id",
        cascade="all, delete-orphan",
    )


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    # Integer key so insertion order is the message order.
    id = Column(Integer, primary_key=True, autoincrement=True)
    chat_id = Column(Uuid, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    text = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    chat = relationship("Chat", back_populates="messages")
    sender = relationship("User", lazy="joined")

"""
Chat threads between a prospective buyer and a lister, one per
(property, participant pair).

The pair is matched as a set: ``participant_key`` is the sorted pair of user
ids, and ``(property_id, participant_key)`` is unique in storage, so two
first-contact requests racing each other still end up on a single thread.
"""

import logging
from datetime import datetime
from typing import List, Tuple
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from estatehub.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from estatehub.models.chat import Chat, ChatMessage, pair_key
from estatehub.models.property import Property
from estatehub.models.user import User
from estatehub.services import property_stats

logger = logging.getLogger(__name__)


def find_thread(db: Session, property_id, user_a, user_b):
    return db.scalar(
        select(Chat).where(
            Chat.property_id == property_id,
            Chat.participant_key == pair_key(user_a, user_b),
        )
    )


def _get_chat(db: Session, chat_id) -> Chat:
    chat = db.get(Chat, chat_id)
    if chat is None:
        raise NotFoundError("Chat not found")
    return chat


def get_thread_for_participant(db: Session, chat_id, user_id) -> Chat:
    chat = _get_chat(db, chat_id)
    if not chat.has_participant(user_id):
        raise ForbiddenError("Not authorized to view this chat")
    return chat


def create_or_get_thread(db: Session, property_id, actor_id, other_id) -> Tuple[Chat, bool]:
    """
    Return ``(chat, is_new)`` for the thread between ``actor_id`` and
    ``other_id`` about ``property_id``, creating it on first contact.
    """
    if db.get(Property, property_id) is None:
        raise NotFoundError("Property not found")
    if actor_id == other_id:
        raise ValidationError("Cannot start a chat with yourself")
    if db.get(User, other_id) is None:
        raise NotFoundError("User not found")

    chat = find_thread(db, property_id, actor_id, other_id)
    if chat is not None:
        return chat, False

    chat = Chat(
        property_id=property_id,
        user_a_id=actor_id,
        user_b_id=other_id,
        participant_key=pair_key(actor_id, other_id),
        last_message_time=datetime.utcnow(),
    )
    db.add(chat)
    try:
        db.commit()
    except IntegrityError:
        # Lost the race against a concurrent first contact; use its thread.
        db.rollback()
        chat = find_thread(db, property_id, actor_id, other_id)
        if chat is None:
            raise
        return chat, False

    db.refresh(chat)
    logger.info("Chat %s opened on property %s", chat.id, property_id)
    return chat, True


def append_message(db: Session, chat_id, sender_id, text: str) -> Chat:
    chat = _get_chat(db, chat_id)
    if not chat.has_participant(sender_id):
        raise ForbiddenError("Not authorized")

    now = datetime.utcnow()
    # Writing the chat row first takes its row lock, so appends on one thread
    # commit one at a time and the last one to commit owns last_message.
    db.execute(
        update(Chat)
        .where(Chat.id == chat_id)
        .values(last_message=text, last_message_time=now)
        .execution_options(synchronize_session=False)
    )
    db.add(ChatMessage(chat_id=chat_id, sender_id=sender_id, text=text, read=False, created_at=now))
    # Every message counts as an inquiry, not only the first.
    property_stats.record_inquiry(db, chat.property_id)
    db.commit()

    db.refresh(chat)
    return chat


def mark_read(db: Session, chat_id, reader_id) -> int:
    """Mark every message not sent by ``reader_id`` as read. Returns the number changed."""
    chat = _get_chat(db, chat_id)
    if not chat.has_participant(reader_id):
        raise ForbiddenError("Not authorized")

    result = db.execute(
        update(ChatMessage)
        .where(
            ChatMessage.chat_id == chat_id,
            ChatMessage.sender_id != reader_id,
            ChatMessage.read.is_(False),
        )
        .values(read=True)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount


def list_threads_for_user(db: Session, user_id) -> List[Chat]:
    stmt = (
        select(Chat)
        .where(or_(Chat.user_a_id == user_id, Chat.user_b_id == user_id))
        .order_by(Chat.last_message_time.desc())
    )
    return list(db.scalars(stmt).unique())

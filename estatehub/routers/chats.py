from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from estatehub.core.database import get_db
from estatehub.models.user import User
from estatehub.schemas.chat import (
    ChatCreate, MessageCreate, ChatEnvelope, ChatCreateResponse, ChatListResponse,
)
from estatehub.schemas.common import MessageResponse
from estatehub.api.deps import get_current_active_user
from estatehub.services import chat_threads
from uuid import UUID

router = APIRouter(prefix="/chats", tags=["Chats"])


@router.get("", response_model=ChatListResponse)
async def list_chats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """All threads the current user takes part in, most recent activity first."""
    chats = chat_threads.list_threads_for_user(db, current_user.id)
    return {"success": True, "chats": chats}


@router.get("/{chat_id}", response_model=ChatEnvelope)
async def get_chat(
    chat_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    chat = chat_threads.get_thread_for_participant(db, chat_id, current_user.id)
    return {"success": True, "chat": chat}


@router.post(
    "",
    response_model=ChatCreateResponse,
    responses={status.HTTP_201_CREATED: {"model": ChatCreateResponse}},
)
async def create_chat(
    payload: ChatCreate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """
    Open the thread with the lister about a property, or return the existing
    one. Responds 201 when the thread was just created, 200 otherwise.
    """
    chat, is_new = chat_threads.create_or_get_thread(
        db, payload.property_id, current_user.id, payload.owner_id
    )
    response.status_code = status.HTTP_201_CREATED if is_new else status.HTTP_200_OK
    return {"success": True, "chat": chat, "is_new": is_new}


@router.post("/{chat_id}/messages", response_model=ChatEnvelope)
async def send_message(
    chat_id: UUID,
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    chat = chat_threads.append_message(db, chat_id, current_user.id, payload.text)
    return {"success": True, "chat": chat}


@router.put("/{chat_id}/read", response_model=MessageResponse)
async def mark_as_read(
    chat_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    chat_threads.mark_read(db, chat_id, current_user.id)
    return {"success": True, "message": "Messages marked as read"}

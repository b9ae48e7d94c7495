# pyright: reportMissingTypeStubs=false
"""
Conversations API endpoints for internal chat.

The caller acts through the professional profile linked to their login.
Posting a message goes through the same outbox path as the websocket
send_message event.
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, StringConstraints
from sqlalchemy.orm import Session

from api.responses import ConversationResponse, MessageResponse, SuccessResponse
from auth.dependencies import (
    TenantContext, get_current_professional, get_professional_for_user, require_active_subscription,
)
from core.constants import MAX_MESSAGE_LENGTH, MAX_STRING_LENGTH
from core.database import get_db
from core.realtime import RealtimeBroadcaster, get_broadcaster
from models import Professional
from services.conversation_service import ConversationService
from services.outbox_service import OutboxDispatcher

logger = logging.getLogger(__name__)

router = APIRouter()


class DirectConversationRequest(BaseModel):
    recipient_id: int


class GroupConversationRequest(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_STRING_LENGTH)]
    participants: List[int] = Field(default_factory=list)


class MessageCreateRequest(BaseModel):
    content: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)


class MarkReadResponse(BaseModel):
    updated: int


@router.get("/me", summary="List my conversations", response_model=List[ConversationResponse])
async def list_my_conversations(
    professional: Professional = Depends(get_current_professional),
    db: Session = Depends(get_db)
) -> List[ConversationResponse]:
    rows = ConversationService.list_for_professional(db, professional.organization_id, professional.id)
    return [ConversationResponse(**row) for row in rows]


@router.post("/direct", summary="Get or create direct conversation", response_model=ConversationResponse)
async def get_or_create_direct_conversation(
    request: DirectConversationRequest,
    ctx: TenantContext = Depends(require_active_subscription),
    db: Session = Depends(get_db)
) -> ConversationResponse:
    professional = get_professional_for_user(db, ctx)
    conversation, _ = ConversationService.get_or_create_direct(
        db, ctx.organization_id, professional, request.recipient_id
    )
    return ConversationResponse(**ConversationService.serialize_conversation(conversation))


@router.post(
    "/group",
    summary="Create group conversation",
    status_code=status.HTTP_201_CREATED,
    response_model=ConversationResponse,
)
async def create_group_conversation(
    request: GroupConversationRequest,
    ctx: TenantContext = Depends(require_active_subscription),
    db: Session = Depends(get_db)
) -> ConversationResponse:
    professional = get_professional_for_user(db, ctx)
    conversation = ConversationService.create_group(
        db, ctx.organization_id, professional, request.name, request.participants
    )
    return ConversationResponse(**ConversationService.serialize_conversation(conversation))


@router.get("/{conversation_id}/messages", summary="List messages", response_model=List[MessageResponse])
async def list_messages(
    conversation_id: int,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    professional: Professional = Depends(get_current_professional),
    db: Session = Depends(get_db)
) -> List[MessageResponse]:
    conversation = ConversationService.get_conversation_for_member(
        db, professional.organization_id, conversation_id, professional.id
    )
    messages = ConversationService.list_messages(db, conversation, limit=limit)
    return [MessageResponse.model_validate(m) for m in messages]


@router.post(
    "/{conversation_id}/messages",
    summary="Send message",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
)
async def send_message(
    conversation_id: int,
    request: MessageCreateRequest,
    ctx: TenantContext = Depends(require_active_subscription),
    broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
    db: Session = Depends(get_db)
) -> MessageResponse:
    """Persist a message, then publish receive_message to every member's room."""
    professional = get_professional_for_user(db, ctx)
    conversation = ConversationService.get_conversation_for_member(
        db, ctx.organization_id, conversation_id, professional.id
    )
    message, event = ConversationService.post_message(db, conversation, professional, request.content)
    await OutboxDispatcher.publish_event(db, broadcaster, event)
    return MessageResponse.model_validate(message)


@router.post("/{conversation_id}/read", summary="Mark conversation read", response_model=MarkReadResponse)
async def mark_conversation_read(
    conversation_id: int,
    professional: Professional = Depends(get_current_professional),
    db: Session = Depends(get_db)
) -> MarkReadResponse:
    conversation = ConversationService.get_conversation_for_member(
        db, professional.organization_id, conversation_id, professional.id
    )
    updated = ConversationService.mark_read(db, conversation, professional.id)
    return MarkReadResponse(updated=updated)


@router.delete("/{conversation_id}", summary="Delete conversation", response_model=SuccessResponse)
async def delete_conversation(
    conversation_id: int,
    ctx: TenantContext = Depends(require_active_subscription),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    professional = get_professional_for_user(db, ctx)
    conversation = ConversationService.get_conversation_for_member(
        db, ctx.organization_id, conversation_id, professional.id
    )
    ConversationService.delete_conversation(db, conversation)
    return SuccessResponse()

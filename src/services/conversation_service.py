"""
Conversation service for internal chat.

Messages are written together with an outbox event in one transaction; the
caller publishes the event afterwards (see services.outbox_service). Every
lookup is scoped by organization and by conversation membership, so a
conversation the caller is not part of is reported as not found.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.constants import MAX_MESSAGE_LENGTH
from models import Conversation, ConversationMember, Message, OutboxEvent, Professional

logger = logging.getLogger(__name__)

RECEIVE_MESSAGE_EVENT = "receive_message"


def direct_key(first_id: int, second_id: int) -> str:
    """Order-independent key of a direct thread between two professionals."""
    low, high = sorted((first_id, second_id))
    return f"{low}:{high}"


def message_to_dict(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "sender_id": message.sender_id,
        "content": message.content,
        "read": message.read,
        "created_at": message.created_at.isoformat() if message.created_at else None,
    }


class ConversationService:
    """Service class for chat conversations and messages."""

    @staticmethod
    def _get_professionals(
        db: Session,
        organization_id: uuid.UUID,
        professional_ids: Sequence[int]
    ) -> List[Professional]:
        """
        Load professionals of the organization.

        Raises:
            HTTPException: 404 if any id is not a professional of the organization
        """
        wanted = set(professional_ids)
        if not wanted:
            return []
        professionals = db.query(Professional).filter(
            Professional.organization_id == organization_id,
            Professional.id.in_(wanted)
        ).all()
        if len(professionals) != len(wanted):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Professional not found"
            )
        return professionals

    @staticmethod
    def get_conversation_for_member(
        db: Session,
        organization_id: uuid.UUID,
        conversation_id: int,
        professional_id: int
    ) -> Conversation:
        """
        Get a conversation the professional is a member of.

        Raises:
            HTTPException: 404 if missing, in another organization, or not a member
        """
        conversation = db.query(Conversation).join(
            ConversationMember, ConversationMember.conversation_id == Conversation.id
        ).filter(
            Conversation.id == conversation_id,
            Conversation.organization_id == organization_id,
            ConversationMember.professional_id == professional_id
        ).first()
        if conversation is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Conversation not found"
            )
        return conversation

    @staticmethod
    def serialize_conversation(conversation: Conversation, unread_count: int = 0) -> Dict[str, Any]:
        return {
            "id": conversation.id,
            "is_group": conversation.is_group,
            "name": conversation.name,
            "created_by": conversation.created_by,
            "member_ids": conversation.member_ids,
            "unread_count": unread_count,
            "updated_at": conversation.updated_at.isoformat() if conversation.updated_at else None,
        }

    @staticmethod
    def list_for_professional(
        db: Session,
        organization_id: uuid.UUID,
        professional_id: int
    ) -> List[Dict[str, Any]]:
        """Conversations the professional belongs to, most recently updated first."""
        conversations = db.query(Conversation).join(
            ConversationMember, ConversationMember.conversation_id == Conversation.id
        ).filter(
            Conversation.organization_id == organization_id,
            ConversationMember.professional_id == professional_id
        ).order_by(Conversation.updated_at.desc(), Conversation.id.desc()).all()

        if not conversations:
            return []

        # Unread = messages from others not yet flagged read
        unread_rows = db.query(Message.conversation_id, func.count(Message.id)).filter(
            Message.conversation_id.in_([c.id for c in conversations]),
            Message.read.is_(False),
            or_(Message.sender_id.is_(None), Message.sender_id != professional_id)
        ).group_by(Message.conversation_id).all()
        unread: Dict[int, int] = {conversation_id: count for conversation_id, count in unread_rows}

        return [
            ConversationService.serialize_conversation(c, unread.get(c.id, 0))
            for c in conversations
        ]

    @staticmethod
    def _find_direct(db: Session, organization_id: uuid.UUID, key: str) -> Optional[Conversation]:
        return db.query(Conversation).filter(
            Conversation.organization_id == organization_id,
            Conversation.direct_key == key
        ).first()

    @staticmethod
    def get_or_create_direct(
        db: Session,
        organization_id: uuid.UUID,
        professional: Professional,
        recipient_id: int
    ) -> Tuple[Conversation, bool]:
        """
        Get the direct conversation between two professionals, creating it if needed.

        Returns:
            (conversation, created)

        Raises:
            HTTPException: 400 for a conversation with oneself, 404 if the
                recipient is not in the organization
        """
        if recipient_id == professional.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot start a conversation with yourself"
            )
        ConversationService._get_professionals(db, organization_id, [recipient_id])

        pair = sorted([professional.id, recipient_id])
        key = direct_key(*pair)
        existing = ConversationService._find_direct(db, organization_id, key)
        if existing is not None:
            return existing, False

        conversation = Conversation(
            organization_id=organization_id,
            is_group=False,
            direct_key=key,
            created_by=professional.id,
        )
        conversation.members = [ConversationMember(professional_id=pid) for pid in pair]
        db.add(conversation)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent request created the same pair first
            db.rollback()
            existing = ConversationService._find_direct(db, organization_id, key)
            if existing is None:
                raise
            return existing, False
        db.refresh(conversation)

        logger.info(f"Created direct conversation {conversation.id} between professionals {pair}")
        return conversation, True

    @staticmethod
    def create_group(
        db: Session,
        organization_id: uuid.UUID,
        professional: Professional,
        name: str,
        participants: Sequence[int]
    ) -> Conversation:
        """
        Create a named group. The creator is always a member.

        Raises:
            HTTPException: 404 if a participant is not in the organization
        """
        member_ids = set(participants)
        member_ids.add(professional.id)
        ConversationService._get_professionals(db, organization_id, sorted(member_ids))

        conversation = Conversation(
            organization_id=organization_id,
            is_group=True,
            name=name,
            created_by=professional.id,
        )
        conversation.members = [ConversationMember(professional_id=pid) for pid in sorted(member_ids)]
        db.add(conversation)
        db.commit()
        db.refresh(conversation)

        logger.info(f"Created group conversation {conversation.id} with {len(member_ids)} members")
        return conversation

    @staticmethod
    def list_messages(
        db: Session,
        conversation: Conversation,
        limit: Optional[int] = None
    ) -> List[Message]:
        """Messages of a conversation ordered by creation time, then id."""
        query = db.query(Message).filter(
            Message.conversation_id == conversation.id,
            Message.organization_id == conversation.organization_id
        ).order_by(Message.created_at, Message.id)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def recipient_user_ids(db: Session, conversation: Conversation) -> List[str]:
        """Auth user ids of every member that has a linked login."""
        rows = db.query(Professional.user_id).join(
            ConversationMember, ConversationMember.professional_id == Professional.id
        ).filter(
            ConversationMember.conversation_id == conversation.id,
            Professional.user_id.isnot(None)
        ).all()
        return sorted({user_id for (user_id,) in rows})

    @staticmethod
    def post_message(
        db: Session,
        conversation: Conversation,
        sender: Professional,
        content: str
    ) -> Tuple[Message, OutboxEvent]:
        """
        Persist a message and its outbox event in one transaction.

        The event payload carries the serialized message and the user ids of
        all members (sender included) so it can be published without
        re-reading the conversation.

        Raises:
            HTTPException: 400 for empty or oversized content
        """
        text = (content or "").strip()
        if not text:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Message content is required"
            )
        if len(text) > MAX_MESSAGE_LENGTH:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Message content exceeds {MAX_MESSAGE_LENGTH} characters"
            )

        try:
            message = Message(
                organization_id=conversation.organization_id,
                conversation_id=conversation.id,
                sender_id=sender.id,
                content=text,
                read=False,
            )
            db.add(message)
            db.flush()

            event = OutboxEvent(
                organization_id=conversation.organization_id,
                event_type=RECEIVE_MESSAGE_EVENT,
                aggregate_id=message.id,
                payload={
                    "data": message_to_dict(message),
                    "recipients": ConversationService.recipient_user_ids(db, conversation),
                },
            )
            db.add(event)

            # Bump the conversation so it sorts first in listings
            conversation.updated_at = message.created_at
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(message)
        db.refresh(event)
        logger.debug(f"Stored message {message.id} in conversation {conversation.id} (outbox event {event.id})")
        return message, event

    @staticmethod
    def mark_read(db: Session, conversation: Conversation, professional_id: int) -> int:
        """Flag messages from other members as read. Returns the number updated."""
        updated = db.query(Message).filter(
            Message.conversation_id == conversation.id,
            Message.read.is_(False),
            or_(Message.sender_id.is_(None), Message.sender_id != professional_id)
        ).update({Message.read: True}, synchronize_session=False)
        db.commit()
        return updated

    @staticmethod
    def delete_conversation(db: Session, conversation: Conversation) -> None:
        conversation_id = conversation.id
        db.delete(conversation)
        db.commit()
        logger.info(f"Deleted conversation {conversation_id}")

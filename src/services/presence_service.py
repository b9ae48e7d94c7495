"""Chat presence (online/busy/offline) for professionals."""

import logging
from typing import Any, Dict

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from core.constants import CHAT_STATUSES
from models import Professional

logger = logging.getLogger(__name__)

STATUS_CHANGE_EVENT = "status_change"


class PresenceService:

    @staticmethod
    def update_status(db: Session, professional: Professional, chat_status: str) -> Dict[str, Any]:
        """
        Persist a professional's chat status and build the status_change event.

        Raises:
            HTTPException: 400 if the status is not a known presence value
        """
        if chat_status not in CHAT_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status: {chat_status}"
            )

        professional.chat_status = chat_status
        db.commit()

        logger.debug(f"Professional {professional.id} is now {chat_status}")
        return {
            "event": STATUS_CHANGE_EVENT,
            "data": {
                "professional_id": professional.id,
                "user_id": professional.user_id,
                "status": chat_status,
            },
        }

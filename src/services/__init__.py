"""
Services package for shared business logic.

This package contains service classes that encapsulate business logic
shared across multiple API endpoints, the websocket relay and the
background scheduler.
"""

from .appointment_service import AppointmentService
from .blocked_day_service import BlockedDayService
from .holiday_service import HolidayService
from .conversation_service import ConversationService
from .presence_service import PresenceService
from .outbox_service import OutboxDispatcher
from .organization_service import OrganizationService
from .cleanup_service import CleanupService

__all__ = [
    "AppointmentService",
    "BlockedDayService",
    "HolidayService",
    "ConversationService",
    "PresenceService",
    "OutboxDispatcher",
    "OrganizationService",
    "CleanupService",
]

# Package initialization
# Import all models to ensure relationships are properly established
from .organization import Organization
from .member import Member
from .professional import Professional
from .patient import Patient
from .appointment import Appointment, AppointmentStatus
from .blocked_day import BlockedDay
from .holiday import Holiday
from .conversation import Conversation, ConversationMember
from .message import Message
from .outbox_event import OutboxEvent

__all__ = [
    "Organization",
    "Member",
    "Professional",
    "Patient",
    "Appointment",
    "AppointmentStatus",
    "BlockedDay",
    "Holiday",
    "Conversation",
    "ConversationMember",
    "Message",
    "OutboxEvent",
]

"""Application constants and configuration values."""

from core.config import FRONTEND_URL

# Database field lengths
MAX_STRING_LENGTH = 255
MAX_REASON_LENGTH = 500
MAX_MESSAGE_LENGTH = 4000

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# CORS origins for development and production
_CORS_ORIGINS_RAW = [
    "http://localhost:5173",      # React dev server (Vite)
    "http://localhost:3000",
    FRONTEND_URL,
]

# Filter out None values and empty strings to avoid CORS errors
CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# Tenant header
ORGANIZATION_HEADER = "x-organization-id"

# Scheduling
DEFAULT_APPOINTMENT_DURATION_MINUTES = 30
# Appointments in these statuses never count as blocked-day conflicts
NON_BLOCKING_APPOINTMENT_STATUSES = ("cancelado", "faltou")

# Holidays are seeded per organization for these years only (not auto-extended)
HOLIDAY_SEED_YEARS = (2026, 2027)

# Chat presence values
CHAT_STATUSES = ("online", "busy", "offline")

# Member roles allowed to manage organization-wide settings (holidays)
MANAGER_ROLES = ("owner", "admin")

# Subscription gating (status values are maintained by the Stripe webhook)
INACTIVE_SUBSCRIPTION_STATUSES = ("canceled", "unpaid", "incomplete_expired")
ACTIVE_SUBSCRIPTION_STATUSES = ("active", "manual_override")

# Tenant cleanup
GHOST_ORGANIZATION_AGE_DAYS = 30  # Organizations older than this without a subscription...
GHOST_ORGANIZATION_MAX_PATIENTS = 2  # ...and fewer than this many patients are deleted
EXPIRED_ORGANIZATION_RETENTION_DAYS = 90  # Canceled organizations are kept this long
CLEANUP_SCHEDULER_HOUR = 3  # 03:00 clinic time

# WebSocket close codes
WS_CLOSE_UNAUTHORIZED = 4001
WS_CLOSE_FORBIDDEN = 4003

"""Complaint status and priority vocabularies."""

PENDING = "pending"
IN_PROGRESS = "in-progress"
RESOLVED = "resolved"
CLOSED = "closed"

STATUSES = (PENDING, IN_PROGRESS, RESOLVED, CLOSED)

# Entering one of these stamps resolved_at
TERMINAL_STATUSES = frozenset({RESOLVED, CLOSED})

LOW = "low"
MEDIUM = "medium"
HIGH = "high"

PRIORITIES = (LOW, MEDIUM, HIGH)
DEFAULT_PRIORITY = MEDIUM

# Query-string value meaning "no filter"
ALL = "all"

ROLE_USER = "user"
ROLE_ADMIN = "admin"

ROLES = (ROLE_USER, ROLE_ADMIN)

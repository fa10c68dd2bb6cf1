"""Prometheus metrics."""

from prometheus_client import Counter

# Complaint metrics
complaints_submitted = Counter(
    "complaints_submitted_total",
    "Total complaints submitted",
    ["priority"],
)

complaint_number_conflicts = Counter(
    "complaint_number_conflicts_total",
    "Complaint number collisions detected on insert",
)

status_transitions = Counter(
    "complaint_status_transitions_total",
    "Total complaint status transitions",
    ["old_status", "new_status"],
)

# Attachment metrics
attachments_stored = Counter(
    "complaint_attachments_stored_total",
    "Total attachments stored",
    ["backend"],
)

# Auth metrics
login_attempts = Counter(
    "complaint_login_attempts_total",
    "Total login attempts",
    ["outcome"],
)

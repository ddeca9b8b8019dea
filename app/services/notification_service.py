"""
Notification Service
Hook called by the workflows at each state transition

Delivery (email, SMS, push) lives outside this service. The default
notifier only records a structured log event.
"""

from typing import Any, Dict, List, Protocol

import structlog


# Workflow events
PROFILE_VERIFIED = "profile.verified"
PROFILE_HOLD = "profile.hold"
PROFILE_REJECTED = "profile.rejected"
PROFILE_BATCH_VERIFIED = "profile.batch_verified"
APPLICATION_APPROVED = "application.approved"
APPLICATION_HOLD = "application.hold"
APPLICATION_REJECTED = "application.rejected"
APPLICATION_BATCH_APPROVED = "application.batch_approved"
APPLICATION_FORWARDED = "application.forwarded"
APPLICATION_FLAGGED = "application.flagged"
APPLICATION_ADMIN_REJECTED = "application.admin_rejected"
APPLICATION_BULK_FORWARDED = "application.bulk_forwarded"
JOB_POSTING_APPROVED = "job_posting.approved"
JOB_POSTING_REJECTED = "job_posting.rejected"
JOB_POSTING_MODIFICATIONS_REQUESTED = "job_posting.modifications_requested"
JOB_POSTING_CLOSED = "job_posting.closed"


class Notifier(Protocol):
    async def notify(self, event: str, recipient_ref: str, payload: Dict[str, Any]) -> None:
        ...


class LoggingNotifier:
    """Writes each notification as a structlog event."""

    def __init__(self):
        self.logger = structlog.get_logger("notifications")

    async def notify(self, event: str, recipient_ref: str, payload: Dict[str, Any]) -> None:
        self.logger.info("notification", event=event, recipient=recipient_ref, **payload)


class RecordingNotifier:
    """Keeps notifications in memory; used by tests and dry runs."""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []

    async def notify(self, event: str, recipient_ref: str, payload: Dict[str, Any]) -> None:
        self.sent.append({"event": event, "recipient": recipient_ref, "payload": payload})

    def events(self) -> List[str]:
        return [item["event"] for item in self.sent]


def student_ref(student) -> str:
    return f"student:{student.id}"


def organization_ref(org_id) -> str:
    return f"organization:{org_id}"

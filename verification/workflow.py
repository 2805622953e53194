"""
Value types shared by the task queue, the transition engine and the notification dispatcher.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class TaskKind(str, Enum):
    ACCOUNT_VERIFICATION = "ACCOUNT_VERIFICATION"
    CHANGE_REQUEST = "CHANGE_REQUEST"
    PAYMENT = "PAYMENT"
    FEEDBACK = "FEEDBACK"

    @classmethod
    def parse(cls, value: str) -> "TaskKind":
        return cls(value.upper())


class Decision(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    # Feedback only: NEW -> IN_PROGRESS
    PROCESS = "PROCESS"


# Filter value meaning "every kind"
ALL_KINDS = "ALL"


@dataclass(frozen=True)
class TaskDocument:
    type: str
    url: str


@dataclass(frozen=True)
class PendingTask:
    """A unit of administrator work, derived from a source record on every read."""

    kind: TaskKind
    source_id: int
    account_id: int
    title: str
    description: str
    occurred_at: datetime
    documents: tuple = ()
    national_id: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.kind.value}-{self.source_id}"


@dataclass(frozen=True)
class TransitionEvent:
    task_kind: TaskKind
    source_id: int
    decision: Decision
    recipient_account_id: int
    note: Optional[str] = None
    # Kind-specific values used by the message templates (field name, category, ...)
    context: dict = field(default_factory=dict)


@dataclass(frozen=True)
class TransitionOutcome:
    task_kind: TaskKind
    source_id: int
    decision: Decision
    status: str
    recipient_account_id: int
    notification_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "taskKind": self.task_kind.value,
            "sourceId": self.source_id,
            "decision": self.decision.value,
            "status": self.status,
            "recipientAccountId": self.recipient_account_id,
            "notificationId": self.notification_id,
        }


@dataclass(frozen=True)
class BatchItemResult:
    source_id: int
    success: bool
    outcome: Optional[TransitionOutcome] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"sourceId": self.source_id, "success": self.success}
        if self.success:
            data["outcome"] = self.outcome.to_dict()
        else:
            data["error"] = {"code": self.error_code, "message": self.error_message}
        return data

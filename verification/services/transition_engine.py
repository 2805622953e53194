"""
Transition engine: the only writer of account verification flags and of task statuses.

Every command runs inside one database transaction. The state check and the
write are a single conditional UPDATE (compare-and-swap on the current status),
so when two administrators decide the same task the first one wins and the
second gets InvalidStateError. No side effect of the losing command is kept.
"""

import logging
from typing import Optional, Union

from django.db import transaction
from django.utils import timezone

from verification import field_mapping
from verification.exceptions import (
    InvalidStateError,
    MissingReasonError,
    TaskNotFound,
    TransitionError,
)
from verification.models import ChangeRequest, FeedbackItem, PaymentRecord
from verification.services.notification_dispatcher import NotificationDispatcher
from verification.services.stores import Stores
from verification.workflow import Decision, TaskKind, TransitionEvent, TransitionOutcome

logger = logging.getLogger(__name__)

ACCOUNT_VERIFIED = "VERIFIED"
ACCOUNT_RETURNED = "RETURNED"

# Feedback has no rejection path: (current status, decision) -> next status
FEEDBACK_TRANSITIONS = {
    (FeedbackItem.STATUS_NEW, Decision.PROCESS): FeedbackItem.STATUS_IN_PROGRESS,
    (FeedbackItem.STATUS_NEW, Decision.APPROVE): FeedbackItem.STATUS_RESOLVED,
    (FeedbackItem.STATUS_IN_PROGRESS, Decision.APPROVE): FeedbackItem.STATUS_RESOLVED,
}


class TransitionEngine:
    def __init__(
        self,
        stores: Optional[Stores] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self.stores = stores or Stores()
        self.dispatcher = dispatcher or NotificationDispatcher(self.stores)
        self._handlers = {
            TaskKind.ACCOUNT_VERIFICATION: self._decide_account,
            TaskKind.CHANGE_REQUEST: self._decide_change_request,
            TaskKind.PAYMENT: self._decide_payment,
            TaskKind.FEEDBACK: self._decide_feedback,
        }

    def apply(
        self,
        kind: Union[TaskKind, str],
        source_id: int,
        decision: Union[Decision, str],
        note: Optional[str] = None,
        actor_role: Optional[str] = None,
    ) -> TransitionOutcome:
        """
        Apply one administrator decision to one task.

        Returns the TransitionOutcome on success; raises TaskNotFound,
        InvalidStateError, MappingError or MissingReasonError otherwise.
        Exactly one notification is created per successful call.
        """
        kind = self._parse_kind(kind)
        decision = self._parse_decision(decision)
        note = (note or "").strip() or None

        try:
            if kind == TaskKind.ACCOUNT_VERIFICATION and decision == Decision.REJECT and not note:
                raise MissingReasonError("A reason is required to reject an account verification")

            with transaction.atomic():
                status, event = self._handlers[kind](source_id, decision, note)
                notification = self.dispatcher.on_transition(event)
        except TransitionError as e:
            logger.warning(
                f"Rejected {decision.value} on {kind.value} #{source_id} "
                f"by {actor_role or 'unknown role'}: {e.code} - {e.message}"
            )
            raise

        logger.info(
            f"{kind.value} #{source_id} -> {status} ({decision.value} by {actor_role or 'unknown role'})"
        )
        # Delivery waits for the outermost commit
        transaction.on_commit(lambda: self.dispatcher.deliver(notification))

        return TransitionOutcome(
            task_kind=kind,
            source_id=source_id,
            decision=decision,
            status=status,
            recipient_account_id=event.recipient_account_id,
            notification_id=notification.pk,
        )

    def approve(self, kind, source_id, note=None, actor_role=None) -> TransitionOutcome:
        return self.apply(kind, source_id, Decision.APPROVE, note, actor_role)

    def reject(self, kind, source_id, note=None, actor_role=None) -> TransitionOutcome:
        return self.apply(kind, source_id, Decision.REJECT, note, actor_role)

    # -- per-kind handlers: return (new status, event) or raise ------------------

    def _decide_account(self, account_id, decision, note):
        account = self.stores.accounts.get(account_id)
        if account is None:
            raise TaskNotFound(f"Account {account_id} not found")

        if decision == Decision.APPROVE:
            patch = {"verified": True, "verified_at": timezone.now(), "rejection_reason": None}
            status = ACCOUNT_VERIFIED
        elif decision == Decision.REJECT:
            patch = {"data_complete": False, "rejection_reason": note}
            status = ACCOUNT_RETURNED
        else:
            raise InvalidStateError(f"{decision.value} is not a valid decision for an account")

        written = self.stores.accounts.update(
            account_id, patch, expected={"data_complete": True, "verified": False}
        )
        if not written:
            current = self.stores.accounts.get(account_id)
            if current is None:
                raise TaskNotFound(f"Account {account_id} not found")
            if current.verified:
                raise InvalidStateError(f"Account {account_id} is already verified")
            raise InvalidStateError(
                f"Account {account_id} has no complete data awaiting verification"
            )

        event = TransitionEvent(
            task_kind=TaskKind.ACCOUNT_VERIFICATION,
            source_id=account_id,
            decision=decision,
            recipient_account_id=account_id,
            note=note,
            context={"name": account.full_name},
        )
        return status, event

    def _decide_change_request(self, request_id, decision, note):
        request = self.stores.change_requests.get(request_id)
        if request is None:
            raise TaskNotFound(f"Change request {request_id} not found")
        self._require_decision(decision, (Decision.APPROVE, Decision.REJECT), "change request")
        self._require_status(
            request.status, ChangeRequest.STATUS_SUBMITTED, f"Change request {request_id}"
        )

        if decision == Decision.APPROVE:
            # Resolve before writing anything so an unmapped field leaves the request SUBMITTED
            attribute = field_mapping.resolve(request.field)
            status = ChangeRequest.STATUS_APPROVED
        else:
            attribute = None
            status = ChangeRequest.STATUS_REJECTED

        self._compare_and_set(
            self.stores.change_requests,
            request_id,
            ChangeRequest.STATUS_SUBMITTED,
            {"status": status, "decided_at": timezone.now(), "admin_note": note},
            f"Change request {request_id}",
        )
        if attribute is not None:
            self.stores.accounts.update(request.account_id, {attribute: request.new_value})

        event = TransitionEvent(
            task_kind=TaskKind.CHANGE_REQUEST,
            source_id=request_id,
            decision=decision,
            recipient_account_id=request.account_id,
            note=note,
            context={"field": request.field, "new_value": request.new_value},
        )
        return status, event

    def _decide_payment(self, payment_id, decision, note):
        payment = self.stores.payments.get(payment_id)
        if payment is None:
            raise TaskNotFound(f"Payment {payment_id} not found")
        self._require_decision(decision, (Decision.APPROVE, Decision.REJECT), "payment")
        self._require_status(
            payment.status, PaymentRecord.STATUS_AWAITING_VERIFICATION, f"Payment {payment_id}"
        )

        if decision == Decision.APPROVE:
            status = PaymentRecord.STATUS_CONFIRMED
            patch = {"status": status, "decided_at": timezone.now()}
        else:
            status = PaymentRecord.STATUS_REJECTED
            patch = {"status": status, "decided_at": timezone.now(), "rejection_reason": note}

        self._compare_and_set(
            self.stores.payments,
            payment_id,
            PaymentRecord.STATUS_AWAITING_VERIFICATION,
            patch,
            f"Payment {payment_id}",
        )

        event = TransitionEvent(
            task_kind=TaskKind.PAYMENT,
            source_id=payment_id,
            decision=decision,
            recipient_account_id=payment.account_id,
            note=note,
            context={"category": payment.category},
        )
        return status, event

    def _decide_feedback(self, item_id, decision, note):
        item = self.stores.feedback.get(item_id)
        if item is None:
            raise TaskNotFound(f"Feedback {item_id} not found")
        if decision == Decision.REJECT:
            raise InvalidStateError("Feedback cannot be rejected, only processed or resolved")

        status = FEEDBACK_TRANSITIONS.get((item.status, decision))
        if status is None:
            raise InvalidStateError(
                f"Feedback {item_id} cannot go from {item.status} with {decision.value}"
            )

        patch = {"status": status, "updated_at": timezone.now()}
        if note:
            patch["admin_note"] = note
        self._compare_and_set(self.stores.feedback, item_id, item.status, patch, f"Feedback {item_id}")

        event = TransitionEvent(
            task_kind=TaskKind.FEEDBACK,
            source_id=item_id,
            decision=decision,
            recipient_account_id=item.account_id,
            note=note,
        )
        return status, event

    # -- helpers -----------------------------------------------------------------

    @staticmethod
    def _parse_kind(kind) -> TaskKind:
        if isinstance(kind, TaskKind):
            return kind
        try:
            return TaskKind.parse(kind)
        except (ValueError, AttributeError):
            raise InvalidStateError(f"Unknown task kind: {kind}") from None

    @staticmethod
    def _parse_decision(decision) -> Decision:
        if isinstance(decision, Decision):
            return decision
        try:
            return Decision(decision.upper())
        except (ValueError, AttributeError):
            raise InvalidStateError(f"Unknown decision: {decision}") from None

    @staticmethod
    def _require_decision(decision, allowed, label):
        if decision not in allowed:
            raise InvalidStateError(f"{decision.value} is not a valid decision for a {label}")

    @staticmethod
    def _require_status(current, expected, label):
        if current != expected:
            raise InvalidStateError(f"{label} was already decided ({current})")

    @staticmethod
    def _compare_and_set(store, pk, expected_status, patch, label):
        if not store.update(pk, patch, expected={"status": expected_status}):
            current = store.get(pk)
            current_status = current.status if current is not None else "deleted"
            raise InvalidStateError(f"{label} was already decided ({current_status})")

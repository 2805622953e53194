import logging
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from verification import field_mapping
from verification.exceptions import SubmissionError, TaskNotFound
from verification.models import Account, ChangeRequest, FeedbackItem, Notification, PaymentRecord
from verification.services.notification_dispatcher import NotificationDispatcher
from verification.services.stores import Stores

logger = logging.getLogger(__name__)

# Profile attributes a resident may fill in when completing registration
PROFILE_FIELDS = (
    "family_card_id",
    "full_name",
    "gender",
    "birth_place",
    "birth_date",
    "religion",
    "occupation",
    "marital_status",
    "phone_number",
    "email",
    "home_address",
    "id_card_address",
    "residency_status",
    "id_card_photo",
    "family_card_photo",
)

ADMIN_PREVIEW_LENGTH = 30


class SubmissionService:
    """
    Resident-side operations that create the records the verification queue is built from.

    These never decide a task; they only create SUBMITTED / AWAITING / NEW records
    or put an account back into the verification queue.
    """

    def __init__(
        self,
        stores: Optional[Stores] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self.stores = stores or Stores()
        self.dispatcher = dispatcher or NotificationDispatcher(self.stores)

    def _get_account(self, account_id) -> Account:
        account = self.stores.accounts.get(account_id)
        if account is None:
            raise TaskNotFound(f"Account {account_id} not found")
        return account

    def _require_access(self, account: Account):
        """Unverified residents may only complete their profile unless the policy allows more."""
        if account.verified or settings.ALLOW_UNVERIFIED_RESIDENT_ACCESS:
            return
        raise SubmissionError(
            f"Account {account.pk} is not verified yet; wait for the RT administrator to verify it"
        )

    def submit_profile(self, account_id, profile: dict) -> Account:
        """
        Complete the resident's profile and documents, putting the account in the
        verification queue. Administrators are notified.
        """
        account = self._get_account(account_id)
        if account.verified:
            raise SubmissionError(
                f"Account {account_id} is already verified; use a change request instead"
            )
        if not profile.get("id_card_photo") and not account.id_card_photo:
            raise SubmissionError("A KTP document is required to complete the profile")

        patch = {key: value for key, value in profile.items() if key in PROFILE_FIELDS}
        patch.update(
            {
                "data_complete": True,
                "rejection_reason": None,
                "data_submitted_at": timezone.now(),
            }
        )

        with transaction.atomic():
            # verified belongs to the transition engine; only write while it is still False
            if not self.stores.accounts.update(account_id, patch, expected={"verified": False}):
                raise SubmissionError(
                    f"Account {account_id} was verified meanwhile; use a change request instead"
                )
            account = self.stores.accounts.get(account_id)
            notices = self.dispatcher.notify_administrators(
                f"Verifikasi Data: {account.full_name} telah melengkapi profil. "
                "Silakan tinjau berkasnya."
            )

        logger.info(f"Account {account_id} submitted complete profile for verification")
        self._deliver_all(notices)
        return account

    def submit_change_request(
        self, account_id, field: str, new_value: str, reason: str = ""
    ) -> ChangeRequest:
        account = self._get_account(account_id)
        self._require_access(account)

        # Unknown field names are refused here, never at approval time
        attribute = field_mapping.resolve(field)
        try:
            # Approval writes with a queryset update, so the model field rules run here
            Account._meta.get_field(attribute).clean(new_value, account)
        except ValidationError as e:
            raise SubmissionError(
                f"'{new_value}' is not a valid value for {field}: {e.messages[0]}"
            ) from None

        old_value = getattr(account, attribute) or ""
        if old_value == new_value:
            raise SubmissionError(f"{field} is already '{new_value}'")

        request = self.stores.change_requests.create(
            account_id=account.pk,
            field=field,
            old_value=old_value,
            new_value=new_value,
            reason=reason,
        )
        logger.info(f"Change request {request.pk} filed by account {account_id} for {field}")
        return request

    def submit_payment(
        self, account_id, amount, category: str, method: str = "TRANSFER", proof_url: str = ""
    ) -> PaymentRecord:
        account = self._get_account(account_id)
        self._require_access(account)
        if Decimal(amount) <= 0:
            raise SubmissionError("Payment amount must be positive")

        payment = self.stores.payments.create(
            account_id=account.pk,
            amount=amount,
            category=category,
            method=method,
            proof_url=proof_url,
        )
        logger.info(f"Payment {payment.pk} ({category}) reported by account {account_id}")
        return payment

    def submit_feedback(self, account_id, text: str) -> FeedbackItem:
        account = self._get_account(account_id)
        self._require_access(account)
        text = (text or "").strip()
        if not text:
            raise SubmissionError("Feedback text must not be empty")

        with transaction.atomic():
            item = self.stores.feedback.create(account_id=account.pk, text=text)
            notices = self.dispatcher.notify_administrators(
                f'Aspirasi Baru dari {account.full_name}: "{text[:ADMIN_PREVIEW_LENGTH]}..." '
                "(Perlu Tindak Lanjut)"
            )

        logger.info(f"Feedback {item.pk} posted by account {account_id}")
        self._deliver_all(notices)
        return item

    def notifications_for(self, account_id, unread_only: bool = False):
        self._get_account(account_id)
        notifications = self.stores.notifications.list_where(recipient_id=account_id)
        if unread_only:
            notifications = notifications.filter(read=False)
        return notifications.order_by("-created_at", "-id")

    def mark_notification_read(self, account_id, notification_id) -> Notification:
        """The read flag is the only thing on a notification that may change, and only by its recipient."""
        notification = self.stores.notifications.get(notification_id)
        if notification is None or notification.recipient_id != int(account_id):
            raise TaskNotFound(f"Notification {notification_id} not found for account {account_id}")
        if not notification.read:
            self.stores.notifications.update(notification_id, {"read": True})
            notification.read = True
        return notification

    def change_request_history(self, status: Optional[str] = None, search: Optional[str] = None):
        """Audit listing of every change request, newest first."""
        filters = {}
        if status:
            filters["status"] = status
        if search:
            filters["account__full_name__icontains"] = search
        requests = self.stores.change_requests.list_where(**filters).select_related("account")
        return requests.order_by("-submitted_at", "-id")

    def _deliver_all(self, notifications):
        for notification in notifications:
            transaction.on_commit(lambda n=notification: self.dispatcher.deliver(n))

import logging
from typing import Optional

from django.conf import settings

from verification.models import Notification
from verification.rabbitmq import publisher
from verification.services.stores import Stores
from verification.workflow import Decision, TaskKind, TransitionEvent

logger = logging.getLogger(__name__)


# (task kind, decision) -> (category, message template)
# Templates are formatted with the event context plus {note} and {note_suffix}.
TEMPLATES = {
    (TaskKind.ACCOUNT_VERIFICATION, Decision.APPROVE): (
        Notification.CATEGORY_SYSTEM,
        "Selamat! Akun Anda telah diverifikasi oleh pengurus RT. "
        "Anda kini memiliki akses penuh ke fitur aplikasi.",
    ),
    (TaskKind.ACCOUNT_VERIFICATION, Decision.REJECT): (
        Notification.CATEGORY_SYSTEM,
        "Verifikasi Akun Ditolak: {note}. Mohon periksa kembali data profil & dokumen Anda.",
    ),
    (TaskKind.CHANGE_REQUEST, Decision.APPROVE): (
        Notification.CATEGORY_SYSTEM,
        "Selamat! Pengajuan perubahan data ({field}) Anda telah DISETUJUI.",
    ),
    (TaskKind.CHANGE_REQUEST, Decision.REJECT): (
        Notification.CATEGORY_SYSTEM,
        "Mohon maaf, pengajuan perubahan data ({field}) Anda DITOLAK.{note_suffix}",
    ),
    (TaskKind.PAYMENT, Decision.APPROVE): (
        Notification.CATEGORY_DUES,
        "Pembayaran '{category}' Anda telah diverifikasi LUNAS oleh Bendahara.",
    ),
    (TaskKind.PAYMENT, Decision.REJECT): (
        Notification.CATEGORY_DUES,
        "Pembayaran '{category}' DITOLAK.{note_suffix} Mohon kirim ulang bukti yang benar.",
    ),
    (TaskKind.FEEDBACK, Decision.PROCESS): (
        Notification.CATEGORY_SYSTEM,
        "Aspirasi Anda sedang ditindaklanjuti oleh pengurus RT.",
    ),
    (TaskKind.FEEDBACK, Decision.APPROVE): (
        Notification.CATEGORY_SYSTEM,
        "Aspirasi Anda telah selesai ditindaklanjuti.{note_suffix}",
    ),
}


def render_message(event: TransitionEvent) -> tuple:
    category, template = TEMPLATES[(event.task_kind, event.decision)]
    note = (event.note or "").strip()
    values = {
        **event.context,
        "note": note,
        "note_suffix": f" Alasan: {note}." if note else "",
    }
    return category, template.format(**values)


class RabbitMQNotificationChannel:
    """Delivery channel: hands the notification to the delivery workers via RabbitMQ."""

    def send(self, notification: Notification) -> bool:
        if not settings.NOTIFICATION_DELIVERY_ENABLED:
            logger.info(f"Delivery disabled, notification {notification.pk} stored only")
            return False
        payload = {
            "notificationId": notification.pk,
            "recipientAccountId": notification.recipient_id,
            "category": notification.category,
            "message": notification.message,
            "createdAt": notification.created_at.isoformat(),
        }
        return publisher.publish_notification(payload)


class NotificationDispatcher:
    """
    Turns transition events into Notification records.

    on_transition writes the record (inside the caller's transaction); deliver
    hands it to the channel once the transaction has committed.
    """

    def __init__(self, stores: Optional[Stores] = None, channel=None):
        self.stores = stores or Stores()
        self.channel = channel or RabbitMQNotificationChannel()

    def on_transition(self, event: TransitionEvent) -> Notification:
        category, message = render_message(event)
        notification = self.stores.notifications.create(
            recipient_id=event.recipient_account_id,
            message=message,
            category=category,
            task_kind=event.task_kind.value,
            source_id=event.source_id,
            decision=event.decision.value,
        )
        logger.info(
            f"Notification {notification.pk} created for account {event.recipient_account_id} "
            f"({event.task_kind.value} {event.decision.value} #{event.source_id})"
        )
        return notification

    def notify_administrators(self, message: str) -> list:
        """Notify every account holding one of ADMIN_NOTIFICATION_ROLES."""
        admins = self.stores.accounts.list_where(role__in=settings.ADMIN_NOTIFICATION_ROLES)
        return [
            self.stores.notifications.create(
                recipient_id=admin.pk,
                message=message,
                category=Notification.CATEGORY_SYSTEM,
            )
            for admin in admins
        ]

    def deliver(self, notification: Notification) -> bool:
        delivered = self.channel.send(notification)
        if not delivered:
            logger.warning(f"Notification {notification.pk} was not handed to the delivery channel")
        return delivered

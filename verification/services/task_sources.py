"""
Task source adapters: project one domain record into a PendingTask when, and
only when, that record is waiting for an administrator.
"""

from typing import Optional

from verification.models import Account, ChangeRequest, PaymentRecord, FeedbackItem
from verification.workflow import PendingTask, TaskDocument, TaskKind

FEEDBACK_PREVIEW_LENGTH = 40


def _format_rupiah(amount) -> str:
    return f"Rp {int(amount):,}".replace(",", ".")


def account_documents(account: Account) -> tuple:
    documents = []
    if account.id_card_photo:
        documents.append(TaskDocument(type="KTP", url=account.id_card_photo))
    if account.family_card_photo:
        documents.append(TaskDocument(type="KK", url=account.family_card_photo))
    return tuple(documents)


def project_account(account: Account) -> Optional[PendingTask]:
    if not account.awaiting_verification:
        return None
    return PendingTask(
        kind=TaskKind.ACCOUNT_VERIFICATION,
        source_id=account.pk,
        account_id=account.pk,
        title="Verifikasi Akun Warga Baru",
        description=(
            f"{account.full_name} telah melengkapi profil & dokumen. "
            "Mohon verifikasi keaslian data."
        ),
        occurred_at=account.data_submitted_at or account.joined_at,
        documents=account_documents(account),
        national_id=account.national_id,
    )


def project_change_request(request: ChangeRequest) -> Optional[PendingTask]:
    if request.status != ChangeRequest.STATUS_SUBMITTED:
        return None
    return PendingTask(
        kind=TaskKind.CHANGE_REQUEST,
        source_id=request.pk,
        account_id=request.account_id,
        title="Perubahan Data Kependudukan",
        description=(
            f"{request.account.full_name} ingin mengubah {request.field} "
            f'dari "{request.old_value}" menjadi "{request.new_value}".'
        ),
        occurred_at=request.submitted_at,
    )


def project_payment(payment: PaymentRecord) -> Optional[PendingTask]:
    if payment.status != PaymentRecord.STATUS_AWAITING_VERIFICATION:
        return None
    return PendingTask(
        kind=TaskKind.PAYMENT,
        source_id=payment.pk,
        account_id=payment.account_id,
        title="Verifikasi Pembayaran",
        description=(
            f"{payment.account.full_name} membayar {payment.category} "
            f"({_format_rupiah(payment.amount)})."
        ),
        occurred_at=payment.paid_at,
    )


def project_feedback(item: FeedbackItem) -> Optional[PendingTask]:
    if item.status != FeedbackItem.STATUS_NEW:
        return None
    preview = item.text[:FEEDBACK_PREVIEW_LENGTH]
    if len(item.text) > FEEDBACK_PREVIEW_LENGTH:
        preview += "..."
    return PendingTask(
        kind=TaskKind.FEEDBACK,
        source_id=item.pk,
        account_id=item.account_id,
        title="Aspirasi Warga Baru",
        description=f'Pesan dari {item.account.full_name}: "{preview}"',
        occurred_at=item.submitted_at,
    )


# kind -> (name of the store on Stores, store-side pre-filter, projector)
# The pre-filter only narrows the query; the projector's predicate is authoritative.
TASK_SOURCES = {
    TaskKind.ACCOUNT_VERIFICATION: (
        "accounts",
        {"data_complete": True, "verified": False},
        project_account,
    ),
    TaskKind.CHANGE_REQUEST: (
        "change_requests",
        {"status": ChangeRequest.STATUS_SUBMITTED},
        project_change_request,
    ),
    TaskKind.PAYMENT: (
        "payments",
        {"status": PaymentRecord.STATUS_AWAITING_VERIFICATION},
        project_payment,
    ),
    TaskKind.FEEDBACK: (
        "feedback",
        {"status": FeedbackItem.STATUS_NEW},
        project_feedback,
    ),
}

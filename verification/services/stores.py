"""
Thin store layer over the ORM.

The workflow services never touch model managers directly; they receive a
Stores bundle, so a test (or another backend) can inject its own.
"""

from typing import Optional

from verification.models import Account, ChangeRequest, PaymentRecord, FeedbackItem, Notification


class ModelStore:
    """get / update / list_where over one Django model."""

    def __init__(self, model):
        self.model = model

    def get(self, pk) -> Optional[object]:
        return self.model.objects.filter(pk=pk).first()

    def update(self, pk, patch: dict, expected: Optional[dict] = None) -> int:
        """
        Apply patch to one row and return the number of rows written.

        When expected is given the write is a single conditional UPDATE, so it
        only lands if those columns still hold the expected values.
        """
        return self.model.objects.filter(pk=pk, **(expected or {})).update(**patch)

    def list_where(self, **filters):
        return self.model.objects.filter(**filters).order_by("pk")

    def create(self, **values):
        return self.model.objects.create(**values)


class Stores:
    def __init__(
        self,
        accounts: Optional[ModelStore] = None,
        change_requests: Optional[ModelStore] = None,
        payments: Optional[ModelStore] = None,
        feedback: Optional[ModelStore] = None,
        notifications: Optional[ModelStore] = None,
    ):
        self.accounts = accounts or ModelStore(Account)
        self.change_requests = change_requests or ModelStore(ChangeRequest)
        self.payments = payments or ModelStore(PaymentRecord)
        self.feedback = feedback or ModelStore(FeedbackItem)
        self.notifications = notifications or ModelStore(Notification)

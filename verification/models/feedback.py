from django.db import models
from django.utils import timezone
from .account import Account


class FeedbackItem(models.Model):
    """A resident's aspiration / complaint posted to the civic feedback board."""

    STATUS_NEW = "NEW"
    STATUS_IN_PROGRESS = "IN_PROGRESS"
    STATUS_RESOLVED = "RESOLVED"

    STATUS_CHOICES = [
        (STATUS_NEW, "Baru"),
        (STATUS_IN_PROGRESS, "Diproses"),
        (STATUS_RESOLVED, "Selesai"),
    ]

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="feedback_items")
    text = models.TextField()
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=STATUS_NEW, db_index=True
    )
    submitted_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(blank=True, null=True)
    admin_note = models.TextField(blank=True, null=True)

    class Meta:
        db_table = "feedback_items"
        ordering = ["id"]

    def __str__(self):
        return f"{self.account.full_name}: {self.text[:40]} ({self.status})"

from django.db import models
from django.utils import timezone
from .account import Account


class ChangeRequest(models.Model):
    """A resident's request to change one field of their registry record."""

    STATUS_SUBMITTED = "SUBMITTED"
    STATUS_APPROVED = "APPROVED"
    STATUS_REJECTED = "REJECTED"

    STATUS_CHOICES = [
        (STATUS_SUBMITTED, "Diajukan"),
        (STATUS_APPROVED, "Disetujui"),
        (STATUS_REJECTED, "Ditolak"),
    ]

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="change_requests")
    field = models.CharField(max_length=100, help_text="Human-readable field name, e.g. Pekerjaan")
    old_value = models.CharField(max_length=500, blank=True)
    new_value = models.CharField(max_length=500)
    reason = models.TextField(blank=True)
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=STATUS_SUBMITTED, db_index=True
    )
    submitted_at = models.DateTimeField(default=timezone.now)
    decided_at = models.DateTimeField(blank=True, null=True)
    admin_note = models.TextField(blank=True, null=True)

    class Meta:
        db_table = "change_requests"
        ordering = ["id"]

    def __str__(self):
        return f"{self.field}: {self.old_value} -> {self.new_value} ({self.status})"

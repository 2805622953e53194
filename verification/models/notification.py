from django.db import models
from .account import Account


class Notification(models.Model):
    """
    A user-facing notification. Created as a side effect of a transition (or of a
    resident submission addressed to administrators); only the read flag changes later.
    """

    CATEGORY_SYSTEM = "SYSTEM"
    CATEGORY_DUES = "DUES"

    CATEGORY_CHOICES = [
        (CATEGORY_SYSTEM, "Sistem"),
        (CATEGORY_DUES, "Iuran"),
    ]

    recipient = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="notifications")
    message = models.TextField()
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=CATEGORY_SYSTEM)
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    # Transition that produced this notification (blank for submission notices)
    task_kind = models.CharField(max_length=30, blank=True)
    source_id = models.BigIntegerField(blank=True, null=True)
    decision = models.CharField(max_length=20, blank=True)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["recipient", "read"]),
            models.Index(fields=["task_kind", "source_id"]),
        ]

    def __str__(self):
        return f"[{self.category}] -> {self.recipient_id}: {self.message[:40]}"

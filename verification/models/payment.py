from django.db import models
from django.utils import timezone
from .account import Account


class PaymentRecord(models.Model):
    """A dues payment reported by a resident, waiting for the treasurer to confirm it."""

    STATUS_AWAITING_VERIFICATION = "AWAITING_VERIFICATION"
    STATUS_CONFIRMED = "CONFIRMED"
    STATUS_REJECTED = "REJECTED"

    STATUS_CHOICES = [
        (STATUS_AWAITING_VERIFICATION, "Menunggu Verifikasi"),
        (STATUS_CONFIRMED, "Lunas"),
        (STATUS_REJECTED, "Ditolak"),
    ]

    METHOD_CHOICES = [
        ("CASH", "Tunai"),
        ("TRANSFER", "Transfer"),
        ("QRIS", "QRIS"),
        ("E_WALLET", "E-Wallet"),
    ]

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    category = models.CharField(max_length=120)
    method = models.CharField(max_length=20, choices=METHOD_CHOICES, default="TRANSFER")
    status = models.CharField(
        max_length=30,
        choices=STATUS_CHOICES,
        default=STATUS_AWAITING_VERIFICATION,
        db_index=True,
    )
    paid_at = models.DateTimeField(default=timezone.now)
    proof_url = models.CharField(max_length=500, blank=True)
    rejection_reason = models.TextField(blank=True, null=True)
    decided_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = "payment_records"
        ordering = ["id"]

    def __str__(self):
        return f"{self.category} Rp {self.amount} ({self.status})"

from django.contrib import admin
from verification.models import Account, ChangeRequest, FeedbackItem, Notification, PaymentRecord


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("national_id", "full_name", "role", "data_complete", "verified", "joined_at")
    list_filter = ("data_complete", "verified", "role")
    search_fields = ("national_id", "family_card_id", "full_name", "email")
    # Verification flags change only through the verification queue
    readonly_fields = (
        "data_complete",
        "verified",
        "rejection_reason",
        "joined_at",
        "data_submitted_at",
        "verified_at",
    )
    fieldsets = (
        (
            "Identitas",
            {"fields": ("national_id", "family_card_id", "full_name", "gender", "birth_place", "birth_date")},
        ),
        (
            "Data Kependudukan",
            {"fields": ("religion", "occupation", "marital_status", "residency_status", "role")},
        ),
        ("Kontak & Alamat", {"fields": ("phone_number", "email", "home_address", "id_card_address")}),
        ("Dokumen", {"fields": ("id_card_photo", "family_card_photo"), "classes": ("collapse",)}),
        (
            "Verifikasi",
            {
                "fields": (
                    "data_complete",
                    "verified",
                    "rejection_reason",
                    "joined_at",
                    "data_submitted_at",
                    "verified_at",
                )
            },
        ),
    )


@admin.register(ChangeRequest)
class ChangeRequestAdmin(admin.ModelAdmin):
    list_display = ("account", "field", "old_value", "new_value", "status", "submitted_at")
    list_filter = ("status", "field")
    search_fields = ("account__full_name", "account__national_id")
    readonly_fields = ("status", "decided_at", "admin_note")


@admin.register(PaymentRecord)
class PaymentRecordAdmin(admin.ModelAdmin):
    list_display = ("account", "category", "amount", "method", "status", "paid_at")
    list_filter = ("status", "method", "category")
    search_fields = ("account__full_name",)
    readonly_fields = ("status", "decided_at", "rejection_reason")


@admin.register(FeedbackItem)
class FeedbackItemAdmin(admin.ModelAdmin):
    list_display = ("account", "status", "submitted_at")
    list_filter = ("status",)
    search_fields = ("account__full_name", "text")
    readonly_fields = ("status", "updated_at")


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("recipient", "category", "task_kind", "decision", "read", "created_at")
    list_filter = ("category", "task_kind", "read")
    search_fields = ("recipient__full_name", "message")
    readonly_fields = ("recipient", "message", "category", "task_kind", "source_id", "decision", "created_at")

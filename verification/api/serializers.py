from rest_framework import serializers
from verification import field_mapping
from verification.models import Account, ChangeRequest, FeedbackItem, Notification, PaymentRecord
from verification.workflow import ALL_KINDS, TaskKind

KIND_CHOICES = [ALL_KINDS] + [kind.value for kind in TaskKind]


class TaskQuerySerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=KIND_CHOICES, required=False, default=ALL_KINDS)


class TaskDocumentSerializer(serializers.Serializer):
    type = serializers.CharField()
    url = serializers.CharField()


class PendingTaskSerializer(serializers.Serializer):
    """Read-only view of a PendingTask."""

    key = serializers.CharField()
    kind = serializers.CharField(source="kind.value")
    sourceId = serializers.IntegerField(source="source_id")
    accountId = serializers.IntegerField(source="account_id")
    title = serializers.CharField()
    description = serializers.CharField()
    occurredAt = serializers.DateTimeField(source="occurred_at")
    documents = TaskDocumentSerializer(many=True)


class DecisionSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=1000)


class AccountSerializer(serializers.ModelSerializer):
    """Serializer for Account model."""

    nik = serializers.CharField(source="national_id", read_only=True)
    noKK = serializers.CharField(source="family_card_id", read_only=True)
    fullName = serializers.CharField(source="full_name", read_only=True)
    isDataComplete = serializers.BooleanField(source="data_complete", read_only=True)
    isVerified = serializers.BooleanField(source="verified", read_only=True)
    rejectionReason = serializers.CharField(source="rejection_reason", read_only=True)
    dataSubmittedAt = serializers.DateTimeField(source="data_submitted_at", read_only=True)

    class Meta:
        model = Account
        fields = [
            "id",
            "nik",
            "noKK",
            "fullName",
            "role",
            "isDataComplete",
            "isVerified",
            "rejectionReason",
            "dataSubmittedAt",
        ]


class ProfileSubmissionSerializer(serializers.ModelSerializer):
    """Profile + documents a resident submits to enter the verification queue."""

    class Meta:
        model = Account
        fields = [
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
        ]
        extra_kwargs = {name: {"required": False} for name in fields}


class ChangeRequestSubmissionSerializer(serializers.Serializer):
    field = serializers.ChoiceField(choices=field_mapping.supported_fields())
    newValue = serializers.CharField(max_length=500)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class ChangeRequestSerializer(serializers.ModelSerializer):
    accountId = serializers.IntegerField(source="account_id", read_only=True)
    accountName = serializers.CharField(source="account.full_name", read_only=True)
    oldValue = serializers.CharField(source="old_value", read_only=True)
    newValue = serializers.CharField(source="new_value", read_only=True)
    submittedAt = serializers.DateTimeField(source="submitted_at", read_only=True)
    decidedAt = serializers.DateTimeField(source="decided_at", read_only=True)
    adminNote = serializers.CharField(source="admin_note", read_only=True)

    class Meta:
        model = ChangeRequest
        fields = [
            "id",
            "accountId",
            "accountName",
            "field",
            "oldValue",
            "newValue",
            "reason",
            "status",
            "submittedAt",
            "decidedAt",
            "adminNote",
        ]


class ChangeRequestHistoryQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[value for value, _ in ChangeRequest.STATUS_CHOICES], required=False
    )
    search = serializers.CharField(required=False, allow_blank=True)


class PaymentSubmissionSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=1)
    category = serializers.CharField(max_length=120)
    method = serializers.ChoiceField(
        choices=[value for value, _ in PaymentRecord.METHOD_CHOICES], default="TRANSFER"
    )
    proofUrl = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class PaymentRecordSerializer(serializers.ModelSerializer):
    accountId = serializers.IntegerField(source="account_id", read_only=True)
    paidAt = serializers.DateTimeField(source="paid_at", read_only=True)

    class Meta:
        model = PaymentRecord
        fields = ["id", "accountId", "amount", "category", "method", "status", "paidAt"]


class FeedbackSubmissionSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=2000)


class FeedbackItemSerializer(serializers.ModelSerializer):
    accountId = serializers.IntegerField(source="account_id", read_only=True)
    submittedAt = serializers.DateTimeField(source="submitted_at", read_only=True)

    class Meta:
        model = FeedbackItem
        fields = ["id", "accountId", "text", "status", "submittedAt"]


class NotificationSerializer(serializers.ModelSerializer):
    recipientAccountId = serializers.IntegerField(source="recipient_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Notification
        fields = ["id", "recipientAccountId", "message", "category", "read", "createdAt"]

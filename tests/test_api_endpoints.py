"""
API endpoint tests for the verification service.
"""

import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from verification.models import Account, ChangeRequest, FeedbackItem, Notification, PaymentRecord
from tests.conftest import at


@pytest.mark.django_db
class TestAdministratorAccess:
    def setup_method(self):
        self.client = APIClient()

    @pytest.mark.parametrize(
        "name", ["task-list", "task-counts", "auto-approve-eligible", "change-request-history"]
    )
    def test_requires_administrator_role(self, name):
        response = self.client.get(reverse(name))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_resident_role_is_refused(self, pending_account):
        account = pending_account()
        self.client.credentials(HTTP_X_ACTOR_ROLE="Warga")
        url = reverse("task-approve", args=["ACCOUNT_VERIFICATION", account.pk])

        response = self.client.post(url, {}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        account.refresh_from_db()
        assert account.verified is False


@pytest.mark.django_db
class TestTaskQueueAPI:
    def test_list_tasks_newest_first(
        self, admin_client, pending_account, verified_account, create_change_request, create_payment
    ):
        resident = verified_account()
        pending_account(data_submitted_at=at(2024, 5, 10))
        create_change_request(resident, submitted_at=at(2024, 5, 18))
        create_payment(resident, paid_at=at(2024, 5, 19))

        response = admin_client.get(reverse("task-list"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 3
        assert [task["kind"] for task in response.data["tasks"]] == [
            "PAYMENT",
            "CHANGE_REQUEST",
            "ACCOUNT_VERIFICATION",
        ]
        account_task = response.data["tasks"][2]
        assert [doc["type"] for doc in account_task["documents"]] == ["KTP", "KK"]

    def test_filter_by_kind(self, admin_client, verified_account, create_payment, create_feedback):
        resident = verified_account()
        create_payment(resident)
        create_feedback(resident)

        response = admin_client.get(reverse("task-list"), {"kind": "FEEDBACK"})

        assert response.data["count"] == 1
        assert response.data["tasks"][0]["kind"] == "FEEDBACK"

    def test_unknown_kind_filter(self, admin_client):
        response = admin_client.get(reverse("task-list"), {"kind": "PARKING"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_counts(self, admin_client, pending_account, verified_account, create_payment):
        pending_account()
        create_payment(verified_account())

        response = admin_client.get(reverse("task-counts"))

        assert response.data["ALL"] == 2
        assert response.data["PAYMENT"] == 1
        assert response.data["FEEDBACK"] == 0


@pytest.mark.django_db
class TestTaskDecisionAPI:
    def test_approve_account(self, admin_client, pending_account):
        account = pending_account()
        url = reverse("task-approve", args=["ACCOUNT_VERIFICATION", account.pk])

        response = admin_client.post(url, {}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == "VERIFIED"
        assert response.data["recipientAccountId"] == account.pk
        assert Account.objects.get(pk=account.pk).verified is True

    def test_reject_account_requires_note(self, admin_client, pending_account):
        account = pending_account()
        url = reverse("task-reject", args=["ACCOUNT_VERIFICATION", account.pk])

        response = admin_client.post(url, {"note": ""}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "MISSING_REASON"
        assert Account.objects.get(pk=account.pk).data_complete is True

    def test_reject_account_with_note(self, admin_client, pending_account):
        account = pending_account()
        url = reverse("task-reject", args=["ACCOUNT_VERIFICATION", account.pk])

        response = admin_client.post(url, {"note": "Foto KK terpotong"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == "RETURNED"

    def test_kind_in_url_is_case_insensitive(self, admin_client, verified_account, create_payment):
        payment = create_payment(verified_account())

        response = admin_client.post(reverse("task-approve", args=["payment", payment.pk]), format="json")

        assert response.status_code == status.HTTP_200_OK
        assert PaymentRecord.objects.get(pk=payment.pk).status == PaymentRecord.STATUS_CONFIRMED

    def test_second_decision_conflicts(self, admin_client, verified_account, create_payment):
        payment = create_payment(verified_account())
        url = reverse("task-approve", args=["PAYMENT", payment.pk])

        admin_client.post(url, format="json")
        response = admin_client.post(url, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["code"] == "INVALID_STATE"
        assert Notification.objects.count() == 1

    def test_unmapped_change_request_field(self, admin_client, verified_account, create_change_request):
        request = create_change_request(verified_account(), field="Hobi")

        response = admin_client.post(
            reverse("task-approve", args=["CHANGE_REQUEST", request.pk]), format="json"
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data["code"] == "MAPPING_ERROR"
        assert ChangeRequest.objects.get(pk=request.pk).status == ChangeRequest.STATUS_SUBMITTED

    def test_process_feedback(self, admin_client, verified_account, create_feedback):
        item = create_feedback(verified_account())

        response = admin_client.post(reverse("task-process", args=["FEEDBACK", item.pk]), format="json")

        assert response.status_code == status.HTTP_200_OK
        assert FeedbackItem.objects.get(pk=item.pk).status == FeedbackItem.STATUS_IN_PROGRESS

    def test_unknown_task(self, admin_client, db):
        response = admin_client.post(reverse("task-approve", args=["PAYMENT", 404]), format="json")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["code"] == "NOT_FOUND"

    def test_unknown_kind(self, admin_client, db):
        response = admin_client.post(reverse("task-approve", args=["PARKING", 1]), format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "message" in response.data


@pytest.mark.django_db
class TestAutoApproveAPI:
    def test_preview_then_run(self, admin_client, pending_account):
        eligible = pending_account()
        pending_account(id_card_photo="")
        url = reverse("auto-approve-eligible")

        preview = admin_client.get(url)
        response = admin_client.post(url, format="json")

        assert preview.data["count"] == 1
        assert response.status_code == status.HTTP_200_OK
        assert response.data["approved"] == 1
        assert response.data["failed"] == 0
        assert response.data["results"][0]["sourceId"] == eligible.pk

    def test_empty_batch(self, admin_client, db):
        response = admin_client.post(reverse("auto-approve-eligible"), format="json")

        assert response.data == {"results": [], "approved": 0, "failed": 0}


@pytest.mark.django_db
class TestResidentAPI:
    def setup_method(self):
        self.client = APIClient()

    def test_profile_submission(self, create_account):
        account = create_account(data_complete=False)

        response = self.client.post(
            reverse("profile-submit", args=[account.pk]),
            {"occupation": "Guru", "id_card_photo": "uploads/ktp/budi.jpg"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["isDataComplete"] is True
        assert response.data["isVerified"] is False

    def test_change_request_submission(self, verified_account):
        account = verified_account()

        response = self.client.post(
            reverse("change-request-submit", args=[account.pk]),
            {"field": "Pekerjaan", "newValue": "Wiraswasta", "reason": "Usaha sendiri"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["oldValue"] == "Karyawan Swasta"
        assert response.data["status"] == "SUBMITTED"

    def test_change_request_outside_catalog(self, verified_account):
        response = self.client.post(
            reverse("change-request-submit", args=[verified_account().pk]),
            {"field": "Hobi", "newValue": "Memancing"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unverified_resident_cannot_pay(self, pending_account):
        response = self.client.post(
            reverse("payment-submit", args=[pending_account().pk]),
            {"amount": "50000", "category": "Iuran Wajib & Sampah"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "SUBMISSION_REJECTED"

    def test_payment_submission(self, verified_account):
        response = self.client.post(
            reverse("payment-submit", args=[verified_account().pk]),
            {"amount": "50000", "category": "Iuran Wajib & Sampah", "method": "QRIS"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["status"] == PaymentRecord.STATUS_AWAITING_VERIFICATION

    def test_feedback_submission(self, verified_account):
        response = self.client.post(
            reverse("feedback-submit", args=[verified_account().pk]),
            {"text": "Jalan berlubang di depan masjid"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["status"] == FeedbackItem.STATUS_NEW

    def test_notifications_after_decision(self, admin_client, verified_account, create_payment):
        account = verified_account()
        payment = create_payment(account)
        admin_client.post(reverse("task-approve", args=["PAYMENT", payment.pk]), format="json")

        listing = self.client.get(reverse("notification-list", args=[account.pk]), {"unread": "1"})
        notification_id = listing.data["notifications"][0]["id"]
        read = self.client.post(
            reverse("notification-read", args=[account.pk, notification_id]), format="json"
        )
        unread = self.client.get(reverse("notification-list", args=[account.pk]), {"unread": "1"})

        assert listing.data["notifications"][0]["category"] == "DUES"
        assert read.data["read"] is True
        assert unread.data["notifications"] == []

    def test_history(self, admin_client, verified_account, create_change_request):
        create_change_request(verified_account())

        response = admin_client.get(reverse("change-request-history"), {"status": "SUBMITTED"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["changeRequests"][0]["accountName"] == "Budi Santoso"


@pytest.mark.django_db
class TestHealthEndpoints:
    def test_health(self):
        response = APIClient().get(reverse("health_check"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["checks"]["database"] == "ok"

    def test_ready(self):
        assert APIClient().get(reverse("readiness_check")).data == {"status": "ready"}

    def test_ready_reports_degraded_delivery(self, mocker):
        mocker.patch("verification.api.health.get_publisher").return_value.channel = None

        response = APIClient().get(reverse("readiness_check"), {"verbose": "1"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["notificationDelivery"] == "degraded"

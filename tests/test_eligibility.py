"""
Tests for the auto-approval eligibility policy.
"""

import pytest

from verification.services.eligibility import eligible_for_auto_approval, is_eligible
from verification.services.task_aggregator import TaskAggregator
from verification.workflow import PendingTask, TaskDocument, TaskKind
from tests.conftest import at


def make_task(
    national_id="3201010101010001",
    documents=(TaskDocument("KTP", "ktp.jpg"),),
    kind=TaskKind.ACCOUNT_VERIFICATION,
):
    return PendingTask(
        kind=kind,
        source_id=1,
        account_id=1,
        title="Verifikasi Warga Baru",
        description="",
        occurred_at=at(2024, 5, 10),
        documents=tuple(documents),
        national_id=national_id,
    )


class TestIsEligible:
    def test_sixteen_digit_nik_with_ktp(self):
        assert is_eligible(make_task()) is True

    @pytest.mark.parametrize("national_id", ["320101010101001", "32010101010100011", "", None])
    def test_wrong_length_nik(self, national_id):
        assert is_eligible(make_task(national_id=national_id)) is False

    def test_family_card_alone_is_not_enough(self):
        assert is_eligible(make_task(documents=[TaskDocument("KK", "kk.jpg")])) is False

    def test_document_without_url_does_not_count(self):
        assert is_eligible(make_task(documents=[TaskDocument("KTP", "")])) is False

    def test_only_account_verifications(self):
        assert is_eligible(make_task(kind=TaskKind.CHANGE_REQUEST)) is False


@pytest.mark.django_db
class TestEligibleForAutoApproval:
    def test_selects_only_complete_identities(self, pending_account):
        eligible = pending_account()
        pending_account(national_id="320101010101234")
        pending_account(id_card_photo="")

        tasks = eligible_for_auto_approval(TaskAggregator().list(TaskKind.ACCOUNT_VERIFICATION))

        assert [task.source_id for task in tasks] == [eligible.pk]

    def test_empty_when_nothing_qualifies(self, pending_account):
        pending_account(id_card_photo="")

        assert eligible_for_auto_approval(TaskAggregator().list()) == []

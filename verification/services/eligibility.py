"""
Auto-approval policy for account verification.

A task is eligible when the NIK has exactly NATIONAL_ID_LENGTH characters and at
least one identity document (KTP) is attached. The policy is fixed here; a
pluggable rule set would replace is_eligible.
"""

from verification.workflow import PendingTask, TaskKind

NATIONAL_ID_LENGTH = 16
REQUIRED_IDENTITY_DOCUMENTS = frozenset({"KTP"})


def is_eligible(task: PendingTask) -> bool:
    if task.kind != TaskKind.ACCOUNT_VERIFICATION:
        return False
    if not task.national_id or len(task.national_id) != NATIONAL_ID_LENGTH:
        return False
    return any(
        document.type in REQUIRED_IDENTITY_DOCUMENTS and document.url
        for document in task.documents
    )


def eligible_for_auto_approval(tasks) -> list:
    """Filter tasks down to the eligible account verifications. Empty when none qualify."""
    return [task for task in tasks if is_eligible(task)]

import logging
from typing import Optional

from verification.exceptions import TransitionError
from verification.services.eligibility import eligible_for_auto_approval
from verification.services.task_aggregator import TaskAggregator
from verification.services.transition_engine import TransitionEngine
from verification.workflow import BatchItemResult, Decision, TaskKind

logger = logging.getLogger(__name__)


class AutoApprovalService:
    """
    Batch approval of every account verification that satisfies the auto-approval policy.

    Each account is approved in its own transaction. A failure on one account
    (typically another administrator verifying it first) is recorded in that
    account's result and the batch carries on.
    """

    def __init__(
        self,
        aggregator: Optional[TaskAggregator] = None,
        engine: Optional[TransitionEngine] = None,
    ):
        self.engine = engine or TransitionEngine()
        self.aggregator = aggregator or TaskAggregator(self.engine.stores)

    def eligible_tasks(self) -> list:
        return eligible_for_auto_approval(self.aggregator.list(TaskKind.ACCOUNT_VERIFICATION))

    def run(self, actor_role: Optional[str] = None) -> list:
        tasks = self.eligible_tasks()
        if not tasks:
            logger.info("Auto-approval: no eligible accounts")
            return []

        results = []
        for task in tasks:
            try:
                outcome = self.engine.apply(
                    TaskKind.ACCOUNT_VERIFICATION,
                    task.source_id,
                    Decision.APPROVE,
                    actor_role=actor_role,
                )
                results.append(BatchItemResult(source_id=task.source_id, success=True, outcome=outcome))
            except TransitionError as e:
                results.append(
                    BatchItemResult(
                        source_id=task.source_id,
                        success=False,
                        error_code=e.code,
                        error_message=e.message,
                    )
                )

        approved = sum(1 for result in results if result.success)
        logger.info(f"Auto-approval: {approved}/{len(results)} accounts verified")
        return results

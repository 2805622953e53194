from typing import Optional, Union

from verification.services.stores import Stores
from verification.services.task_sources import TASK_SOURCES
from verification.workflow import ALL_KINDS, TaskKind


class TaskAggregator:
    """
    Merges every task source into one administrator queue.

    Nothing is cached: each call re-derives the queue from the stores, so it can
    never disagree with the records underneath it.
    """

    def __init__(self, stores: Optional[Stores] = None):
        self.stores = stores or Stores()

    def _collect(self, kind: TaskKind) -> list:
        store_name, prefilter, project = TASK_SOURCES[kind]
        store = getattr(self.stores, store_name)
        records = store.list_where(**prefilter)
        if kind != TaskKind.ACCOUNT_VERIFICATION:
            records = records.select_related("account")
        tasks = []
        for record in records:
            task = project(record)
            if task is not None:
                tasks.append(task)
        return tasks

    def list(self, kind: Union[TaskKind, str, None] = None) -> list:
        """
        Return pending tasks, newest first.

        Ties on occurred_at keep source order (kind order, then insertion order);
        sorted() is stable with reverse=True.
        """
        wanted = self._normalize(kind)
        tasks = []
        for source_kind in TASK_SOURCES:
            if wanted is None or wanted == source_kind:
                tasks.extend(self._collect(source_kind))
        return sorted(tasks, key=lambda task: task.occurred_at, reverse=True)

    def count(self, kind: Union[TaskKind, str, None] = None) -> int:
        return len(self.list(kind))

    def counts(self) -> dict:
        tasks = self.list()
        counts = {kind.value: 0 for kind in TaskKind}
        for task in tasks:
            counts[task.kind.value] += 1
        counts[ALL_KINDS] = len(tasks)
        return counts

    @staticmethod
    def _normalize(kind) -> Optional[TaskKind]:
        if kind is None or kind == ALL_KINDS:
            return None
        if isinstance(kind, TaskKind):
            return kind
        return TaskKind.parse(kind)

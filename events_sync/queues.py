"""
Events Sync - Downstream Queues.

============================================================
RESPONSIBILITY
============================================================
The engine's only contract with downstream consumers is
"hand over a list of typed jobs". Delivery and retries belong
to the queue implementation.

- QueueJob: job id (idempotence key), payload, delay
- QueueSink: abstract sink
- InMemoryQueue: sink ignoring already accepted job ids
- DownstreamQueues: the set of sinks a sync pass feeds

============================================================
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueJob:
    """A single downstream job."""
    job_id: str
    payload: Dict[str, Any]
    delay_seconds: int = 0


class QueueSink(ABC):
    """Destination of downstream jobs."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    async def add(self, jobs: Sequence[QueueJob]) -> int:
        """
        Enqueue jobs.

        Returns:
            Number of jobs actually accepted
        """
        pass


class InMemoryQueue(QueueSink):
    """
    Queue kept in memory.

    A job whose `job_id` was already accepted is ignored, so
    replaying a sync pass never duplicates side effects.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._jobs: List[QueueJob] = []
        self._seen: set[str] = set()

    async def add(self, jobs: Sequence[QueueJob]) -> int:
        accepted = 0
        for job in jobs:
            if job.job_id in self._seen:
                continue
            self._seen.add(job.job_id)
            self._jobs.append(job)
            accepted += 1

        if jobs:
            logger.debug(f"[{self.name}] Accepted {accepted}/{len(jobs)} jobs")
        return accepted

    @property
    def jobs(self) -> List[QueueJob]:
        return list(self._jobs)

    def drain(self) -> List[QueueJob]:
        """Return and forget pending jobs (accepted ids stay remembered)."""
        jobs, self._jobs = self._jobs, []
        return jobs

    def __len__(self) -> int:
        return len(self._jobs)


@dataclass
class DownstreamQueues:
    """Every queue a sync pass writes to."""

    fill_updates: QueueSink = field(default_factory=lambda: InMemoryQueue("fill-updates"))
    order_updates: QueueSink = field(default_factory=lambda: InMemoryQueue("order-updates"))
    maker_updates: QueueSink = field(default_factory=lambda: InMemoryQueue("maker-updates"))
    activities: QueueSink = field(default_factory=lambda: InMemoryQueue("activities"))
    orderbook: QueueSink = field(default_factory=lambda: InMemoryQueue("orderbook"))
    block_checks: QueueSink = field(default_factory=lambda: InMemoryQueue("block-checks"))
    removed_activities: QueueSink = field(
        default_factory=lambda: InMemoryQueue("removed-activities")
    )

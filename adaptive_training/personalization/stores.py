"""In-memory FeedbackStore.

Suitable for a single process and for tests. Production deployments plug
in a durable store implementing the same port.
"""

import asyncio
from collections import defaultdict

from adaptive_training.personalization.types import FeedbackRecord


class InMemoryFeedbackStore:
    def __init__(self, max_records_per_user: int = 100) -> None:
        self.max_records_per_user = max_records_per_user
        self._records: dict[str, list[FeedbackRecord]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def append(self, record: FeedbackRecord) -> None:
        async with self._lock:
            records = self._records[record.user_id]
            records.append(record)
            if len(records) > self.max_records_per_user:
                del records[: len(records) - self.max_records_per_user]

    async def recent(self, user_id: str, limit: int) -> list[FeedbackRecord]:
        async with self._lock:
            records = self._records.get(user_id, [])
            return list(reversed(records[-limit:])) if limit > 0 else []

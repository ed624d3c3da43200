from abc import ABC, abstractmethod
from typing import Any, List
from junction.application.feed import read_feed
from junction.domain.models import FeedResult

class Command(ABC):
    @abstractmethod
    def execute(self, kernel: Any):
        pass

class IngestFeedCommand(Command):
    """Spawn requests delivered by an external lane feed."""

    def __init__(self, lines: List[str]):
        self.lines = lines

    def execute(self, kernel: Any) -> FeedResult:
        kernel.ensure_initialized()
        records, skipped = read_feed(self.lines)
        kernel.state.stats.malformed_records += skipped
        accepted = 0
        for record in records:
            if kernel.request_spawn(record.direction, record.type).accepted:
                accepted += 1
        return FeedResult(accepted=accepted, rejected=len(records) - accepted, skipped=skipped)

class DrainQueuesCommand(Command):
    def execute(self, kernel: Any):
        return kernel.drain_queues()

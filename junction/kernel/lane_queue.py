from collections import deque
from typing import Deque, List, Optional
from junction.domain.models import Direction, Vehicle


class LaneQueue:
    """FIFO of vehicles waiting to enter the simulation on one approach.

    No capacity is enforced here; admission control belongs to the kernel.
    """

    def __init__(self, direction: Direction):
        self.direction = direction
        self.queue: Deque[Vehicle] = deque()

    def enqueue(self, vehicle: Vehicle):
        self.queue.append(vehicle)

    def dequeue(self) -> Optional[Vehicle]:
        if not self.queue:
            return None
        return self.queue.popleft()

    def peek(self) -> Optional[Vehicle]:
        return self.queue[0] if self.queue else None

    def is_empty(self) -> bool:
        return not self.queue

    def size(self) -> int:
        return len(self.queue)

    def __len__(self) -> int:
        return len(self.queue)

    def __iter__(self):
        return iter(self.queue)

    def clear(self) -> List[Vehicle]:
        dropped = list(self.queue)
        self.queue.clear()
        return dropped

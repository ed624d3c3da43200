from collections import deque
from typing import Deque, Iterator
from junction.kernel.commands import Command

class CommandQueue:
    """External requests collected between ticks, applied at the start of the next one."""

    def __init__(self):
        self._pending: Deque[Command] = deque()

    def add(self, command: Command):
        self._pending.append(command)

    def drain(self) -> Iterator[Command]:
        # Commands added while draining wait for the next tick
        batch, self._pending = self._pending, deque()
        while batch:
            yield batch.popleft()

    def discard(self) -> int:
        dropped = len(self._pending)
        self._pending.clear()
        return dropped

    def __len__(self) -> int:
        return len(self._pending)

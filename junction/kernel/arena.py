from collections import deque
from typing import Deque, Iterator, List, Optional
from junction.domain.models import Vehicle


class VehicleArena:
    """Fixed number of slots for active vehicles.

    A vehicle keeps the same slot index from admission until retirement.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        self.slots: List[Optional[Vehicle]] = [None] * capacity
        self._free: Deque[int] = deque(range(capacity))

    def admit(self, vehicle: Vehicle) -> Optional[int]:
        if not self._free:
            return None
        assert vehicle.slot is None, "vehicle already occupies a slot"
        slot = self._free.popleft()
        self.slots[slot] = vehicle
        vehicle.slot = slot
        vehicle.active = True
        return slot

    def release(self, slot: int) -> Vehicle:
        vehicle = self.slots[slot]
        assert vehicle is not None, f"slot {slot} is already free"
        self.slots[slot] = None
        vehicle.slot = None
        self._free.append(slot)
        return vehicle

    def get(self, slot: int) -> Optional[Vehicle]:
        return self.slots[slot]

    def vehicles(self) -> Iterator[Vehicle]:
        for vehicle in self.slots:
            if vehicle is not None:
                yield vehicle

    def clear(self) -> List[Vehicle]:
        dropped = list(self.vehicles())
        for vehicle in dropped:
            self.release(vehicle.slot)
        return dropped

    @property
    def is_full(self) -> bool:
        return not self._free

    def __len__(self) -> int:
        return self.capacity - len(self._free)

from typing import List
from junction.domain.geometry import IntersectionGeometry
from junction.domain.models import Direction, Vehicle
from junction.domain.state import IntersectionState


class EmergencyArbitrator:
    """Finds the approaches an emergency vehicle is still waiting on or crossing."""

    def __init__(self, geometry: IntersectionGeometry):
        self.geometry = geometry

    def approaches_with_emergency(self, state: IntersectionState) -> List[Direction]:
        present = set()
        for direction, queue in state.queues.items():
            if any(v.is_emergency for v in queue):
                present.add(direction)
        for v in state.arena.vehicles():
            if v.is_emergency and v.active and not self.has_cleared(v):
                present.add(v.approach)
        return [d for d in Direction if d in present]

    def has_cleared(self, vehicle: Vehicle) -> bool:
        # Turned vehicles have left their approach; straight ones clear at the far edge
        if vehicle.direction != vehicle.approach:
            return True
        return self.geometry.vehicle_progress(vehicle) >= self.geometry.clear_line

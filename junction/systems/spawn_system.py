import random
from typing import List, Optional
from junction.domain.config import SimulationConfig
from junction.domain.geometry import IntersectionGeometry
from junction.domain.models import Direction, LaneSide, TurnIntent, Vehicle, VehicleType


class SpawnSystem:
    """Builds new vehicles and paces the background traffic generator."""

    def __init__(self, config: SimulationConfig, geometry: IntersectionGeometry, rng: random.Random):
        self.config = config
        self.geometry = geometry
        self.rng = rng
        self._last_wave: Optional[float] = None

    def reset(self):
        self._last_wave = None

    def create_vehicle(self, direction: Direction, vehicle_type: Optional[VehicleType] = None) -> Vehicle:
        vehicle_type = vehicle_type or self.roll_type()
        turn = self.roll_turn()

        # Turning vehicles queue in the lane their turn leaves from
        if turn == TurnIntent.RIGHT:
            lane_side = LaneSide.RIGHT
        elif turn == TurnIntent.LEFT:
            lane_side = LaneSide.LEFT
        else:
            lane_side = self.rng.choice([LaneSide.LEFT, LaneSide.RIGHT])

        x, y = self.geometry.spawn_point(direction, lane_side)
        speed = self.config.cruise_speed(vehicle_type)
        return Vehicle(
            type=vehicle_type,
            approach=direction,
            direction=direction,
            x=x,
            y=y,
            speed=speed,
            cruise_speed=speed,
            turn=turn,
            lane_side=lane_side,
        )

    def roll_type(self) -> VehicleType:
        types = list(VehicleType)
        weights = [self.config.spawn_weights.get(t.value, 0) for t in types]
        return self.rng.choices(types, weights=weights)[0]

    def roll_turn(self) -> TurnIntent:
        roll = self.rng.random()
        if roll < self.config.left_turn_chance:
            return TurnIntent.LEFT
        if roll < self.config.left_turn_chance + self.config.right_turn_chance:
            return TurnIntent.RIGHT
        return TurnIntent.NONE

    def due_approaches(self, now: float) -> List[Direction]:
        """One vehicle per approach every spawn interval."""
        if self._last_wave is not None and now - self._last_wave < self.config.spawn_interval:
            return []
        self._last_wave = now
        return list(Direction)

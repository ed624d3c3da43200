from typing import Dict
from pydantic import BaseModel, ConfigDict
from junction.domain.config import SimulationConfig
from junction.domain.models import (
    ControllerState, Direction, LightGroup, SignalState, Statistics, TrafficLight
)
from junction.kernel.arena import VehicleArena
from junction.kernel.lane_queue import LaneQueue


class IntersectionState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    tick_id: int = 0
    time: float = 0.0
    arena: VehicleArena
    queues: Dict[Direction, LaneQueue]
    lights: Dict[Direction, TrafficLight]
    controller: ControllerState
    stats: Statistics

    @classmethod
    def create(cls, config: SimulationConfig) -> "IntersectionState":
        controller = ControllerState(green_group=LightGroup.EAST_WEST)
        lights = {
            d: TrafficLight(
                direction=d,
                group=d.group,
                state=SignalState.GREEN if d.group == controller.green_group else SignalState.RED,
            )
            for d in Direction
        }
        return cls(
            arena=VehicleArena(config.max_active_vehicles),
            queues={d: LaneQueue(d) for d in Direction},
            lights=lights,
            controller=controller,
            stats=Statistics(),
        )

    def queued_count(self) -> int:
        return sum(q.size() for q in self.queues.values())

    def green_groups(self):
        return {light.group for light in self.lights.values() if light.state == SignalState.GREEN}

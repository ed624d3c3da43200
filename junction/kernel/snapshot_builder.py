from junction.domain.geometry import IntersectionGeometry
from junction.domain.models import (
    IntersectionSnapshot, LightView, StatisticsView, VehicleView
)
from junction.domain.state import IntersectionState

class SnapshotBuilder:
    def __init__(self, geometry: IntersectionGeometry):
        self.geometry = geometry

    def build(self, state: IntersectionState) -> IntersectionSnapshot:
        ctl = state.controller
        stats = state.stats
        return IntersectionSnapshot(
            tick=state.tick_id,
            time=state.time,
            mode=ctl.mode,
            greenGroup=ctl.green_group,
            overrideApproach=ctl.override_approach,
            vehicles=[
                VehicleView(
                    slot=v.slot,
                    type=v.type,
                    approach=v.approach,
                    direction=v.direction,
                    x=v.x,
                    y=v.y,
                    speed=v.speed,
                    state=v.state,
                    turn=v.turn,
                    laneSide=v.lane_side,
                    rect=self.geometry.rect(v)
                )
                for v in state.arena.vehicles()
            ],
            lights=[
                LightView(direction=l.direction, group=l.group, state=l.state)
                for l in state.lights.values()
            ],
            queueSizes={d: q.size() for d, q in state.queues.items()},
            lanePriorities=dict(ctl.lane_priorities),
            stats=StatisticsView(
                vehiclesSpawned=stats.vehicles_spawned,
                vehiclesPassed=stats.vehicles_passed,
                vehiclesPerMinute=stats.vehicles_per_minute,
                rejectedSpawns=stats.rejected_spawns,
                malformedRecords=stats.malformed_records,
                elapsed=stats.elapsed
            )
        )

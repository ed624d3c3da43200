import logging
import math
from typing import Dict, List, Optional, Tuple
from junction.domain.config import SimulationConfig
from junction.domain.geometry import IntersectionGeometry
from junction.domain.graph import MovementGraph
from junction.domain.models import (
    Direction, LaneSide, MotionState, SignalState, TrafficLight, TurnIntent, Vehicle
)

logger = logging.getLogger(__name__)

EPSILON = 1e-6
TURN_HOLD = 0.999  # arc fraction a turner waits at while its exit lane is occupied


class VehicleSystem:
    """Per-tick kinematics: light and spacing stops, deceleration, turns, exit."""

    def __init__(self, config: SimulationConfig, geometry: IntersectionGeometry, network: MovementGraph):
        self.config = config
        self.geometry = geometry
        self.network = network
        self.traffic: List[Vehicle] = []

    def update(self, vehicles: List[Vehicle], lights: Dict[Direction, TrafficLight]):
        self.traffic = vehicles
        for lane_vehicles in self.group_by_lane(vehicles).values():
            leader: Optional[Vehicle] = None
            for v in lane_vehicles:
                lane = (v.direction, v.lane_side)
                self.update_vehicle(v, leader, lights[v.direction])
                # A vehicle that finished its turn has left this lane
                if v.active and (v.direction, v.lane_side) == lane:
                    leader = v

    def group_by_lane(self, vehicles: List[Vehicle]) -> Dict[Tuple[Direction, LaneSide], List[Vehicle]]:
        """Active vehicles per (heading, lane side), leader first."""
        lanes: Dict[Tuple[Direction, LaneSide], List[Vehicle]] = {}
        for v in vehicles:
            if not v.active:
                continue
            lanes.setdefault((v.direction, v.lane_side), []).append(v)
        for lane_vehicles in lanes.values():
            lane_vehicles.sort(key=self.geometry.vehicle_progress, reverse=True)
        return lanes

    def update_vehicle(self, v: Vehicle, leader: Optional[Vehicle], light: TrafficLight):
        if not v.active:
            return

        if v.state == MotionState.TURNING:
            # Committed to the arc: no stopping until the turn completes
            step = v.speed * self.config.turn_speed_factor
            self._advance_turn(v, self._turn_room(v, leader, step))
        else:
            progress = self.geometry.vehicle_progress(v)
            stop_at = self.stop_point(v, progress, leader, light)
            self._apply_braking(v, stop_at)
            self._move_straight(v, progress, stop_at, leader)

        if self.geometry.is_outside(v.x, v.y):
            v.active = False

    def stop_point(self, v: Vehicle, progress: float, leader: Optional[Vehicle],
                   light: TrafficLight) -> Optional[float]:
        """Nearest progress the vehicle must not pass, if one is within the trigger window."""
        trigger = self.config.stop_trigger_distance
        candidates = []

        # Emergency vehicles never stop for the light
        if not v.is_emergency and light.state == SignalState.RED:
            stop_line = self.geometry.stop_line
            if progress <= stop_line + EPSILON and stop_line - progress <= trigger:
                candidates.append(stop_line)

        if leader is not None:
            leader_progress = self.geometry.progress(v.direction, leader.x, leader.y)
            behind_leader = leader_progress - self.config.min_following_distance
            if behind_leader - progress <= trigger:
                candidates.append(behind_leader)

        return min(candidates) if candidates else None

    def _apply_braking(self, v: Vehicle, stop_at: Optional[float]):
        if stop_at is None:
            if v.state in (MotionState.STOPPED, MotionState.DECELERATING):
                v.state = MotionState.MOVING
                v.speed = v.cruise_speed
            return

        if v.state == MotionState.STOPPED:
            v.speed = 0.0
            return

        v.state = MotionState.DECELERATING
        v.speed *= self.config.deceleration_factor
        if v.speed < self.config.stop_speed_threshold:
            v.speed = 0.0
            v.state = MotionState.STOPPED

    def _move_straight(self, v: Vehicle, progress: float, stop_at: Optional[float], leader: Optional[Vehicle]):
        new_progress = progress + v.speed
        if stop_at is not None and new_progress >= stop_at:
            # Never run past the stop point, never reverse
            new_progress = max(progress, stop_at)
            v.speed = 0.0
            v.state = MotionState.STOPPED

        v.x, v.y = self.geometry.to_world(v.direction, new_progress, self.geometry.lane_offset(v.lane_side))

        if v.turn != TurnIntent.NONE and v.state != MotionState.STOPPED:
            trigger = self.geometry.turn_trigger(v.turn)
            if new_progress >= trigger:
                self._start_turn(v, new_progress - trigger, leader)

    def _start_turn(self, v: Vehicle, overshoot: float, leader: Optional[Vehicle]):
        v.state = MotionState.TURNING
        v.speed = v.cruise_speed
        v.turn_progress = 0.0
        logger.debug("Vehicle %s from %s starts %s turn", v.slot, v.approach.value, v.turn.value)
        self._advance_turn(v, self._turn_room(v, leader, overshoot))

    def _turn_room(self, v: Vehicle, leader: Optional[Vehicle], distance: float) -> float:
        """Clamp an arc step so a follower on the same arc keeps the chord gap."""
        if leader is None or leader.state != MotionState.TURNING or leader.turn != v.turn:
            return distance
        radius = self.geometry.turn_radius(v.turn)
        gap = self.config.min_following_distance
        min_arc = 2 * radius * math.asin(min(1.0, gap / (2 * radius)))
        room = (leader.turn_progress - v.turn_progress) * self.geometry.arc_length(v.turn) - min_arc
        return max(0.0, min(distance, room))

    def _exit_clear(self, v: Vehicle, direction: Direction, side: LaneSide, exit_progress: float) -> bool:
        """True when no vehicle in the exit lane is within the following distance of the merge point."""
        gap = self.config.min_following_distance
        for other in self.traffic:
            if other is v or not other.active or other.state == MotionState.TURNING:
                continue
            if other.direction != direction or other.lane_side != side:
                continue
            offset = self.geometry.vehicle_progress(other) - exit_progress
            # A vehicle behind may still move this tick before it sees the merged one
            if -(gap + other.speed) < offset < gap:
                return False
        return True

    def _advance_turn(self, v: Vehicle, distance: float):
        fraction = v.turn_progress + distance / self.geometry.arc_length(v.turn)
        if fraction < 1.0:
            v.turn_progress = fraction
            v.x, v.y = self.geometry.arc_point(v.direction, v.turn, v.turn_progress)
            return

        end_x, end_y = self.geometry.arc_point(v.direction, v.turn, 1.0)
        new_direction = self.network.exit_for(v.direction, v.turn)
        new_side = v.lane_side.flipped
        exit_progress = self.geometry.progress(new_direction, end_x, end_y)
        if not self._exit_clear(v, new_direction, new_side, exit_progress):
            v.turn_progress = max(v.turn_progress, TURN_HOLD)
            v.x, v.y = self.geometry.arc_point(v.direction, v.turn, v.turn_progress)
            return

        v.x, v.y = self.geometry.to_world(new_direction, exit_progress, self.geometry.lane_offset(new_side))

        v.direction = new_direction
        v.lane_side = new_side
        v.turn = TurnIntent.NONE
        v.turn_progress = 0.0
        v.state = MotionState.MOVING

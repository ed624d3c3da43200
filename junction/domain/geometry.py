"""Intersection geometry.

Every position on an approach is described in the frame of a heading:
``progress`` runs along the heading and is zero at the intersection centre
(negative before it), ``offset`` runs to the right of the heading. Screen
coordinates grow to the right (x) and downwards (y).
"""
import math
from typing import Dict, Tuple

from junction.domain.config import SimulationConfig
from junction.domain.models import Direction, LaneSide, TurnIntent, Vehicle, Rect

HEADINGS: Dict[Direction, Tuple[float, float]] = {
    Direction.NORTH: (0.0, -1.0),
    Direction.SOUTH: (0.0, 1.0),
    Direction.EAST: (1.0, 0.0),
    Direction.WEST: (-1.0, 0.0),
}

# Lane a vehicle must occupy before turning, and the lane it leaves on
TURN_LANES = {
    TurnIntent.LEFT: (LaneSide.LEFT, LaneSide.RIGHT),
    TurnIntent.RIGHT: (LaneSide.RIGHT, LaneSide.LEFT),
}


def heading(direction: Direction) -> Tuple[float, float]:
    assert direction in HEADINGS, f"no geometry for heading {direction!r}"
    return HEADINGS[direction]


def right_of(direction: Direction) -> Tuple[float, float]:
    hx, hy = heading(direction)
    return -hy, hx


class IntersectionGeometry:
    def __init__(self, config: SimulationConfig):
        self.config = config
        self.cx = config.intersection_x
        self.cy = config.intersection_y
        self.stop_line = -config.lane_width
        self.clear_line = config.lane_width

        for turn in TURN_LANES:
            assert self.turn_trigger(turn) >= self.stop_line, (
                f"{turn.value} turn would start before the stop line"
            )

    def lane_offset(self, side: LaneSide) -> float:
        if side == LaneSide.LEFT:
            return self.config.lane_width / 4
        return self.config.lane_width * 3 / 4

    def to_world(self, direction: Direction, progress: float, offset: float) -> Tuple[float, float]:
        hx, hy = heading(direction)
        rx, ry = right_of(direction)
        return (self.cx + hx * progress + rx * offset,
                self.cy + hy * progress + ry * offset)

    def progress(self, direction: Direction, x: float, y: float) -> float:
        hx, hy = heading(direction)
        return (x - self.cx) * hx + (y - self.cy) * hy

    def vehicle_progress(self, vehicle: Vehicle) -> float:
        return self.progress(vehicle.direction, vehicle.x, vehicle.y)

    def spawn_progress(self, direction: Direction) -> float:
        inset = self.config.spawn_inset
        edge = {
            Direction.NORTH: (self.cx, self.config.window_height - inset),
            Direction.SOUTH: (self.cx, inset),
            Direction.EAST: (inset, self.cy),
            Direction.WEST: (self.config.window_width - inset, self.cy),
        }[direction]
        return self.progress(direction, *edge)

    def spawn_point(self, direction: Direction, side: LaneSide) -> Tuple[float, float]:
        return self.to_world(direction, self.spawn_progress(direction), self.lane_offset(side))

    # Turning

    def turn_radius(self, turn: TurnIntent) -> float:
        if turn == TurnIntent.LEFT:
            return self.config.left_turn_radius
        return self.config.right_turn_radius

    def turn_trigger(self, turn: TurnIntent) -> float:
        """Progress at which a turn starts so the arc ends on the exit lane centre."""
        assert turn in TURN_LANES, f"no turn geometry for {turn!r}"
        exit_offset = self.lane_offset(TURN_LANES[turn][1])
        radius = self.turn_radius(turn)
        if turn == TurnIntent.RIGHT:
            return -(exit_offset + radius)
        return exit_offset - radius

    def arc_length(self, turn: TurnIntent) -> float:
        return self.turn_radius(turn) * math.pi / 2

    def arc_point(self, direction: Direction, turn: TurnIntent, fraction: float) -> Tuple[float, float]:
        """Point on the quarter circle from the turn trigger to the exit lane."""
        hx, hy = heading(direction)
        rx, ry = right_of(direction)
        radius = self.turn_radius(turn)
        entry_offset = self.lane_offset(TURN_LANES[turn][0])
        sx, sy = self.to_world(direction, self.turn_trigger(turn), entry_offset)

        theta = min(max(fraction, 0.0), 1.0) * math.pi / 2
        # Centre lies one radius to the turning side of the start point
        side = 1.0 if turn == TurnIntent.RIGHT else -1.0
        ox, oy = sx + side * rx * radius, sy + side * ry * radius
        return (ox - side * rx * radius * math.cos(theta) + hx * radius * math.sin(theta),
                oy - side * ry * radius * math.cos(theta) + hy * radius * math.sin(theta))

    # Bounds

    def rect(self, vehicle: Vehicle) -> Rect:
        if vehicle.direction in (Direction.NORTH, Direction.SOUTH):
            w, h = self.config.vehicle_width, self.config.vehicle_length
        else:
            w, h = self.config.vehicle_length, self.config.vehicle_width
        return Rect(x=vehicle.x - w / 2, y=vehicle.y - h / 2, w=w, h=h)

    def is_outside(self, x: float, y: float) -> bool:
        m = self.config.exit_margin
        return (x < -m or x > self.config.window_width + m or
                y < -m or y > self.config.window_height + m)

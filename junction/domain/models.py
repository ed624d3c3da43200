from enum import Enum
from typing import List, Optional, Dict
from pydantic import BaseModel, Field


class Direction(str, Enum):
    # Order matches the integer codes used by lane feeds
    NORTH = "NORTH"
    SOUTH = "SOUTH"
    EAST = "EAST"
    WEST = "WEST"

    @property
    def group(self) -> "LightGroup":
        if self in (Direction.NORTH, Direction.SOUTH):
            return LightGroup.NORTH_SOUTH
        return LightGroup.EAST_WEST


class LightGroup(str, Enum):
    NORTH_SOUTH = "NORTH_SOUTH"
    EAST_WEST = "EAST_WEST"

    @property
    def other(self) -> "LightGroup":
        if self == LightGroup.NORTH_SOUTH:
            return LightGroup.EAST_WEST
        return LightGroup.NORTH_SOUTH


class SignalState(str, Enum):
    RED = "RED"
    GREEN = "GREEN"


class VehicleType(str, Enum):
    REGULAR_CAR = "REGULAR_CAR"
    AMBULANCE = "AMBULANCE"
    POLICE_CAR = "POLICE_CAR"
    FIRE_TRUCK = "FIRE_TRUCK"

    @property
    def is_emergency(self) -> bool:
        # All emergency types share the same precedence
        return self != VehicleType.REGULAR_CAR


class MotionState(str, Enum):
    MOVING = "MOVING"
    DECELERATING = "DECELERATING"
    STOPPED = "STOPPED"
    TURNING = "TURNING"


class TurnIntent(str, Enum):
    NONE = "NONE"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class LaneSide(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"

    @property
    def flipped(self) -> "LaneSide":
        return LaneSide.RIGHT if self == LaneSide.LEFT else LaneSide.LEFT


class ControllerMode(str, Enum):
    NORMAL = "NORMAL"
    EMERGENCY_OVERRIDE = "EMERGENCY_OVERRIDE"
    CONGESTION_OVERRIDE = "CONGESTION_OVERRIDE"


class LanePriority(str, Enum):
    NORMAL = "NORMAL"
    HIGH = "HIGH"


class Vehicle(BaseModel):
    type: VehicleType = VehicleType.REGULAR_CAR
    approach: Direction   # fixed at spawn
    direction: Direction  # current heading, changes when a turn completes
    x: float
    y: float
    speed: float
    cruise_speed: float   # speed to resume after stopping
    state: MotionState = MotionState.MOVING
    turn: TurnIntent = TurnIntent.NONE
    lane_side: LaneSide = LaneSide.RIGHT
    active: bool = False
    slot: Optional[int] = None
    turn_progress: float = 0.0  # 0..1 along the turn arc

    @property
    def is_emergency(self) -> bool:
        return self.type.is_emergency


class TrafficLight(BaseModel):
    direction: Direction
    group: LightGroup
    state: SignalState


class ControllerState(BaseModel):
    mode: ControllerMode = ControllerMode.NORMAL
    mode_since: float = 0.0
    override_approach: Optional[Direction] = None
    green_group: LightGroup = LightGroup.EAST_WEST
    last_switch: Optional[float] = None
    lane_priorities: Dict[Direction, LanePriority] = Field(
        default_factory=lambda: {d: LanePriority.NORMAL for d in Direction}
    )


class Statistics(BaseModel):
    vehicles_spawned: int = 0
    vehicles_passed: int = 0
    vehicles_per_minute: float = 0.0
    rejected_spawns: int = 0
    malformed_records: int = 0
    start_time: Optional[float] = None
    elapsed: float = 0.0

    def refresh(self, now: float) -> float:
        if self.start_time is None:
            self.start_time = now
        self.elapsed = max(0.0, now - self.start_time)
        minutes = self.elapsed / 60.0
        self.vehicles_per_minute = self.vehicles_passed / minutes if minutes > 0 else 0.0
        return self.vehicles_per_minute


# API/Response Models

class SpawnRequest(BaseModel):
    direction: Direction
    type: Optional[VehicleType] = None


class SpawnResult(BaseModel):
    accepted: bool
    direction: Direction
    type: Optional[VehicleType] = None
    queueSize: int
    reason: Optional[str] = None


class FeedBatch(BaseModel):
    lines: List[str]


class FeedResult(BaseModel):
    accepted: int
    rejected: int
    skipped: int


class Rect(BaseModel):
    x: float
    y: float
    w: float
    h: float


class VehicleView(BaseModel):
    slot: int
    type: VehicleType
    approach: Direction
    direction: Direction
    x: float
    y: float
    speed: float
    state: MotionState
    turn: TurnIntent
    laneSide: LaneSide
    rect: Rect


class LightView(BaseModel):
    direction: Direction
    group: LightGroup
    state: SignalState


class StatisticsView(BaseModel):
    vehiclesSpawned: int
    vehiclesPassed: int
    vehiclesPerMinute: float
    rejectedSpawns: int
    malformedRecords: int
    elapsed: float


class IntersectionSnapshot(BaseModel):
    tick: int
    time: float
    mode: ControllerMode
    greenGroup: LightGroup
    overrideApproach: Optional[Direction] = None
    vehicles: List[VehicleView]
    lights: List[LightView]
    queueSizes: Dict[Direction, int]
    lanePriorities: Dict[Direction, LanePriority]
    stats: StatisticsView


class TickSummary(BaseModel):
    tick: int
    time: float
    admitted: int
    retired: int
    active: int
    queued: int
    mode: ControllerMode
    greenGroup: LightGroup

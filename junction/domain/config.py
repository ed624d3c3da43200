# Simulation Configuration
import json
import logging
import os
from typing import Dict, Optional

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

# Screen / Geometry
WINDOW_WIDTH = 800.0
WINDOW_HEIGHT = 600.0
INTERSECTION_X = WINDOW_WIDTH / 2
INTERSECTION_Y = WINDOW_HEIGHT / 2
LANE_WIDTH = 80.0
EXIT_MARGIN = 100.0      # Distance beyond a screen edge before a vehicle is retired
SPAWN_INSET = 20.0       # Spawn point distance from the screen edge
VEHICLE_WIDTH = 20.0
VEHICLE_LENGTH = 30.0

# Signal Timings
LIGHT_CYCLE = 5.0        # Seconds between normal phase changes
EMERGENCY_MIN_HOLD = 5.0
CONGESTION_SET = 10      # Queue size above which a lane becomes high priority
CONGESTION_RESET = 5     # Queue size below which it returns to normal

# Vehicle Kinematics (distance per tick)
STOP_TRIGGER_DISTANCE = 40.0
MIN_FOLLOWING_DISTANCE = 45.0
DECELERATION_FACTOR = 0.9
STOP_SPEED_THRESHOLD = 0.1
TURN_SPEED_FACTOR = 0.5
RIGHT_TURN_RADIUS = LANE_WIDTH / 4
LEFT_TURN_RADIUS = LANE_WIDTH * 1.5

CRUISE_SPEEDS = {
    "REGULAR_CAR": 2.0,
    "AMBULANCE": 4.0,
    "POLICE_CAR": 4.0,
    "FIRE_TRUCK": 3.5,
}

# Spawning
SPAWN_WEIGHTS = {
    "REGULAR_CAR": 85,
    "AMBULANCE": 5,
    "POLICE_CAR": 5,
    "FIRE_TRUCK": 5,
}
LEFT_TURN_CHANCE = 0.15
RIGHT_TURN_CHANCE = 0.15
SPAWN_INTERVAL = 2.0     # Seconds between generator waves (one vehicle per approach)
AUTO_SPAWN = True

# Capacity
MAX_ACTIVE_VEHICLES = 200
QUEUE_CAPACITY = 50

# Kernel
TICK_DT = 0.05
SEED = 42


class SimulationConfig(BaseModel):
    window_width: float = WINDOW_WIDTH
    window_height: float = WINDOW_HEIGHT
    intersection_x: float = INTERSECTION_X
    intersection_y: float = INTERSECTION_Y
    lane_width: float = LANE_WIDTH
    exit_margin: float = EXIT_MARGIN
    spawn_inset: float = SPAWN_INSET
    vehicle_width: float = VEHICLE_WIDTH
    vehicle_length: float = VEHICLE_LENGTH

    light_cycle: float = LIGHT_CYCLE
    emergency_min_hold: float = EMERGENCY_MIN_HOLD
    congestion_set: int = CONGESTION_SET
    congestion_reset: int = CONGESTION_RESET

    stop_trigger_distance: float = STOP_TRIGGER_DISTANCE
    min_following_distance: float = MIN_FOLLOWING_DISTANCE
    deceleration_factor: float = DECELERATION_FACTOR
    stop_speed_threshold: float = STOP_SPEED_THRESHOLD
    turn_speed_factor: float = TURN_SPEED_FACTOR
    right_turn_radius: float = RIGHT_TURN_RADIUS
    left_turn_radius: float = LEFT_TURN_RADIUS
    cruise_speeds: Dict[str, float] = dict(CRUISE_SPEEDS)

    spawn_weights: Dict[str, int] = dict(SPAWN_WEIGHTS)
    left_turn_chance: float = LEFT_TURN_CHANCE
    right_turn_chance: float = RIGHT_TURN_CHANCE
    spawn_interval: float = SPAWN_INTERVAL
    auto_spawn: bool = AUTO_SPAWN

    max_active_vehicles: int = MAX_ACTIVE_VEHICLES
    queue_capacity: int = QUEUE_CAPACITY

    dt: float = TICK_DT
    seed: int = SEED

    def cruise_speed(self, vehicle_type) -> float:
        return self.cruise_speeds[vehicle_type.value]


def load_config(path: Optional[str], base: Optional[SimulationConfig] = None) -> SimulationConfig:
    """Overlay a JSON file on top of ``base`` (defaults when omitted).

    A missing or invalid file leaves the base configuration untouched.
    """
    base = base or SimulationConfig()
    if not path or not os.path.exists(path):
        return base
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        cfg = SimulationConfig.model_validate({**base.model_dump(), **data})
        logger.info("Loaded config from %s", path)
        return cfg
    except (OSError, ValueError, ValidationError) as e:
        logger.error("Failed to load config %s: %s", path, e)
        return base

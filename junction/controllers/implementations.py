from typing import Any, Optional
from junction.arbitration.emergency_arbitrator import EmergencyArbitrator
from junction.controllers.base import Controller, PreemptionController
from junction.domain.config import SimulationConfig
from junction.domain.models import ControllerMode, Direction, LightGroup, LanePriority, SignalState

class FixedController(Controller):
    """Alternates the green group every light cycle."""

    def __init__(self, config: SimulationConfig):
        self.config = config

    def run_tick(self, state: Any, now: float) -> Optional[LightGroup]:
        ctl = state.controller
        if ctl.last_switch is None:
            ctl.last_switch = now
            return None
        if now - ctl.last_switch >= self.config.light_cycle:
            ctl.last_switch = now
            return ctl.green_group.other
        return None

class EmergencyController(PreemptionController):
    mode = ControllerMode.EMERGENCY_OVERRIDE

    def __init__(self, config: SimulationConfig, arbitrator: EmergencyArbitrator):
        self.config = config
        self.arbitrator = arbitrator

    def run_tick(self, state: Any, now: float) -> Optional[Direction]:
        ctl = state.controller
        present = self.arbitrator.approaches_with_emergency(state)

        if ctl.mode == self.mode:
            held = now - ctl.mode_since
            if ctl.override_approach in present or held < self.config.emergency_min_hold:
                return ctl.override_approach

        if not present:
            return None
        # Prefer an approach that is already green to avoid a needless switch
        green = [d for d in present if state.lights[d].state == SignalState.GREEN]
        return (green or present)[0]

class CongestionController(PreemptionController):
    mode = ControllerMode.CONGESTION_OVERRIDE

    def __init__(self, config: SimulationConfig):
        self.config = config

    def run_tick(self, state: Any, now: float) -> Optional[Direction]:
        ctl = state.controller
        high = [d for d in Direction if ctl.lane_priorities[d] == LanePriority.HIGH]

        if ctl.mode == self.mode and ctl.override_approach in high:
            return ctl.override_approach
        if not high:
            return None
        return max(high, key=lambda d: state.queues[d].size())

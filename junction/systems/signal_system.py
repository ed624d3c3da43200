import logging
from typing import List
from junction.arbitration.emergency_arbitrator import EmergencyArbitrator
from junction.controllers.base import PreemptionController
from junction.controllers.implementations import (
    CongestionController, EmergencyController, FixedController
)
from junction.domain.config import SimulationConfig
from junction.domain.models import ControllerMode, Direction, LanePriority, LightGroup, SignalState
from junction.domain.state import IntersectionState

logger = logging.getLogger(__name__)


class SignalSystem:
    """Traffic light controller.

    Policies run in priority order: emergency preemption, congestion
    preemption, then the fixed cycle. The north-south and east-west groups
    are always switched together, so exactly one group is green.
    """

    def __init__(self, config: SimulationConfig, arbitrator: EmergencyArbitrator):
        self.config = config
        self.preemption: List[PreemptionController] = [
            EmergencyController(config, arbitrator),
            CongestionController(config),
        ]
        self.cycle = FixedController(config)

    def evaluate(self, state: IntersectionState, now: float):
        self.refresh_lane_priorities(state)

        for controller in self.preemption:
            approach = controller.run_tick(state, now)
            if approach is not None:
                self._enter_override(state, controller.mode, approach, now)
                self.set_green(state, approach.group)
                return

        ctl = state.controller
        if ctl.mode != ControllerMode.NORMAL:
            logger.info("Released %s on %s, resuming normal cycle", ctl.mode.value, ctl.override_approach.value)
            ctl.mode = ControllerMode.NORMAL
            ctl.mode_since = now
            ctl.override_approach = None
            ctl.last_switch = now

        group = self.cycle.run_tick(state, now)
        if group is not None:
            self.set_green(state, group)

    def refresh_lane_priorities(self, state: IntersectionState):
        priorities = state.controller.lane_priorities
        for d, queue in state.queues.items():
            size = queue.size()
            if size > self.config.congestion_set:
                if priorities[d] != LanePriority.HIGH:
                    logger.info("Lane %s congested (%d queued)", d.value, size)
                priorities[d] = LanePriority.HIGH
            elif size < self.config.congestion_reset:
                priorities[d] = LanePriority.NORMAL

    def set_green(self, state: IntersectionState, group: LightGroup):
        for light in state.lights.values():
            light.state = SignalState.GREEN if light.group == group else SignalState.RED
        state.controller.green_group = group
        assert state.green_groups() == {group}, "both signal groups green"

    def _enter_override(self, state: IntersectionState, mode: ControllerMode, approach: Direction, now: float):
        ctl = state.controller
        if ctl.mode == mode and ctl.override_approach == approach:
            return
        logger.info("%s: forcing %s green for %s", mode.value, approach.group.value, approach.value)
        ctl.mode = mode
        ctl.mode_since = now
        ctl.override_approach = approach

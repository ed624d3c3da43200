import logging
import random
from typing import Optional
from junction.arbitration.emergency_arbitrator import EmergencyArbitrator
from junction.domain.config import SimulationConfig
from junction.domain.geometry import HEADINGS, IntersectionGeometry
from junction.domain.graph import MovementGraph
from junction.domain.models import (
    Direction, IntersectionSnapshot, SpawnResult, Statistics, TickSummary, Vehicle, VehicleType
)
from junction.domain.state import IntersectionState
from junction.kernel.command_queue import CommandQueue
from junction.kernel.commands import Command
from junction.kernel.snapshot_builder import SnapshotBuilder
from junction.systems.signal_system import SignalSystem
from junction.systems.spawn_system import SpawnSystem
from junction.systems.vehicle_system import VehicleSystem

logger = logging.getLogger(__name__)


class SimulationKernel:
    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()
        self.dt = self.config.dt
        self.state = IntersectionState.create(self.config)
        self.command_queue = CommandQueue()
        self.initialized = False

        self.rng = random.Random(self.config.seed)
        self.geometry = IntersectionGeometry(self.config)
        self.network = MovementGraph.from_headings(HEADINGS)
        self.vehicle_system = VehicleSystem(self.config, self.geometry, self.network)
        self.signal_system = SignalSystem(self.config, EmergencyArbitrator(self.geometry))
        self.spawn_system = SpawnSystem(self.config, self.geometry, self.rng)
        self.snapshot_builder = SnapshotBuilder(self.geometry)
        self._snapshot: Optional[IntersectionSnapshot] = None

    def initialize(self, seed: Optional[int] = None):
        seed = self.config.seed if seed is None else seed
        self.rng.seed(seed)
        self.state = IntersectionState.create(self.config)
        self.command_queue.discard()
        self.spawn_system.reset()
        self._snapshot = None
        self.initialized = True
        logger.info("Kernel Initialized (Seed: %s)", seed)

    def ensure_initialized(self):
        if not self.initialized:
            self.initialize()

    def queue_command(self, command: Command):
        self.command_queue.add(command)

    def request_spawn(self, direction: Direction, vehicle_type: Optional[VehicleType] = None) -> SpawnResult:
        """Queue a new vehicle on an approach; rejected when that queue is full."""
        self.ensure_initialized()

        queue = self.state.queues[direction]
        if queue.size() >= self.config.queue_capacity:
            self.state.stats.rejected_spawns += 1
            logger.debug("Spawn on %s rejected: queue full", direction.value)
            return SpawnResult(accepted=False, direction=direction, type=vehicle_type,
                               queueSize=queue.size(), reason="queue full")

        vehicle = self.spawn_system.create_vehicle(direction, vehicle_type)
        queue.enqueue(vehicle)
        self.state.stats.vehicles_spawned += 1
        return SpawnResult(accepted=True, direction=direction, type=vehicle.type, queueSize=queue.size())

    def run_tick(self, now: Optional[float] = None) -> TickSummary:
        self.ensure_initialized()
        now = self.state.tick_id * self.dt if now is None else now

        # 1. Spawn requests
        for cmd in self.command_queue.drain():
            cmd.execute(self)
        if self.config.auto_spawn:
            for direction in self.spawn_system.due_approaches(now):
                self.request_spawn(direction)

        # 2. Signals
        self.signal_system.evaluate(self.state, now)

        # 3. Admission
        admitted = self._admit_vehicles()

        # 4. Kinematics
        self.vehicle_system.update(list(self.state.arena.vehicles()), self.state.lights)

        # 5. Retirement
        retired = self._retire_vehicles()

        # 6. Statistics, time advance
        self.state.stats.refresh(now)
        self.state.tick_id += 1
        self.state.time = self.state.tick_id * self.dt
        self._publish_snapshot()

        return TickSummary(
            tick=self.state.tick_id,
            time=now,
            admitted=admitted,
            retired=retired,
            active=len(self.state.arena),
            queued=self.state.queued_count(),
            mode=self.state.controller.mode,
            greenGroup=self.state.controller.green_group
        )

    def _admit_vehicles(self) -> int:
        # Round-robin over approaches so one long queue cannot take every free slot
        arena = self.state.arena
        admitted = 0
        progress = True
        while progress and not arena.is_full:
            progress = False
            for direction in Direction:
                if arena.is_full:
                    break
                queue = self.state.queues[direction]
                head = queue.peek()
                if head is None or not self._spawn_clear(head):
                    continue
                queue.dequeue()
                slot = arena.admit(head)
                admitted += 1
                progress = True
                logger.debug("Admitted %s on %s into slot %d", head.type.value, direction.value, slot)
        return admitted

    def _spawn_clear(self, vehicle: Vehicle) -> bool:
        spawn_progress = self.geometry.vehicle_progress(vehicle)
        for other in self.state.arena.vehicles():
            if other.direction != vehicle.direction or other.lane_side != vehicle.lane_side:
                continue
            gap = self.geometry.vehicle_progress(other) - spawn_progress
            if gap < self.config.min_following_distance:
                return False
        return True

    def _retire_vehicles(self) -> int:
        retired = 0
        for vehicle in list(self.state.arena.vehicles()):
            if vehicle.active:
                continue
            slot = vehicle.slot
            self.state.arena.release(slot)
            self.state.stats.vehicles_passed += 1
            retired += 1
            logger.debug("Retired %s from slot %d (approach %s)", vehicle.type.value, slot, vehicle.approach.value)
        return retired

    def drain_queues(self) -> int:
        dropped = 0
        for queue in self.state.queues.values():
            dropped += len(queue.clear())
        return dropped

    def shutdown(self) -> int:
        """Discard pending commands, queued and active vehicles."""
        dropped_commands = self.command_queue.discard()
        dropped = self.drain_queues()
        active = len(self.state.arena.clear())
        logger.info("Kernel shut down: discarded %d queued, %d active vehicles and %d commands",
                    dropped, active, dropped_commands)
        return dropped + active

    def _publish_snapshot(self):
        self._snapshot = self.snapshot_builder.build(self.state)

    # Getters for API
    def snapshot(self) -> IntersectionSnapshot:
        # Published at tick boundaries; never observed mid-tick
        if self._snapshot is None:
            self._publish_snapshot()
        return self._snapshot

    def get_statistics(self) -> Statistics:
        return self.state.stats

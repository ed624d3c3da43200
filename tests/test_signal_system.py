import unittest
from junction.arbitration.emergency_arbitrator import EmergencyArbitrator
from junction.domain.config import SimulationConfig
from junction.domain.geometry import IntersectionGeometry
from junction.domain.models import (
    ControllerMode, Direction, LanePriority, LaneSide, LightGroup, SignalState, Vehicle, VehicleType
)
from junction.domain.state import IntersectionState
from junction.systems.signal_system import SignalSystem


class SignalSystemTestCase(unittest.TestCase):
    def setUp(self):
        self.config = SimulationConfig()
        self.geometry = IntersectionGeometry(self.config)
        self.state = IntersectionState.create(self.config)
        self.system = SignalSystem(self.config, EmergencyArbitrator(self.geometry))

    def vehicle(self, direction, vehicle_type=VehicleType.REGULAR_CAR, progress=None):
        if progress is None:
            progress = self.geometry.spawn_progress(direction)
        x, y = self.geometry.to_world(direction, progress, self.geometry.lane_offset(LaneSide.RIGHT))
        speed = self.config.cruise_speed(vehicle_type)
        return Vehicle(type=vehicle_type, approach=direction, direction=direction,
                       x=x, y=y, speed=speed, cruise_speed=speed)

    def fill(self, direction, count, vehicle_type=VehicleType.REGULAR_CAR):
        for _ in range(count):
            self.state.queues[direction].enqueue(self.vehicle(direction, vehicle_type))

    def drain_to(self, direction, count):
        queue = self.state.queues[direction]
        while queue.size() > count:
            queue.dequeue()

    def assert_green(self, group):
        self.assertEqual(self.state.controller.green_group, group)
        for light in self.state.lights.values():
            expected = SignalState.GREEN if light.group == group else SignalState.RED
            self.assertEqual(light.state, expected)


class TestFixedCycle(SignalSystemTestCase):
    def test_starts_east_west(self):
        self.system.evaluate(self.state, 0.0)
        self.assert_green(LightGroup.EAST_WEST)
        self.assertEqual(self.state.controller.mode, ControllerMode.NORMAL)

    def test_switches_every_cycle(self):
        self.system.evaluate(self.state, 0.0)
        self.system.evaluate(self.state, 4.95)
        self.assert_green(LightGroup.EAST_WEST)

        self.system.evaluate(self.state, 5.0)
        self.assert_green(LightGroup.NORTH_SOUTH)

        self.system.evaluate(self.state, 10.0)
        self.assert_green(LightGroup.EAST_WEST)

    def test_set_green_switches_whole_group(self):
        self.system.set_green(self.state, LightGroup.NORTH_SOUTH)
        self.assertEqual(self.state.green_groups(), {LightGroup.NORTH_SOUTH})


class TestCongestion(SignalSystemTestCase):
    def test_congested_lane_forces_green(self):
        self.fill(Direction.NORTH, 12)
        self.system.evaluate(self.state, 0.0)

        ctl = self.state.controller
        self.assertEqual(ctl.lane_priorities[Direction.NORTH], LanePriority.HIGH)
        self.assertEqual(ctl.mode, ControllerMode.CONGESTION_OVERRIDE)
        self.assertEqual(ctl.override_approach, Direction.NORTH)
        self.assert_green(LightGroup.NORTH_SOUTH)

    def test_exactly_threshold_is_not_congested(self):
        self.fill(Direction.NORTH, 10)
        self.system.evaluate(self.state, 0.0)
        self.assertEqual(self.state.controller.lane_priorities[Direction.NORTH], LanePriority.NORMAL)
        self.assertEqual(self.state.controller.mode, ControllerMode.NORMAL)

    def test_hysteresis(self):
        self.fill(Direction.NORTH, 12)
        self.system.evaluate(self.state, 0.0)

        # Between the thresholds the lane keeps its priority
        self.drain_to(Direction.NORTH, 7)
        self.system.evaluate(self.state, 1.0)
        self.assertEqual(self.state.controller.lane_priorities[Direction.NORTH], LanePriority.HIGH)
        self.assertEqual(self.state.controller.mode, ControllerMode.CONGESTION_OVERRIDE)

        self.drain_to(Direction.NORTH, 4)
        self.system.evaluate(self.state, 2.0)
        ctl = self.state.controller
        self.assertEqual(ctl.lane_priorities[Direction.NORTH], LanePriority.NORMAL)
        self.assertEqual(ctl.mode, ControllerMode.NORMAL)
        self.assertIsNone(ctl.override_approach)
        self.assertEqual(ctl.last_switch, 2.0)

    def test_congestion_overrides_cycle(self):
        self.fill(Direction.WEST, 15)
        self.system.evaluate(self.state, 0.0)
        self.system.evaluate(self.state, 20.0)
        self.assert_green(LightGroup.EAST_WEST)

    def test_largest_queue_wins(self):
        self.fill(Direction.EAST, 11)
        self.fill(Direction.SOUTH, 14)
        self.system.evaluate(self.state, 0.0)
        self.assertEqual(self.state.controller.override_approach, Direction.SOUTH)
        self.assert_green(LightGroup.NORTH_SOUTH)


class TestEmergency(SignalSystemTestCase):
    def test_emergency_beats_congestion(self):
        self.fill(Direction.NORTH, 12)
        self.fill(Direction.EAST, 1, VehicleType.AMBULANCE)
        self.system.evaluate(self.state, 0.0)

        ctl = self.state.controller
        self.assertEqual(ctl.mode, ControllerMode.EMERGENCY_OVERRIDE)
        self.assertEqual(ctl.override_approach, Direction.EAST)
        self.assert_green(LightGroup.EAST_WEST)

    def test_forces_red_approach_green(self):
        self.fill(Direction.SOUTH, 1, VehicleType.POLICE_CAR)
        self.system.evaluate(self.state, 0.0)
        self.assert_green(LightGroup.NORTH_SOUTH)

    def test_prefers_green_approach(self):
        self.fill(Direction.NORTH, 1, VehicleType.FIRE_TRUCK)
        self.fill(Direction.WEST, 1, VehicleType.FIRE_TRUCK)
        self.system.evaluate(self.state, 0.0)
        self.assertEqual(self.state.controller.override_approach, Direction.WEST)

    def test_minimum_hold(self):
        self.fill(Direction.NORTH, 1, VehicleType.AMBULANCE)
        self.system.evaluate(self.state, 0.0)
        self.state.queues[Direction.NORTH].clear()

        self.system.evaluate(self.state, 1.0)
        self.assertEqual(self.state.controller.mode, ControllerMode.EMERGENCY_OVERRIDE)
        self.assert_green(LightGroup.NORTH_SOUTH)

        self.system.evaluate(self.state, 5.0)
        self.assertEqual(self.state.controller.mode, ControllerMode.NORMAL)

    def test_holds_while_present(self):
        self.fill(Direction.NORTH, 1, VehicleType.AMBULANCE)
        self.system.evaluate(self.state, 0.0)
        self.system.evaluate(self.state, 30.0)
        self.assertEqual(self.state.controller.mode, ControllerMode.EMERGENCY_OVERRIDE)
        self.assert_green(LightGroup.NORTH_SOUTH)

    def test_active_emergency_holds_until_cleared(self):
        ambulance = self.vehicle(Direction.NORTH, VehicleType.AMBULANCE, progress=-20.0)
        self.state.arena.admit(ambulance)
        self.system.evaluate(self.state, 0.0)
        self.assertEqual(self.state.controller.mode, ControllerMode.EMERGENCY_OVERRIDE)

        x, y = self.geometry.to_world(Direction.NORTH, 100.0, self.geometry.lane_offset(LaneSide.RIGHT))
        ambulance.x, ambulance.y = x, y
        self.system.evaluate(self.state, 6.0)
        self.assertEqual(self.state.controller.mode, ControllerMode.NORMAL)

    def test_cleared_emergency_not_present(self):
        ambulance = self.vehicle(Direction.NORTH, VehicleType.AMBULANCE, progress=100.0)
        self.state.arena.admit(ambulance)
        self.system.evaluate(self.state, 0.0)
        self.assertEqual(self.state.controller.mode, ControllerMode.NORMAL)

    def test_switches_approach_after_hold(self):
        self.fill(Direction.EAST, 1, VehicleType.AMBULANCE)
        self.system.evaluate(self.state, 0.0)

        self.state.queues[Direction.EAST].clear()
        self.fill(Direction.NORTH, 1, VehicleType.AMBULANCE)
        self.system.evaluate(self.state, 2.0)
        self.assertEqual(self.state.controller.override_approach, Direction.EAST)
        self.assert_green(LightGroup.EAST_WEST)

        self.system.evaluate(self.state, 5.0)
        ctl = self.state.controller
        self.assertEqual(ctl.mode, ControllerMode.EMERGENCY_OVERRIDE)
        self.assertEqual(ctl.override_approach, Direction.NORTH)
        self.assertEqual(ctl.mode_since, 5.0)
        self.assert_green(LightGroup.NORTH_SOUTH)

    def test_release_restarts_cycle(self):
        self.fill(Direction.NORTH, 1, VehicleType.AMBULANCE)
        self.system.evaluate(self.state, 0.0)
        self.state.queues[Direction.NORTH].clear()
        self.system.evaluate(self.state, 6.0)

        # Full cycle from the release before the next switch
        self.system.evaluate(self.state, 10.0)
        self.assert_green(LightGroup.NORTH_SOUTH)
        self.system.evaluate(self.state, 11.0)
        self.assert_green(LightGroup.EAST_WEST)


class TestArbitrator(SignalSystemTestCase):
    def test_turned_vehicle_has_cleared(self):
        arbitrator = EmergencyArbitrator(self.geometry)
        v = self.vehicle(Direction.NORTH, VehicleType.POLICE_CAR, progress=-30.0)
        self.assertFalse(arbitrator.has_cleared(v))
        v.direction = Direction.EAST
        self.assertTrue(arbitrator.has_cleared(v))

    def test_reports_in_direction_order(self):
        arbitrator = EmergencyArbitrator(self.geometry)
        self.fill(Direction.WEST, 1, VehicleType.AMBULANCE)
        self.fill(Direction.NORTH, 1, VehicleType.AMBULANCE)
        self.fill(Direction.SOUTH, 1)
        self.assertEqual(arbitrator.approaches_with_emergency(self.state),
                         [Direction.NORTH, Direction.WEST])


if __name__ == '__main__':
    unittest.main()

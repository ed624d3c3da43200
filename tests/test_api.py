import unittest
from fastapi.testclient import TestClient
from junction import main
from junction.domain.models import Direction


class TestApi(unittest.TestCase):
    def setUp(self):
        # The lifespan loop is not started; ticks are driven by hand
        main.kernel.initialize()
        self.client = TestClient(main.app)

    def test_root(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["tick"], 0)

    def test_state(self):
        main.kernel.request_spawn(Direction.NORTH)
        main.kernel.run_tick()
        response = self.client.get("/api/intersection/state")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["tick"], 1)
        self.assertEqual(len(body["lights"]), 4)
        self.assertIn("queueSizes", body)
        self.assertIn(body["greenGroup"], ("NORTH_SOUTH", "EAST_WEST"))

    def test_stats(self):
        main.kernel.run_tick()
        response = self.client.get("/api/intersection/stats")
        self.assertEqual(response.status_code, 200)
        self.assertIn("vehiclesPerMinute", response.json())

    def test_spawn_until_full(self):
        for _ in range(50):
            response = self.client.post("/api/vehicles/spawn", json={"direction": "NORTH", "type": "REGULAR_CAR"})
            self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["queueSize"], 50)

        response = self.client.post("/api/vehicles/spawn", json={"direction": "NORTH"})
        self.assertEqual(response.status_code, 429)

    def test_spawn_invalid(self):
        response = self.client.post("/api/vehicles/spawn", json={"direction": "UP"})
        self.assertEqual(response.status_code, 422)
        response = self.client.post("/api/vehicles/spawn", json={"direction": "EAST", "type": "BUS"})
        self.assertEqual(response.status_code, 422)

    def test_feed(self):
        response = self.client.post("/api/feed", json={"lines": ["0,0,2.0", "broken", "2,EAST,4"]})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"accepted": 2, "rejected": 0, "skipped": 1})
        self.assertEqual(main.kernel.state.queued_count(), 2)

    def test_drain_applied_at_next_tick(self):
        for _ in range(3):
            main.kernel.request_spawn(Direction.WEST)
        response = self.client.post("/api/queues/drain")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "queued"})
        self.assertEqual(main.kernel.state.queued_count(), 3)

        main.kernel.run_tick()
        self.assertEqual(main.kernel.state.queued_count(), 0)


if __name__ == '__main__':
    unittest.main()

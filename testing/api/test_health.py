"""Tests for health check endpoints."""

import unittest
from datetime import UTC, datetime, timedelta

from testing.api.fixtures import build_test_client, build_test_services


class TestHealthEndpoint(unittest.TestCase):
    """Tests for /health endpoint."""

    def setUp(self) -> None:
        """Set up test client."""
        self.services = build_test_services()
        self.app, self.client = build_test_client(self.services)

    def test_health_check_returns_200(self) -> None:
        """Test that health check returns 200 OK."""
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)

    def test_health_check_returns_healthy_status(self) -> None:
        """Test that health check returns healthy status and version."""
        data = self.client.get("/health").json()

        self.assertEqual(data["status"], "healthy")
        self.assertEqual(data["version"], "0.1.0")

    def test_poller_not_running_without_lifespan(self) -> None:
        """Test the poller is reported stopped when the lifespan has not run."""
        data = self.client.get("/health").json()
        self.assertFalse(data["reminder_poller"])

    def test_starting_before_services_are_built(self) -> None:
        """Test the status is "starting" until services are attached."""
        self.app.state.services = None

        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "starting")

    def test_health_check_does_not_need_auth(self) -> None:
        """Test that health check is public."""
        response = self.client.get("/health", headers={"Authorization": "Bearer wrong"})
        self.assertEqual(response.status_code, 200)

    def test_health_check_reports_uptime(self) -> None:
        """Test that uptime is measured from the service start time."""
        self.app.state.started_at = datetime.now(UTC) - timedelta(minutes=5)

        data = self.client.get("/health").json()

        self.assertGreaterEqual(data["uptime_seconds"], 300)
        self.assertLess(data["uptime_seconds"], 400)


if __name__ == "__main__":
    unittest.main()

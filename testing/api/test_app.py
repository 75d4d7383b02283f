"""Tests for FastAPI application wiring."""

import unittest

from fastapi.testclient import TestClient

from src.api.app import create_app
from testing.api.fixtures import AUTH_HEADERS, build_test_services


class TestCreateApp(unittest.TestCase):
    """Tests for create_app."""

    def test_routes_registered(self) -> None:
        """Test public and admin routes are mounted."""
        app = create_app(build_test_services())
        paths = {route.path for route in app.routes}

        for path in (
            "/health",
            "/media/{media_id}",
            "/webhooks/whatsapp",
            "/reminders",
            "/reminders/tick",
            "/images",
            "/messages",
            "/stats",
        ):
            self.assertIn(path, paths)

    def test_services_unavailable_before_startup(self) -> None:
        """Test endpoints needing services return 503 until they are built."""
        client = TestClient(create_app())

        self.assertEqual(client.get("/health").status_code, 200)
        self.assertEqual(client.get("/stats", headers=AUTH_HEADERS).status_code, 503)


class TestLifespan(unittest.TestCase):
    """Tests for the application lifespan."""

    def test_poller_runs_while_app_is_up(self) -> None:
        """Test the reminder poller starts with the app and stops on shutdown."""
        services = build_test_services(run_reminder_poller=True)
        app = create_app(services)

        with TestClient(app) as client:
            client.get("/health")
            health = client.get("/health").json()
            self.assertGreaterEqual(services.poller.ticks, 1)
            self.assertTrue(health["reminder_poller"])

        self.assertFalse(services.poller.is_running)

    def test_poller_disabled(self) -> None:
        """Test the poller is not started when disabled."""
        services = build_test_services(run_reminder_poller=False)
        app = create_app(services)

        with TestClient(app) as client:
            client.get("/health")

        self.assertEqual(services.poller.ticks, 0)


if __name__ == "__main__":
    unittest.main()

"""Tests for the health check route."""

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient
from pymongo.errors import PyMongoError

from api.main import app


class TestHealthRoute(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)

    @patch('api.routes.health.get_mongodb_client', new_callable=AsyncMock)
    def test_healthy_when_mongodb_responds(self, mock_get_client):
        mock_client = MagicMock()
        mock_client.admin.command = AsyncMock(return_value={'ok': 1})
        mock_get_client.return_value = mock_client

        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")
        self.assertEqual(response.json()["services"]["mongodb"]["status"], "healthy")

    @patch('api.routes.health.get_mongodb_client', new_callable=AsyncMock)
    def test_degraded_when_mongodb_not_configured(self, mock_get_client):
        mock_get_client.return_value = None

        response = self.client.get("/health")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["status"], "degraded")

    @patch('api.routes.health.get_mongodb_client', new_callable=AsyncMock)
    def test_degraded_when_ping_fails(self, mock_get_client):
        mock_client = MagicMock()
        mock_client.admin.command = AsyncMock(side_effect=PyMongoError("timeout"))
        mock_get_client.return_value = mock_client

        response = self.client.get("/health")

        self.assertEqual(response.status_code, 503)
        self.assertIn("timeout", response.json()["services"]["mongodb"]["message"])


if __name__ == '__main__':
    unittest.main()

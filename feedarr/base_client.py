"""
Base API Client for *arr applications (Sonarr)
"""

import logging
from typing import Any

import requests

logger = logging.getLogger(__name__)


class BaseArrClient:
    """Base client for *arr applications API"""

    def __init__(self, url: str, api_key: str, timeout: float = 30):
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {"X-Api-Key": api_key, "Content-Type": "application/json"}
        )

    def _get(self, endpoint: str, params: dict | None = None) -> Any:
        """Perform a GET request to the API"""
        url = f"{self.url}/api/v3/{endpoint}"
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict) -> Any:
        """Perform a POST request to the API"""
        url = f"{self.url}/api/v3/{endpoint}"
        response = self.session.post(url, json=data, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def get_system_status(self) -> dict:
        return self._get("system/status")

    def test_connection(self) -> bool:
        """Test the connection to the *arr application"""
        try:
            self.get_system_status()
            return True
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return False

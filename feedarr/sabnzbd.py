"""
SABnzbd API client for release submission
"""

import logging
import re

import requests

from .errors import SubmissionError

logger = logging.getLogger(__name__)

NEWZBIN_REPORT_RE = re.compile(r"newzbin\.com/browse/post/(\d+)", re.IGNORECASE)


class SabnzbdClient:
    """Client to interact with SABnzbd API"""

    def __init__(
        self,
        url: str,
        api_key: str,
        username: str | None = None,
        password: str | None = None,
        category: str = "tv",
        priority: int = 0,
        timeout: float = 30,
    ):
        """
        Initialize SABnzbd client

        Args:
            url: SABnzbd server URL (e.g., http://localhost:8080)
            api_key: SABnzbd API key
            username: Optional web UI username
            password: Optional web UI password
            category: Category assigned to submitted releases
            priority: SABnzbd priority (-1 low, 0 normal, 1 high, 2 force)
            timeout: Request timeout in seconds
        """
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.username = username
        self.password = password
        self.category = category
        self.priority = priority
        self.timeout = timeout
        self.session = requests.Session()

    def _auth_params(self) -> dict:
        params = {"apikey": self.api_key}
        if self.username:
            params["ma_username"] = self.username
        if self.password:
            params["ma_password"] = self.password
        return params

    def _call(self, params: dict) -> requests.Response:
        response = self.session.get(
            f"{self.url}/api",
            params={**params, **self._auth_params()},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response

    def add_by_url(self, url: str, title: str) -> bool:
        """
        Queue an NZB by URL

        Newzbin report links are added by report ID instead of URL.

        Returns:
            True if SABnzbd accepted the release, False otherwise
        """
        match = NEWZBIN_REPORT_RE.search(url)
        if match:
            params = {"mode": "addid", "name": match.group(1)}
        else:
            params = {"mode": "addurl", "name": url}

        params.update(
            {
                "priority": self.priority,
                "pp": 3,
                "cat": self.category,
                "nzbname": title,
            }
        )

        logger.info(f"Adding report [{title}] to the queue.")
        try:
            response = self._call(params)
        except requests.exceptions.RequestException as e:
            raise SubmissionError(title, f"SABnzbd request failed: {e}") from e

        text = response.text.strip()
        if text.lower() == "ok":
            logger.debug(f"Queued report {title}")
            return True

        logger.warning(f"SABnzbd returned unexpected response '{text}' for {title}")
        return False

    def submit(self, download_url: str, display_title: str) -> bool:
        return self.add_by_url(download_url, display_title)

    def _queue(self) -> dict:
        try:
            data = self._call({"mode": "queue", "output": "json"}).json()
        except requests.exceptions.RequestException as e:
            raise SubmissionError("queue", f"SABnzbd request failed: {e}") from e

        error = data.get("error")
        if error:
            raise SubmissionError("queue", error)
        return data.get("queue", {})

    def is_in_queue(self, title: str) -> bool:
        """Whether a release with the given title is already queued"""
        slots = self._queue().get("slots", [])
        wanted = title.strip().lower()
        return any(slot.get("filename", "").strip().lower() == wanted for slot in slots)

    def get_categories(self) -> list[str]:
        """Categories configured in SABnzbd, without the '*' default"""
        try:
            data = self._call({"mode": "get_cats", "output": "json"}).json()
        except requests.exceptions.RequestException as e:
            raise SubmissionError("categories", f"SABnzbd request failed: {e}") from e
        return [c for c in data.get("categories", []) if c != "*"]

    def test_connection(self) -> bool:
        """
        Test connection to SABnzbd

        Returns:
            True if connection is successful, False otherwise
        """
        try:
            self._queue()
            return True
        except SubmissionError as e:
            logger.error(f"Failed to connect to SABnzbd: {e}")
            return False

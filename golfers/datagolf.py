import time
from typing import Any, Dict, List, Optional

import requests
import structlog
from django.conf import settings

logger = structlog.get_logger(__name__)


class DataGolfAPIError(Exception):
    """Base exception for DataGolf API errors"""

    pass


class DataGolfAuthError(DataGolfAPIError):
    """Missing or rejected API key"""

    pass


class DataGolfClient:
    """
    DataGolf feed client. Retries rate-limited and failed requests with exponential backoff.
    """

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.api_key = api_key or settings.DATAGOLF_API_KEY
        self.base_url = base_url or settings.DATAGOLF_BASE_URL
        self.session = requests.Session()

        if not self.api_key:
            raise DataGolfAuthError("DataGolf API key not provided")

        self.timeout = 30
        self.max_retries = 3
        self.retry_delay_base = 1
        self.retry_delay_max = 30

    def _get(self, endpoint: str, params: Optional[Dict] = None) -> Any:
        url = f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        query = {"file_format": "json", **(params or {}), "key": self.api_key}
        headers = {"Accept": "application/json", "User-Agent": "PGC-Integration/1.0"}
        last_exception = None

        for attempt in range(self.max_retries + 1):
            delay = min(self.retry_delay_base * (2 ** attempt), self.retry_delay_max)
            try:
                logger.debug("Making DataGolf request", endpoint=endpoint, attempt=attempt + 1)
                response = self.session.get(url, params=query, headers=headers, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                last_exception = e
                if attempt < self.max_retries:
                    logger.warning("Network error, retrying", error=str(e), attempt=attempt + 1, delay=delay)
                    time.sleep(delay)
                    continue
                logger.error("Network error, max retries reached", error=str(e), attempts=attempt + 1)
                break

            if response.status_code == 429:
                if attempt < self.max_retries:
                    logger.warning("Rate limit exceeded, retrying", attempt=attempt + 1, delay=delay)
                    time.sleep(delay)
                    continue
                raise DataGolfAPIError("Rate limit exceeded after maximum retries")

            if response.status_code in (401, 403):
                raise DataGolfAuthError("DataGolf API authentication failed. Verify DATAGOLF_API_KEY.")

            if response.status_code >= 400:
                raise DataGolfAPIError(f"API request failed with status {response.status_code}: {response.text}")

            try:
                return response.json()
            except ValueError as e:
                raise DataGolfAPIError(f"Invalid JSON response: {e}")

        raise DataGolfAPIError(f"Request failed after retries: {last_exception}")

    def get_player_list(self) -> List[Dict[str, Any]]:
        """
        Fetch the full DataGolf player list.

        Returns:
            List of player dictionaries with dg_id, player_name and country
        """
        players = self._get("get-player-list")
        if not isinstance(players, list):
            raise DataGolfAPIError("Unexpected player list response")

        logger.info("Retrieved DataGolf player list", player_count=len(players))
        return players

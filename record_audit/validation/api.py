"""Reference data client for the centers API."""
import logging
from typing import List, Optional

import requests

from ..config import AuditConfig
from ..core.exceptions import ReferenceDataError
from .models import CenterRecord

logger = logging.getLogger(__name__)


class CentersClient:
    """Fetches day-pass enabled centers.

    There is no retry: without reference data nothing can be validated, so a
    failed fetch aborts the run.
    """

    def __init__(
        self,
        config: Optional[AuditConfig] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or AuditConfig()
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    @property
    def url(self) -> str:
        return f"{self.config.api_base_url.rstrip('/')}/centers"

    @property
    def headers(self) -> dict:
        return {
            "accept": "*/*",
            "origin": self.config.api_origin,
            "referer": self.config.api_referer,
            "web-app-version": self.config.api_app_version,
        }

    def fetch_centers(self, limit: Optional[int] = None) -> List[CenterRecord]:
        """GET /centers?limit=N&is_day_pass_enabled=true.

        Raises:
            ReferenceDataError: Network, HTTP or payload failure
        """
        params = {
            "limit": limit if limit is not None else self.config.api_limit,
            "is_day_pass_enabled": "true",
        }
        try:
            response = self.session.get(
                self.url,
                params=params,
                headers=self.headers,
                timeout=self.config.api_timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            self.logger.error(f"Failed to fetch API data: {e}")
            raise ReferenceDataError(self.url, str(e)) from e
        except ValueError as e:
            self.logger.error(f"API returned invalid JSON: {e}")
            raise ReferenceDataError(self.url, f"invalid JSON: {e}") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            raise ReferenceDataError(self.url, "response has no 'data' list")

        try:
            centers = [CenterRecord.from_dict(item) for item in data]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ReferenceDataError(self.url, f"malformed center entry: {e}") from e

        self.logger.info(f"Fetched {len(centers)} centers from API")
        return centers

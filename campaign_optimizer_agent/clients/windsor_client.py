from __future__ import annotations

import time
from typing import Any

import requests

from campaign_optimizer_agent.models import DateWindow


CHANNEL_FIELDS = (
    "campaign_name",
    "spend",
    "clicks",
    "impressions",
    "ctr",
    "cpm",
    "conversions_hubspot_meeting_booked",
    "date",
)
ALL_CHANNEL_FIELDS = (
    "datasource",
    "spend",
    "clicks",
    "impressions",
    "ctr",
    "cpm",
    "conversions_hubspot_meeting_booked",
)


class WindsorClient:
    """Client for the Windsor.ai aggregated connectors endpoint.

    Failures are retried with exponential backoff; once attempts are exhausted
    the call returns an empty row list so one flaky source still yields a
    partial report.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://connectors.windsor.ai/all",
        page_size: int = 5000,
        max_attempts: int = 3,
        backoff_base_sec: float = 1.0,
        timeout_sec: int = 30,
    ) -> None:
        self.api_key = api_key.strip()
        self.base_url = base_url.strip()
        self.page_size = max(1, int(page_size))
        self.max_attempts = max(1, int(max_attempts))
        self.backoff_base_sec = max(0.0, float(backoff_base_sec))
        self.timeout_sec = max(5, int(timeout_sec))

    def fetch_rows(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        query: dict[str, Any] = {"api_key": self.api_key, "page_size": self.page_size}
        query.update(params)

        last_error = "Unknown Windsor error."
        for attempt in range(self.max_attempts):
            try:
                response = requests.get(self.base_url, params=query, timeout=self.timeout_sec)
                if not response.ok:
                    raise RuntimeError(f"Windsor HTTP {response.status_code}")
                payload = response.json()
                rows = payload.get("data") if isinstance(payload, dict) else None
                if not isinstance(rows, list):
                    return []
                return [row for row in rows if isinstance(row, dict)]
            except (requests.RequestException, RuntimeError, ValueError) as exc:
                last_error = str(exc)

            if attempt < self.max_attempts - 1:
                time.sleep(self.backoff_base_sec * (2**attempt))

        print(f"Windsor fetch failed after {self.max_attempts} attempts: {last_error}")
        return []

    def fetch_channel_rows(self, window: DateWindow, connector: str) -> list[dict[str, Any]]:
        """Campaign-level rows for one connector (e.g. ``linkedin``)."""
        return self.fetch_rows(
            {
                "date_from": window.date_from,
                "date_to": window.date_to,
                "fields": ",".join(CHANNEL_FIELDS),
                "connectors": connector,
            }
        )

    def fetch_all_channel_rows(self, window: DateWindow) -> list[dict[str, Any]]:
        """Data-source-level rows across every connected channel."""
        return self.fetch_rows(
            {
                "date_from": window.date_from,
                "date_to": window.date_to,
                "fields": ",".join(ALL_CHANNEL_FIELDS),
            }
        )

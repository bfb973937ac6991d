from __future__ import annotations

import time
from typing import Any

import requests

from campaign_optimizer_agent.models import CrmBatch, DateWindow
from campaign_optimizer_agent.pipeline import build_crm_batch


CONTACT_PROPERTIES = (
    "date_demo_booked",
    "demo_status",
    "disqualification_reason",
    "hs_analytics_source",
    "hs_analytics_source_data_1",
    "hs_lead_status",
    "lifecyclestage",
)
DEAL_PROPERTIES = ("closedate", "amount", "dealstage")


class HubSpotClient:
    """CRM v3 search client with cursor pagination.

    Calls are not retried. An HTTP or network error stops pagination and the
    rows collected so far are returned.
    """

    PAGE_LIMIT = 100

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.hubapi.com",
        max_pages: int = 50,
        page_delay_sec: float = 0.12,
        timeout_sec: int = 30,
    ) -> None:
        self.token = token.strip()
        self.base_url = base_url.rstrip("/")
        self.max_pages = max(1, int(max_pages))
        self.page_delay_sec = max(0.0, float(page_delay_sec))
        self.timeout_sec = max(5, int(timeout_sec))

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    def search(self, object_type: str, payload: dict[str, Any]) -> list[dict[str, Any]]:
        url = f"{self.base_url}/crm/v3/objects/{object_type}/search"
        results: list[dict[str, Any]] = []
        after: str | None = None
        for _ in range(self.max_pages):
            body = dict(payload)
            body["limit"] = self.PAGE_LIMIT
            if after:
                body["after"] = after
            try:
                response = requests.post(url, json=body, headers=self._headers(), timeout=self.timeout_sec)
            except requests.RequestException as exc:
                print(f"HubSpot search error ({object_type}): {exc}")
                break
            if not response.ok:
                print(f"HubSpot search error ({object_type}): {response.status_code} {response.text}")
                break
            try:
                data = response.json()
            except ValueError as exc:
                print(f"HubSpot search error ({object_type}): invalid JSON ({exc})")
                break
            if not isinstance(data, dict):
                break

            results.extend(row for row in data.get("results") or [] if isinstance(row, dict))
            after = ((data.get("paging") or {}).get("next") or {}).get("after")
            if not after:
                break
            time.sleep(self.page_delay_sec)
        return results

    def fetch_pipeline(self, window: DateWindow) -> CrmBatch:
        """Booked-demo contacts and closed-won deals for the whole window."""
        from_ms = str(window.start_ms)
        to_ms = str(window.end_ms)

        contacts = self.search(
            "contacts",
            {
                "filterGroups": [
                    {
                        "filters": [
                            {"propertyName": "date_demo_booked", "operator": "GTE", "value": from_ms},
                            {"propertyName": "date_demo_booked", "operator": "LTE", "value": to_ms},
                        ]
                    }
                ],
                "properties": list(CONTACT_PROPERTIES),
                "sorts": [{"propertyName": "date_demo_booked", "direction": "ASCENDING"}],
            },
        )
        deals = self.search(
            "deals",
            {
                "filterGroups": [
                    {
                        "filters": [
                            {"propertyName": "closedate", "operator": "GTE", "value": from_ms},
                            {"propertyName": "closedate", "operator": "LTE", "value": to_ms},
                            {"propertyName": "dealstage", "operator": "EQ", "value": "closedwon"},
                        ]
                    }
                ],
                "properties": list(DEAL_PROPERTIES),
            },
        )
        return build_crm_batch(contacts, deals)

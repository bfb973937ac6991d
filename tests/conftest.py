from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from campaign_optimizer_agent.analysis import ReportSnapshot, build_snapshot
from campaign_optimizer_agent.config import AgentConfig, Thresholds
from campaign_optimizer_agent.time_windows import compute_windows
from campaign_optimizer_agent.pipeline import build_crm_batch


RUN_AT = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def make_config(**overrides) -> AgentConfig:
    base = AgentConfig(
        timezone="America/New_York",
        output_dir="outputs",
        report_brand="FrontrowMD",
        windsor_api_key="windsor_test",
        windsor_base_url="https://connectors.windsor.ai/all",
        windsor_page_size=5000,
        windsor_max_attempts=3,
        hubspot_token="hubspot_test",
        hubspot_base_url="https://api.hubapi.com",
        hubspot_max_pages=50,
        hubspot_page_delay_sec=0.0,
        http_timeout_sec=30,
        primary_connector="linkedin",
        primary_channel_label="LinkedIn",
        comparison_channel="facebook",
        opportunity_channel="google_ads",
        channel_labels={
            "linkedin": "LinkedIn",
            "facebook": "Meta",
            "tiktok": "TikTok",
            "google_ads": "Google Ads",
            "youtube": "YouTube",
        },
        slack_webhook="",
        email_from="",
        email_pass="",
        email_to="",
        email_auth_mode="smtp",
        smtp_host="smtp.gmail.com",
        smtp_port=465,
        gmail_service_account_path="",
        gmail_oauth_client_secret_path="",
        gmail_oauth_refresh_token="",
        github_token="",
        github_owner="",
        github_repo="",
        github_path="index.html",
        thresholds=Thresholds(),
    )
    return replace(base, **overrides)


def _ms(day: str) -> str:
    parsed = datetime.fromisoformat(day).replace(tzinfo=timezone.utc)
    return str(int(parsed.timestamp() * 1000))


def channel_records() -> dict[str, list[dict]]:
    d30 = [
        {"campaign_name": "ICP Prospecting", "spend": "2100", "clicks": "84", "impressions": "30000", "conversions_hubspot_meeting_booked": "6", "date": "2024-03-01"},
        {"campaign_name": "ICP Prospecting", "spend": "700", "clicks": "16", "impressions": "10000", "conversions_hubspot_meeting_booked": "1", "date": "2024-03-02"},
        {"campaign_name": "Retargeting", "spend": "600", "clicks": "60", "impressions": "6000", "conversions_hubspot_meeting_booked": "5", "date": "2024-03-03"},
        {"campaign_name": "", "spend": "100", "clicks": "5", "impressions": "1000", "conversions_hubspot_meeting_booked": "0", "date": "2024-03-04"},
    ]
    return {
        "d7": d30[2:],
        "d30": d30,
        "prev_month": [
            {"campaign_name": "ICP Prospecting", "spend": 2500, "clicks": 100, "impressions": 40000, "conversions_hubspot_meeting_booked": 10},
        ],
    }


def all_channel_records() -> list[dict]:
    return [
        {"datasource": "linkedin", "spend": 3500, "clicks": 165, "impressions": 47000, "conversions_hubspot_meeting_booked": 12},
        {"datasource": "Facebook", "spend": 900, "clicks": 120, "impressions": 60000, "conversions_hubspot_meeting_booked": 9},
        {"datasource": "google_ads", "spend": 1200, "clicks": 80, "impressions": 9000, "conversions_hubspot_meeting_booked": 6},
        {"datasource": "bing", "spend": 0, "clicks": 0, "impressions": 0, "conversions_hubspot_meeting_booked": 0},
    ]


def hubspot_contacts() -> list[dict]:
    rows = []
    statuses = ["Happened", "Happened", "No Show", "Happened", "Cancelled", "Happened"]
    reasons = ["", "Too small", "", "Too small", "No budget", "Too small"]
    for index, (status, reason) in enumerate(zip(statuses, reasons)):
        rows.append(
            {
                "id": str(index),
                "properties": {
                    "date_demo_booked": _ms(f"2024-03-0{index + 1}"),
                    "demo_status": status,
                    "disqualification_reason": reason,
                },
            }
        )
    rows.append(
        {"id": "prev", "properties": {"date_demo_booked": _ms("2024-02-10"), "demo_status": "Happened"}}
    )
    return rows


def hubspot_deals() -> list[dict]:
    return [
        {"id": "d1", "properties": {"closedate": "2024-03-05T15:00:00Z", "amount": "4800", "dealstage": "closedwon"}},
    ]


@pytest.fixture
def config() -> AgentConfig:
    return make_config()


@pytest.fixture
def snapshot(config: AgentConfig) -> ReportSnapshot:
    return build_snapshot(
        windows=compute_windows(RUN_AT),
        channel_records=channel_records(),
        all_channel_records=all_channel_records(),
        crm_batch=build_crm_batch(hubspot_contacts(), hubspot_deals()),
        config=config,
        generated_at=RUN_AT,
    )

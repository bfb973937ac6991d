from __future__ import annotations

import random

from campaign_optimizer_agent.aggregation import (
    UNKNOWN_CAMPAIGN,
    aggregate_by_campaign,
    aggregate_channels,
    rows_from_records,
    sort_by_spend,
    summarize_rows,
)
from campaign_optimizer_agent.models import AggregatedMetrics, as_float


def _records() -> list[dict]:
    return [
        {"campaign_name": "A", "spend": 100, "clicks": 10, "impressions": 1000, "conversions_hubspot_meeting_booked": 0},
        {"campaign_name": "A", "spend": 75, "clicks": 5, "impressions": 500, "conversions_hubspot_meeting_booked": 1},
        {"campaign_name": "B", "spend": "40.5", "clicks": "2", "impressions": "800", "conversions_hubspot_meeting_booked": "2"},
    ]


def test_campaign_rows_are_summed() -> None:
    campaigns = aggregate_by_campaign(rows_from_records(_records(), "campaign_name"))
    a = campaigns["A"]

    assert a.spend == 175
    assert a.clicks == 15
    assert a.impressions == 1500
    assert a.demos == 1
    assert a.ctr == 0.01
    assert a.cpd == 175
    assert campaigns["B"].spend == 40.5


def test_aggregation_ignores_row_order() -> None:
    records = _records() * 3
    baseline = aggregate_by_campaign(rows_from_records(records, "campaign_name"))
    shuffled = list(records)
    random.Random(7).shuffle(shuffled)
    result = aggregate_by_campaign(rows_from_records(shuffled, "campaign_name"))

    assert result == baseline


def test_zero_denominators_yield_zero() -> None:
    metrics = AggregatedMetrics(spend=500.0, clicks=0.0, impressions=0.0, demos=0.0)

    assert metrics.ctr == 0.0
    assert metrics.cpm == 0.0
    assert metrics.cpd == 0.0
    assert metrics.cpc == 0.0


def test_non_numeric_fields_are_coerced_to_zero() -> None:
    records = [
        {"campaign_name": "A", "spend": None, "clicks": "n/a", "impressions": float("nan")},
        {"campaign_name": "A", "spend": "12.5", "clicks": True, "impressions": 10},
    ]
    totals = summarize_rows(rows_from_records(records, "campaign_name"))

    assert totals.spend == 12.5
    assert totals.clicks == 0
    assert totals.impressions == 10
    assert totals.demos == 0
    assert as_float(float("inf")) == 0.0


def test_blank_campaign_name_uses_sentinel() -> None:
    records = [
        {"campaign_name": "", "spend": 10},
        {"spend": 5},
        {"campaign_name": "   ", "spend": 1},
    ]
    campaigns = aggregate_by_campaign(rows_from_records(records, "campaign_name"))

    assert list(campaigns) == [UNKNOWN_CAMPAIGN]
    assert campaigns[UNKNOWN_CAMPAIGN].spend == 16


def test_channels_group_case_insensitively() -> None:
    records = [
        {"datasource": "LinkedIn", "spend": 100, "conversions_hubspot_meeting_booked": 1},
        {"datasource": "linkedin", "spend": 50, "conversions_hubspot_meeting_booked": 1},
        {"datasource": "facebook", "spend": 20, "conversions_hubspot_meeting_booked": 1},
    ]
    channels = aggregate_channels(rows_from_records(records, "datasource"))

    assert set(channels) == {"linkedin", "facebook"}
    assert channels["linkedin"].spend == 150
    assert channels["linkedin"].cpd == 75


def test_every_row_contributes_to_exactly_one_group() -> None:
    rows = rows_from_records(_records(), "campaign_name")
    campaigns = aggregate_by_campaign(rows)

    assert sum(c.spend for c in campaigns.values()) == summarize_rows(rows).spend


def test_sort_by_spend_descending() -> None:
    campaigns = aggregate_by_campaign(rows_from_records(_records(), "campaign_name"))

    assert [name for name, _ in sort_by_spend(campaigns)] == ["A", "B"]

from __future__ import annotations

from typing import Any, Callable, Iterable

from campaign_optimizer_agent.models import AggregatedMetrics, RawMetricRow


UNKNOWN_CAMPAIGN = "Unknown Campaign"
UNKNOWN_CHANNEL = "unknown"


def campaign_key(row: RawMetricRow) -> str:
    return row.key or UNKNOWN_CAMPAIGN


def channel_key(row: RawMetricRow) -> str:
    return (row.key or UNKNOWN_CHANNEL).lower()


def rows_from_records(records: Iterable[dict[str, Any]], key_field: str) -> list[RawMetricRow]:
    return [RawMetricRow.from_record(record, key_field) for record in records if isinstance(record, dict)]


def aggregate_by(
    rows: Iterable[RawMetricRow],
    key_fn: Callable[[RawMetricRow], str],
) -> dict[str, AggregatedMetrics]:
    groups: dict[str, AggregatedMetrics] = {}
    for row in rows:
        key = key_fn(row)
        groups.setdefault(key, AggregatedMetrics()).add(row)
    return groups


def aggregate_by_campaign(rows: Iterable[RawMetricRow]) -> dict[str, AggregatedMetrics]:
    return aggregate_by(rows, campaign_key)


def aggregate_channels(rows: Iterable[RawMetricRow]) -> dict[str, AggregatedMetrics]:
    return aggregate_by(rows, channel_key)


def summarize_rows(rows: Iterable[RawMetricRow]) -> AggregatedMetrics:
    totals = AggregatedMetrics()
    for row in rows:
        totals.add(row)
    return totals


def sort_by_spend(groups: dict[str, AggregatedMetrics]) -> list[tuple[str, AggregatedMetrics]]:
    return sorted(groups.items(), key=lambda item: item[1].spend, reverse=True)

from __future__ import annotations

from datetime import date, datetime, timezone

from campaign_optimizer_agent.models import DateWindow, PipelineMetrics
from campaign_optimizer_agent.pipeline import (
    build_crm_batch,
    build_pipeline_metrics,
    parse_timestamp_ms,
    pipeline_for_window,
    slice_window,
)


def _ms(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> int:
    return int(datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc).timestamp() * 1000)


def _contact(booked_ms: int | str | None, status: str = "", reason: str = "") -> dict:
    return {
        "id": "1",
        "properties": {
            "date_demo_booked": None if booked_ms is None else str(booked_ms),
            "demo_status": status,
            "disqualification_reason": reason,
        },
    }


def _deal(closed_ms: int, amount: str) -> dict:
    return {"properties": {"closedate": str(closed_ms), "amount": amount, "dealstage": "closedwon"}}


WINDOW = DateWindow("Test", date(2024, 3, 1), date(2024, 3, 7))


def test_slice_includes_both_boundary_days() -> None:
    batch = build_crm_batch(
        [
            _contact(_ms(2024, 3, 1), "Happened"),
            _contact(_ms(2024, 3, 7, 23, 59, 59) + 999, "No Show"),
            _contact(_ms(2024, 2, 29, 23, 59, 59) + 999),
            _contact(_ms(2024, 3, 8)),
        ],
        [],
    )
    sliced = slice_window(batch, WINDOW)

    assert len(sliced.contacts) == 2
    assert {c.demo_status for c in sliced.contacts} == {"Happened", "No Show"}


def test_missing_timestamps_are_excluded() -> None:
    batch = build_crm_batch([_contact(None), _contact(""), _contact("not a date")], [])

    assert slice_window(batch, WINDOW).contacts == ()


def test_slicing_is_idempotent() -> None:
    batch = build_crm_batch(
        [_contact(_ms(2024, 3, day)) for day in range(1, 15)],
        [_deal(_ms(2024, 3, day), "100") for day in (2, 9)],
    )
    once = slice_window(batch, WINDOW)

    assert slice_window(once, WINDOW) == once
    assert len(once.contacts) == 7
    assert len(once.deals) == 1


def test_pipeline_metrics_counts_statuses_and_reasons() -> None:
    batch = build_crm_batch(
        [
            _contact(_ms(2024, 3, 2), "Happened"),
            _contact(_ms(2024, 3, 2), "Happened", "Too small"),
            _contact(_ms(2024, 3, 3), "No Show", "Too small"),
            _contact(_ms(2024, 3, 4), "Cancelled", "No budget"),
        ],
        [_deal(_ms(2024, 3, 5), "1200.50"), _deal(_ms(2024, 3, 6), "")],
    )
    metrics = pipeline_for_window(batch, WINDOW)

    assert metrics.demos_booked == 4
    assert metrics.demos_happened == 2
    assert metrics.no_show == 1
    assert metrics.cancelled == 1
    assert metrics.disqualified == 3
    assert metrics.disqual_reasons == {"Too small": 2, "No budget": 1}
    assert metrics.sorted_disqual_reasons(limit=1) == [("Too small", 2)]
    assert metrics.closed_won == 2
    assert metrics.revenue == 1200.5
    assert metrics.show_rate == 0.5
    assert metrics.disqual_rate == 0.75


def test_empty_pipeline_has_zero_rates() -> None:
    metrics = build_pipeline_metrics(build_crm_batch([], []))

    assert metrics == PipelineMetrics()
    assert metrics.show_rate == 0.0
    assert metrics.disqual_rate == 0.0


def test_parse_timestamp_accepts_iso_strings() -> None:
    assert parse_timestamp_ms("2024-03-01T00:00:00Z") == _ms(2024, 3, 1)
    assert parse_timestamp_ms("2024-03-01") == _ms(2024, 3, 1)
    assert parse_timestamp_ms(str(_ms(2024, 3, 1))) == _ms(2024, 3, 1)
    assert parse_timestamp_ms("") == 0

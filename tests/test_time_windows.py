from datetime import date, datetime, timezone

from campaign_optimizer_agent.time_windows import (
    WINDOW_KEYS,
    budget_pacing,
    compute_windows,
    expected_pace,
    widest_window,
)


def test_windows_for_mid_month_run() -> None:
    windows = compute_windows(datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc))

    assert tuple(windows) == WINDOW_KEYS
    assert windows["yesterday"].date_from == "2024-03-14"
    assert windows["yesterday"].date_to == "2024-03-14"
    assert (windows["d7"].date_from, windows["d7"].date_to) == ("2024-03-08", "2024-03-14")
    assert windows["d7"].days == 7
    assert (windows["d30"].date_from, windows["d30"].date_to) == ("2024-02-14", "2024-03-14")
    assert windows["d30"].days == 30
    assert (windows["mtd"].date_from, windows["mtd"].date_to) == ("2024-03-01", "2024-03-14")


def test_prior_month_covers_leap_february() -> None:
    windows = compute_windows(date(2024, 3, 15))
    prior = windows["prev_month"]

    assert prior.date_from == "2024-02-01"
    assert prior.date_to == "2024-02-29"
    assert prior.days == 29


def test_month_to_date_is_empty_on_first_of_month() -> None:
    windows = compute_windows(date(2024, 3, 1))
    mtd = windows["mtd"]

    assert mtd.is_empty
    assert mtd.days == 0
    assert mtd.date_from == "2024-03-01"
    assert mtd.date_to == "2024-02-29"
    assert windows["prev_month"].date_to == "2024-02-29"


def test_prior_month_crosses_year_boundary() -> None:
    windows = compute_windows(date(2025, 1, 10))

    assert windows["prev_month"].date_from == "2024-12-01"
    assert windows["prev_month"].date_to == "2024-12-31"


def test_aware_datetime_is_converted_to_utc() -> None:
    # 20:00 in New York on the 14th is already the 15th in UTC.
    run_at = datetime.fromisoformat("2024-03-14T20:00:00-04:00")
    windows = compute_windows(run_at)

    assert windows["yesterday"].date_to == "2024-03-14"


def test_window_millisecond_span_covers_full_days() -> None:
    window = compute_windows(date(2024, 3, 15))["yesterday"]
    start = int(datetime(2024, 3, 14, tzinfo=timezone.utc).timestamp() * 1000)

    assert window.start_ms == start
    assert window.end_ms == start + 86_400_000 - 1


def test_widest_window_spans_prior_month_through_yesterday() -> None:
    windows = compute_windows(date(2024, 3, 15))
    span = widest_window(windows, ("prev_month", "d30"))

    assert span.date_from == "2024-02-01"
    assert span.date_to == "2024-03-14"


def test_widest_window_skips_empty_ranges() -> None:
    windows = compute_windows(date(2024, 3, 1))
    span = widest_window(windows, ("mtd", "prev_month"))

    assert span.date_from == "2024-02-01"
    assert span.date_to == "2024-02-29"


def test_budget_pacing_and_expected_pace() -> None:
    assert budget_pacing(17_500, 35_000) == 0.5
    assert budget_pacing(100, 0) == 0.0
    assert expected_pace(date(2024, 2, 29)) == 1.0
    assert expected_pace(date(2024, 4, 15)) == 0.5

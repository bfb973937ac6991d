from __future__ import annotations


def fmt_money(value: float) -> str:
    if value >= 1000:
        return f"${value / 1000:.1f}K"
    return f"${value:.2f}"


def fmt_pct(value: float) -> str:
    return f"{value * 100:.2f}%"


def fmt_int(value: float | int) -> str:
    return f"{int(round(value)):,}"


def pad(value: object, width: int) -> str:
    return str(value).ljust(width)

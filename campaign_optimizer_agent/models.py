from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class DateWindow:
    name: str
    start: date
    end: date

    @property
    def days(self) -> int:
        # Month-to-date on the 1st of a month ends before it starts.
        return max(0, (self.end - self.start).days + 1)

    @property
    def is_empty(self) -> bool:
        return self.end < self.start

    @property
    def date_from(self) -> str:
        return self.start.isoformat()

    @property
    def date_to(self) -> str:
        return self.end.isoformat()

    @property
    def start_ms(self) -> int:
        midnight = datetime(self.start.year, self.start.month, self.start.day, tzinfo=timezone.utc)
        return int(midnight.timestamp() * 1000)

    @property
    def end_ms(self) -> int:
        """Last millisecond of the end day (23:59:59.999 UTC)."""
        midnight = datetime(self.end.year, self.end.month, self.end.day, tzinfo=timezone.utc)
        return int(midnight.timestamp() * 1000) + 86_399_999


def as_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number or number in (float("inf"), float("-inf")):
        return 0.0
    return number


@dataclass(frozen=True)
class RawMetricRow:
    key: str
    spend: float
    clicks: float
    impressions: float
    conversions: float
    day: str = ""

    @classmethod
    def from_record(cls, record: dict[str, Any], key_field: str) -> "RawMetricRow":
        raw_key = record.get(key_field)
        return cls(
            key=str(raw_key).strip() if raw_key is not None else "",
            spend=as_float(record.get("spend")),
            clicks=as_float(record.get("clicks")),
            impressions=as_float(record.get("impressions")),
            conversions=as_float(record.get("conversions_hubspot_meeting_booked")),
            day=str(record.get("date") or ""),
        )


@dataclass
class AggregatedMetrics:
    spend: float = 0.0
    clicks: float = 0.0
    impressions: float = 0.0
    demos: float = 0.0

    def add(self, row: RawMetricRow) -> None:
        self.spend += row.spend
        self.clicks += row.clicks
        self.impressions += row.impressions
        self.demos += row.conversions

    @property
    def ctr(self) -> float:
        return self.clicks / self.impressions if self.impressions > 0 else 0.0

    @property
    def cpm(self) -> float:
        return (self.spend / self.impressions) * 1000 if self.impressions > 0 else 0.0

    @property
    def cpd(self) -> float:
        return self.spend / self.demos if self.demos > 0 else 0.0

    @property
    def cpc(self) -> float:
        return self.spend / self.clicks if self.clicks > 0 else 0.0


@dataclass(frozen=True)
class PipelineContact:
    booked_ms: int
    demo_status: str = ""
    disqualification_reason: str = ""
    lead_source: str = ""
    lead_source_detail: str = ""
    lead_status: str = ""
    lifecycle_stage: str = ""


@dataclass(frozen=True)
class PipelineDeal:
    closed_ms: int
    amount: float = 0.0
    stage: str = "closedwon"


@dataclass(frozen=True)
class CrmBatch:
    contacts: tuple[PipelineContact, ...] = ()
    deals: tuple[PipelineDeal, ...] = ()


@dataclass
class PipelineMetrics:
    demos_booked: int = 0
    demos_happened: int = 0
    no_show: int = 0
    cancelled: int = 0
    disqualified: int = 0
    disqual_reasons: dict[str, int] = field(default_factory=dict)
    closed_won: int = 0
    revenue: float = 0.0

    @property
    def show_rate(self) -> float:
        return self.demos_happened / self.demos_booked if self.demos_booked > 0 else 0.0

    @property
    def disqual_rate(self) -> float:
        return self.disqualified / self.demos_booked if self.demos_booked > 0 else 0.0

    def sorted_disqual_reasons(self, limit: int | None = None) -> list[tuple[str, int]]:
        ranked = sorted(self.disqual_reasons.items(), key=lambda item: item[1], reverse=True)
        return ranked if limit is None else ranked[:limit]


class FindingCategory(str, Enum):
    ALERT = "alert"
    WARNING = "warning"
    OPPORTUNITY = "opportunity"
    WIN = "win"


@dataclass(frozen=True)
class Finding:
    category: FindingCategory
    message: str


@dataclass
class Intelligence:
    alerts: list[Finding] = field(default_factory=list)
    warnings: list[Finding] = field(default_factory=list)
    opportunities: list[Finding] = field(default_factory=list)
    wins: list[Finding] = field(default_factory=list)

    def add(self, category: FindingCategory, message: str) -> None:
        bucket = {
            FindingCategory.ALERT: self.alerts,
            FindingCategory.WARNING: self.warnings,
            FindingCategory.OPPORTUNITY: self.opportunities,
            FindingCategory.WIN: self.wins,
        }[category]
        bucket.append(Finding(category=category, message=message))

    def all(self) -> list[Finding]:
        return [*self.alerts, *self.warnings, *self.opportunities, *self.wins]

    @property
    def status(self) -> str:
        if self.alerts:
            return "red"
        if self.warnings:
            return "yellow"
        return "green"


class RecommendationType(str, Enum):
    PAUSE = "pause"
    REDUCE = "reduce"
    SCALE = "scale"
    CREATIVE = "creative"
    RISK = "risk"
    INFO = "info"


@dataclass(frozen=True)
class Recommendation:
    type: RecommendationType
    text: str
    campaign: str | None = None


@dataclass(frozen=True)
class AudiencePlaybook:
    exclusions: tuple[str, ...]
    layering_strategies: tuple[str, ...]
    bid_strategy: tuple[str, ...]

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Any, Iterable

from campaign_optimizer_agent.models import (
    CrmBatch,
    DateWindow,
    PipelineContact,
    PipelineDeal,
    PipelineMetrics,
    as_float,
)


STATUS_HAPPENED = "Happened"
STATUS_NO_SHOW = "No Show"
STATUS_CANCELLED = "Cancelled"


def _prop(obj: dict[str, Any], key: str) -> str:
    properties = obj.get("properties") or {}
    if not isinstance(properties, dict):
        return ""
    value = properties.get(key)
    return str(value).strip() if value is not None else ""


def parse_timestamp_ms(raw: str) -> int:
    """Epoch milliseconds from a CRM date property; 0 when missing or unparseable."""
    value = raw.strip()
    if not value:
        return 0
    if value.lstrip("-").isdigit():
        return int(value)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return 0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def contact_from_hubspot(obj: dict[str, Any]) -> PipelineContact:
    return PipelineContact(
        booked_ms=parse_timestamp_ms(_prop(obj, "date_demo_booked")),
        demo_status=_prop(obj, "demo_status"),
        disqualification_reason=_prop(obj, "disqualification_reason"),
        lead_source=_prop(obj, "hs_analytics_source"),
        lead_source_detail=_prop(obj, "hs_analytics_source_data_1"),
        lead_status=_prop(obj, "hs_lead_status"),
        lifecycle_stage=_prop(obj, "lifecyclestage"),
    )


def deal_from_hubspot(obj: dict[str, Any]) -> PipelineDeal:
    return PipelineDeal(
        closed_ms=parse_timestamp_ms(_prop(obj, "closedate")),
        amount=as_float(_prop(obj, "amount")),
        stage=_prop(obj, "dealstage") or "closedwon",
    )


def build_crm_batch(
    contacts: Iterable[dict[str, Any]],
    deals: Iterable[dict[str, Any]],
) -> CrmBatch:
    return CrmBatch(
        contacts=tuple(contact_from_hubspot(row) for row in contacts if isinstance(row, dict)),
        deals=tuple(deal_from_hubspot(row) for row in deals if isinstance(row, dict)),
    )


def slice_window(batch: CrmBatch, window: DateWindow) -> CrmBatch:
    """Keep contacts/deals whose timestamp falls inside the window's full-day span."""
    start_ms = window.start_ms
    end_ms = window.end_ms
    return CrmBatch(
        contacts=tuple(c for c in batch.contacts if start_ms <= c.booked_ms <= end_ms),
        deals=tuple(d for d in batch.deals if start_ms <= d.closed_ms <= end_ms),
    )


def build_pipeline_metrics(sliced: CrmBatch) -> PipelineMetrics:
    contacts = sliced.contacts
    reasons = Counter(c.disqualification_reason for c in contacts if c.disqualification_reason)
    return PipelineMetrics(
        demos_booked=len(contacts),
        demos_happened=sum(1 for c in contacts if c.demo_status == STATUS_HAPPENED),
        no_show=sum(1 for c in contacts if c.demo_status == STATUS_NO_SHOW),
        cancelled=sum(1 for c in contacts if c.demo_status == STATUS_CANCELLED),
        disqualified=sum(reasons.values()),
        disqual_reasons=dict(reasons),
        closed_won=len(sliced.deals),
        revenue=sum(d.amount for d in sliced.deals),
    )


def pipeline_for_window(batch: CrmBatch, window: DateWindow) -> PipelineMetrics:
    return build_pipeline_metrics(slice_window(batch, window))

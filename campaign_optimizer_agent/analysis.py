from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from campaign_optimizer_agent.aggregation import (
    aggregate_by_campaign,
    aggregate_channels,
    rows_from_records,
    sort_by_spend,
    summarize_rows,
)
from campaign_optimizer_agent.config import AgentConfig, Thresholds
from campaign_optimizer_agent.intelligence import IntelligenceInput, build_intelligence
from campaign_optimizer_agent.models import (
    AggregatedMetrics,
    AudiencePlaybook,
    CrmBatch,
    DateWindow,
    Intelligence,
    PipelineMetrics,
    Recommendation,
)
from campaign_optimizer_agent.pipeline import pipeline_for_window
from campaign_optimizer_agent.recommendations import (
    build_audience_playbook,
    build_campaign_recommendations,
)
from campaign_optimizer_agent.time_windows import budget_pacing, expected_pace


PIPELINE_WINDOW_KEYS = ("d7", "d30", "prev_month")


@dataclass
class ReportSnapshot:
    """Everything the renderers need; no renderer fetches additional data."""

    generated_at: datetime
    windows: dict[str, DateWindow]
    channel: dict[str, AggregatedMetrics]
    channels_30d: dict[str, AggregatedMetrics]
    campaigns_30d: dict[str, AggregatedMetrics]
    pipelines: dict[str, PipelineMetrics]
    intelligence: Intelligence
    recommendations: list[Recommendation]
    playbook: AudiencePlaybook
    budget_paced: float
    expected_pace: float
    thresholds: Thresholds = field(default_factory=Thresholds)
    channel_label: str = "LinkedIn"
    primary_channel: str = "linkedin"
    brand: str = "FrontrowMD"
    timezone: str = "America/New_York"
    channel_labels: dict[str, str] = field(default_factory=dict)

    @property
    def channel_30d(self) -> AggregatedMetrics:
        return self.channel["d30"]

    @property
    def pipeline_30d(self) -> PipelineMetrics:
        return self.pipelines["d30"]

    def ranked_campaigns(self) -> list[tuple[str, AggregatedMetrics]]:
        return sort_by_spend(self.campaigns_30d)

    def comparison_rows(self) -> list[tuple[str, str, AggregatedMetrics]]:
        """Known channels with spend, in display order, as (key, label, metrics)."""
        rows: list[tuple[str, str, AggregatedMetrics]] = []
        for key, label in self.channel_labels.items():
            metrics = self.channels_30d.get(key)
            if metrics is None or metrics.spend == 0:
                continue
            rows.append((key, label, metrics))
        return rows


def build_snapshot(
    *,
    windows: dict[str, DateWindow],
    channel_records: dict[str, list[dict[str, Any]]],
    all_channel_records: list[dict[str, Any]],
    crm_batch: CrmBatch,
    config: AgentConfig,
    generated_at: datetime | None = None,
) -> ReportSnapshot:
    limits = config.thresholds
    channel_rows = {
        key: rows_from_records(records, "campaign_name") for key, records in channel_records.items()
    }
    channel = {key: summarize_rows(rows) for key, rows in channel_rows.items()}
    for key in ("d7", "d30", "prev_month"):
        channel.setdefault(key, AggregatedMetrics())
    campaigns_30d = aggregate_by_campaign(channel_rows.get("d30", []))
    channels_30d = aggregate_channels(rows_from_records(all_channel_records, "datasource"))

    pipelines = {key: pipeline_for_window(crm_batch, windows[key]) for key in PIPELINE_WINDOW_KEYS}

    generated_at = generated_at or datetime.now(timezone.utc)
    paced = budget_pacing(channel["d30"].spend, limits.monthly_budget)

    intelligence = build_intelligence(
        IntelligenceInput(
            channel_30d=channel["d30"],
            channels_30d=channels_30d,
            pipeline_30d=pipelines["d30"],
            pipeline_prev_month=pipelines["prev_month"],
            budget_paced=paced,
            channel_label=config.primary_channel_label,
            comparison_channel=config.comparison_channel,
            comparison_label=config.channel_label(config.comparison_channel),
            opportunity_channel=config.opportunity_channel,
            opportunity_label=config.channel_label(config.opportunity_channel),
        ),
        limits,
    )
    recommendations = build_campaign_recommendations(
        campaigns_30d,
        pipelines["d30"],
        limits,
        channel_label=config.primary_channel_label,
    )

    return ReportSnapshot(
        generated_at=generated_at,
        windows=windows,
        channel=channel,
        channels_30d=channels_30d,
        campaigns_30d=campaigns_30d,
        pipelines=pipelines,
        intelligence=intelligence,
        recommendations=recommendations,
        playbook=build_audience_playbook(pipelines["d30"]),
        budget_paced=paced,
        expected_pace=expected_pace(generated_at.date()),
        thresholds=limits,
        channel_label=config.primary_channel_label,
        primary_channel=config.primary_connector,
        brand=config.report_brand,
        timezone=config.timezone,
        channel_labels=dict(config.channel_labels),
    )

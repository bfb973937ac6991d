from __future__ import annotations

from campaign_optimizer_agent.aggregation import sort_by_spend
from campaign_optimizer_agent.config import Thresholds
from campaign_optimizer_agent.formatting import fmt_int, fmt_money, fmt_pct
from campaign_optimizer_agent.models import (
    AggregatedMetrics,
    AudiencePlaybook,
    PipelineMetrics,
    Recommendation,
    RecommendationType,
)


def build_campaign_recommendations(
    campaigns: dict[str, AggregatedMetrics],
    pipeline: PipelineMetrics | None = None,
    limits: Thresholds | None = None,
    channel_label: str = "LinkedIn",
) -> list[Recommendation]:
    """Per-campaign actions in descending-spend order, then the portfolio check."""
    limits = limits or Thresholds()
    ranked = sort_by_spend(campaigns)
    if not ranked:
        return [
            Recommendation(
                type=RecommendationType.INFO,
                text="No campaign-level data available for the 30-day window.",
            )
        ]

    target = limits.cpd_target
    total_spend = sum(metrics.spend for _, metrics in ranked)
    recs: list[Recommendation] = []
    for name, c in ranked:
        share = c.spend / total_spend if total_spend > 0 else 0.0
        if (
            share > limits.pause_spend_share
            and c.cpd > target * limits.cpd_alert_multiplier
            and c.demos < limits.pause_max_demos
        ):
            recs.append(
                Recommendation(
                    type=RecommendationType.PAUSE,
                    campaign=name,
                    text=(
                        f'PAUSE / REVIEW: "{name}" is consuming {fmt_pct(share)} of {channel_label} '
                        f"spend ({fmt_money(c.spend)}) with only {fmt_int(c.demos)} demos "
                        f"(CPD: {fmt_money(c.cpd)}). Recommend pausing and reallocating budget."
                    ),
                )
            )
        elif share > limits.reduce_spend_share and c.cpd > target * limits.cpd_warn_multiplier:
            recs.append(
                Recommendation(
                    type=RecommendationType.REDUCE,
                    campaign=name,
                    text=(
                        f'REDUCE BUDGET: "{name}" CPD of {fmt_money(c.cpd)} is above target. '
                        "Reduce daily spend by 20-30% and monitor quality."
                    ),
                )
            )

        if 0 < c.cpd < target * limits.scale_cpd_multiplier and c.demos >= limits.scale_min_demos:
            recs.append(
                Recommendation(
                    type=RecommendationType.SCALE,
                    campaign=name,
                    text=(
                        f'SCALE: "{name}" has a CPD of {fmt_money(c.cpd)}, below target. '
                        "Increase budget by 20-30% to capture more volume."
                    ),
                )
            )

        if c.ctr < limits.creative_ctr and c.impressions > limits.creative_min_impressions:
            recs.append(
                Recommendation(
                    type=RecommendationType.CREATIVE,
                    campaign=name,
                    text=(
                        f'REFRESH CREATIVE: "{name}" CTR is {fmt_pct(c.ctr)} with '
                        f"{fmt_int(c.impressions)} impressions. Ad creative is fatigued; "
                        "rotate new variants."
                    ),
                )
            )

    top_name, top = ranked[0]
    top_share = top.spend / total_spend if total_spend > 0 else 0.0
    if top_share > limits.concentration_share:
        recs.append(
            Recommendation(
                type=RecommendationType.RISK,
                text=(
                    f'CONCENTRATION RISK: Top campaign "{top_name}" absorbs {fmt_pct(top_share)} of '
                    f"{channel_label} budget. Diversify into 2-3 parallel campaigns to reduce risk."
                ),
            )
        )
    return recs


BASE_EXCLUSIONS = (
    "Company age < 6 months (pre-revenue brands)",
    'Job title contains: "Student", "Intern", "Freelance"',
    "Company size: 1-5 employees (solo operators)",
)

LAYERING_STRATEGIES = (
    "Job title (e.g., CEO, CMO, Marketing Director) + Company size (11-200) + Industry (Health & Wellness)",
    "Retargeting: Engaged with company page + visited website (matched audience)",
    "Lookalike: Upload closed-won customer list for Matched Audience expansion",
    'Interest-based: "Marketing & Advertising" + "E-Commerce" + "Health & Wellness"',
    "Account-based: Upload ICP company list for Account Targeting in Campaign Manager",
)

BID_STRATEGY = (
    'Test: "Maximum Delivery" (auto bid) vs. "Target Cost" at $120-140 CPD',
    'If CPM > $60: Switch from "Reach" objective to "Lead Gen Form" to improve lead quality',
    "For retargeting campaigns: Manual CPC with $8-12 bid cap (smaller audience, higher intent)",
    "For prospecting: Start with auto bid to gather data, then switch to target cost once 30+ conversions",
)


def build_audience_playbook(pipeline: PipelineMetrics) -> AudiencePlaybook:
    reasons = pipeline.sorted_disqual_reasons(limit=5)
    exclusions = BASE_EXCLUSIONS + tuple(
        f'Disqual pattern: "{reason}", build audience exclusion' for reason, _ in reasons
    )
    return AudiencePlaybook(
        exclusions=exclusions,
        layering_strategies=LAYERING_STRATEGIES,
        bid_strategy=BID_STRATEGY,
    )

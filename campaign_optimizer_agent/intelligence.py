from __future__ import annotations

from dataclasses import dataclass

from campaign_optimizer_agent.config import Thresholds
from campaign_optimizer_agent.formatting import fmt_int, fmt_money, fmt_pct
from campaign_optimizer_agent.models import (
    AggregatedMetrics,
    FindingCategory,
    Intelligence,
    PipelineMetrics,
)


@dataclass(frozen=True)
class IntelligenceInput:
    channel_30d: AggregatedMetrics
    channels_30d: dict[str, AggregatedMetrics]
    pipeline_30d: PipelineMetrics
    pipeline_prev_month: PipelineMetrics
    budget_paced: float
    channel_label: str = "LinkedIn"
    comparison_channel: str = "facebook"
    comparison_label: str = "Meta"
    opportunity_channel: str = "google_ads"
    opportunity_label: str = "Google Ads"


def _delta_ratio(current: float, previous: float) -> float | None:
    if previous == 0:
        return None
    return (current - previous) / previous


def _cpd_rules(out: Intelligence, data: IntelligenceInput, limits: Thresholds) -> None:
    cpd = data.channel_30d.cpd
    target = limits.cpd_target
    label = data.channel_label
    if cpd > target * limits.cpd_alert_multiplier:
        over = round((cpd - target) / target * 100) if target > 0 else 0
        out.add(
            FindingCategory.ALERT,
            f"{label} CPD is {fmt_money(cpd)}, {over}% above target of {fmt_money(target)}. "
            "Immediate audience/bid review recommended.",
        )
    elif cpd > target * limits.cpd_warn_multiplier:
        out.add(
            FindingCategory.WARNING,
            f"{label} CPD at {fmt_money(cpd)} is above target ({fmt_money(target)}). "
            "Review top-spending campaigns for efficiency.",
        )
    elif 0 < cpd <= target:
        out.add(
            FindingCategory.WIN,
            f"{label} CPD at {fmt_money(cpd)} is at or below target of {fmt_money(target)}.",
        )


def _cross_channel_rules(out: Intelligence, data: IntelligenceInput, limits: Thresholds) -> None:
    cpd = data.channel_30d.cpd
    demos = data.channel_30d.demos
    if cpd <= 0:
        return

    comparison = data.channels_30d.get(data.comparison_channel)
    comparison_cpd = comparison.cpd if comparison else 0.0
    if comparison_cpd > 0 and cpd > comparison_cpd * limits.cross_channel_multiplier:
        savings = round((cpd - comparison_cpd) * demos) if demos > 0 else 0
        out.add(
            FindingCategory.WARNING,
            f"{data.channel_label} CPD ({fmt_money(cpd)}) is {round(cpd / comparison_cpd)}x "
            f"{data.comparison_label} CPD ({fmt_money(comparison_cpd)}). Shifting 10% of "
            f"{data.channel_label} budget to {data.comparison_label} could save "
            f"~{fmt_money(savings)}/mo.",
        )

    alternative = data.channels_30d.get(data.opportunity_channel)
    alternative_cpd = alternative.cpd if alternative else 0.0
    if 0 < alternative_cpd < cpd:
        out.add(
            FindingCategory.OPPORTUNITY,
            f"{data.opportunity_label} CPD is {fmt_money(alternative_cpd)} vs {data.channel_label} "
            f"{fmt_money(cpd)}. Consider testing budgets on {data.opportunity_label} "
            "for qualified B2B intent.",
        )


def _delivery_rules(out: Intelligence, data: IntelligenceInput, limits: Thresholds) -> None:
    label = data.channel_label
    ctr = data.channel_30d.ctr
    if 0 < ctr < limits.ctr_warn:
        out.add(
            FindingCategory.WARNING,
            f"{label} CTR at {fmt_pct(ctr)} is below the {fmt_pct(limits.ctr_warn)} benchmark. "
            "Creative refresh or audience expansion likely needed.",
        )
    elif ctr >= limits.ctr_strong:
        out.add(
            FindingCategory.WIN,
            f"{label} CTR at {fmt_pct(ctr)} is strong (benchmark: {fmt_pct(limits.ctr_warn)}).",
        )

    cpm = data.channel_30d.cpm
    if cpm > limits.cpm_alert:
        out.add(
            FindingCategory.ALERT,
            f"{label} CPM at {fmt_money(cpm)} is very high. Consider narrowing or expanding "
            "audiences to reset auction dynamics.",
        )
    elif cpm > limits.cpm_warn:
        out.add(
            FindingCategory.WARNING,
            f"{label} CPM at {fmt_money(cpm)} is elevated. Audience fatigue or narrow targeting "
            "may be driving costs up.",
        )


def _disqualification_rules(out: Intelligence, data: IntelligenceInput, limits: Thresholds) -> None:
    disqual = data.pipeline_30d.disqual_rate
    if disqual > limits.disqual_alert:
        wasted = round(data.channel_30d.spend * disqual)
        out.add(
            FindingCategory.ALERT,
            f"Disqualification rate at {fmt_pct(disqual)} of demos. Estimated {fmt_money(wasted)}/mo "
            f"in {data.channel_label} spend wasted on unqualified leads. "
            "Exclusion audiences recommended.",
        )
    elif disqual > limits.disqual_warn:
        out.add(
            FindingCategory.WARNING,
            f"Disqualification rate at {fmt_pct(disqual)}. Review CRM disqualification reasons "
            "to identify targeting exclusion patterns.",
        )
    elif 0 < disqual < limits.disqual_healthy:
        out.add(
            FindingCategory.WIN,
            f"Disqualification rate at {fmt_pct(disqual)}, below the "
            f"{fmt_pct(limits.disqual_healthy)} threshold.",
        )


def _pacing_rules(out: Intelligence, data: IntelligenceInput, limits: Thresholds) -> None:
    paced = data.budget_paced
    label = data.channel_label
    if paced > limits.pacing_over:
        out.add(
            FindingCategory.ALERT,
            f"{label} spend is over-pacing ({fmt_pct(paced)} of monthly budget consumed). "
            "Reduce daily caps to avoid overspend.",
        )
    elif paced > limits.pacing_warn:
        out.add(
            FindingCategory.WARNING,
            f"{label} spend pacing at {fmt_pct(paced)} of monthly budget; on track but monitor closely.",
        )
    elif paced < limits.pacing_under:
        out.add(
            FindingCategory.OPPORTUNITY,
            f"{label} is under-pacing at {fmt_pct(paced)} of monthly budget. If CPD is favorable, "
            "consider increasing daily budgets to capture volume.",
        )


def _pipeline_rules(out: Intelligence, data: IntelligenceInput, limits: Thresholds) -> None:
    current = data.pipeline_30d.demos_booked
    previous = data.pipeline_prev_month.demos_booked
    delta = _delta_ratio(current, previous)
    if delta is not None:
        if delta < -limits.pipeline_delta:
            out.add(
                FindingCategory.WARNING,
                f"{data.channel_label} pipeline volume is down {abs(round(delta * 100))}% vs prior month "
                f"({current} vs {previous} demos). Investigate audience saturation.",
            )
        elif delta > limits.pipeline_delta:
            out.add(
                FindingCategory.WIN,
                f"{data.channel_label} pipeline volume up {round(delta * 100)}% vs prior month "
                f"({current} vs {previous} demos).",
            )

    show_rate = data.pipeline_30d.show_rate
    if show_rate < limits.show_rate_warn:
        out.add(
            FindingCategory.WARNING,
            f"Demo show rate at {fmt_pct(show_rate)}. Consider reminder sequences or a qualification "
            "gate on the booking page to improve quality.",
        )
    elif show_rate >= limits.show_rate_healthy:
        out.add(
            FindingCategory.WIN,
            f"Demo show rate at {fmt_pct(show_rate)}, a healthy lead quality signal.",
        )

    top = data.pipeline_30d.sorted_disqual_reasons(limit=1)
    if top and top[0][1] >= limits.top_disqual_min_count:
        reason, count = top[0]
        out.add(
            FindingCategory.OPPORTUNITY,
            f'Top disqualification reason: "{reason}" ({fmt_int(count)} demos). Build an audience '
            "exclusion list to block this segment pre-click.",
        )


def build_intelligence(data: IntelligenceInput, limits: Thresholds | None = None) -> Intelligence:
    """Run every threshold rule over the 30-day snapshot.

    Rules fire independently and append in a fixed order. Within one metric the
    severity tiers are exclusive, so only the highest applicable tier is reported.
    """
    limits = limits or Thresholds()
    out = Intelligence()
    _cpd_rules(out, data, limits)
    _cross_channel_rules(out, data, limits)
    _delivery_rules(out, data, limits)
    _disqualification_rules(out, data, limits)
    _pacing_rules(out, data, limits)
    _pipeline_rules(out, data, limits)
    return out

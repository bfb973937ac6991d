from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from campaign_optimizer_agent.analysis import ReportSnapshot
from campaign_optimizer_agent.formatting import fmt_int, fmt_money, fmt_pct, pad
from campaign_optimizer_agent.models import AggregatedMetrics, Finding, FindingCategory


CATEGORY_ICONS = {
    FindingCategory.ALERT: "🚨",
    FindingCategory.WARNING: "⚠️",
    FindingCategory.OPPORTUNITY: "💡",
    FindingCategory.WIN: "✅",
}

STATUS_ICONS = {"red": "🔴", "yellow": "🟡", "green": "🟢"}


def finding_line(finding: Finding) -> str:
    return f"{CATEGORY_ICONS[finding.category]} {finding.message}"


def _local_time(snapshot: ReportSnapshot) -> datetime:
    return snapshot.generated_at.astimezone(ZoneInfo(snapshot.timezone))


def headline_numbers(metrics: AggregatedMetrics) -> dict[str, str]:
    """Formatted headline figures shared by every report format."""
    return {
        "spend": fmt_money(metrics.spend),
        "demos": fmt_int(metrics.demos),
        "cpd": fmt_money(metrics.cpd),
        "ctr": fmt_pct(metrics.ctr),
        "cpm": fmt_money(metrics.cpm),
        "cpc": fmt_money(metrics.cpc),
    }


def _section(title: str) -> str:
    return f"\n── {title} ".ljust(72, "─") + "\n"


def build_text_report(snapshot: ReportSnapshot) -> str:
    d30 = snapshot.windows["d30"]
    label = snapshot.channel_label
    head = headline_numbers(snapshot.channel_30d)
    pipeline = snapshot.pipeline_30d
    target = snapshot.thresholds.cpd_target
    local = _local_time(snapshot)

    lines: list[str] = []
    lines.append("=" * 70)
    lines.append(f"{snapshot.brand} — {label} CAMPAIGN OPTIMIZER REPORT".upper())
    lines.append(f"Generated: {local.strftime('%Y-%m-%d %H:%M')} ({snapshot.timezone})")
    lines.append(f"Period: {d30.date_from} → {d30.date_to} (primary: 30-day)")
    lines.append("=" * 70)

    lines.append(_section("EXECUTIVE SUMMARY"))
    lines.append(f"{label} 30-Day Performance:")
    lines.append(f"  Total Spend:    {head['spend']}")
    lines.append(f"  Total Demos:    {head['demos']}")
    lines.append(f"  Cost Per Demo:  {head['cpd']} (target: {fmt_money(target)})")
    lines.append(f"  CTR:            {head['ctr']}")
    lines.append(f"  CPM:            {head['cpm']}")
    lines.append(f"  CPC:            {head['cpc']}")
    lines.append("")
    lines.append("Pipeline (30-day, all channels via CRM):")
    lines.append(f"  Demos Booked:   {pipeline.demos_booked}")
    lines.append(f"  Demos Happened: {pipeline.demos_happened}  (Show Rate: {fmt_pct(pipeline.show_rate)})")
    lines.append(f"  Disqualified:   {pipeline.disqualified}  ({fmt_pct(pipeline.disqual_rate)})")
    lines.append(f"  Closed Won:     {pipeline.closed_won}")
    lines.append(f"  Revenue:        {fmt_money(pipeline.revenue)}")

    lines.append(_section("INTELLIGENCE ENGINE"))
    intelligence = snapshot.intelligence
    blocks = (
        ("ALERTS:", intelligence.alerts),
        ("WEAKNESSES / WARNINGS:", intelligence.warnings),
        ("OPPORTUNITIES:", intelligence.opportunities),
        ("WINS:", intelligence.wins),
    )
    first = True
    for title, findings in blocks:
        if not findings:
            continue
        lines.append(title if first else f"\n{title}")
        first = False
        lines.extend(f"  {finding_line(finding)}" for finding in findings)
    if first:
        lines.append("  No issues detected at this time.")

    lines.append(_section("CAMPAIGN BREAKDOWN (30-DAY)"))
    ranked = snapshot.ranked_campaigns()
    if not ranked:
        lines.append("  No campaign-level data available.")
    else:
        lines.append(pad("Campaign", 40) + pad("Spend", 12) + pad("Demos", 8) + pad("CPD", 10) + pad("CTR", 8) + "CPM")
        lines.append("-" * 90)
        for name, c in ranked:
            lines.append(
                pad(name[:39], 40)
                + pad(fmt_money(c.spend), 12)
                + pad(fmt_int(c.demos), 8)
                + pad(fmt_money(c.cpd) if c.cpd > 0 else "-", 10)
                + pad(fmt_pct(c.ctr), 8)
                + fmt_money(c.cpm)
            )

    lines.append(_section("CAMPAIGN ACTION ITEMS"))
    if not snapshot.recommendations:
        lines.append("  No specific campaign actions flagged at this time.")
    for rec in snapshot.recommendations:
        lines.append(f"  [{rec.type.value.upper()}] {rec.text}")

    lines.append(_section("CROSS-CHANNEL CPD COMPARISON (30-DAY)"))
    primary_cpd = snapshot.channel_30d.cpd
    comparison = snapshot.comparison_rows()
    if not comparison:
        lines.append("  No channel data available.")
    for _, channel_label, ch in comparison:
        cpd_text = fmt_money(ch.cpd) if ch.cpd > 0 else "N/A"
        versus = ""
        if primary_cpd > 0 and ch.cpd > 0:
            delta = round((ch.cpd - primary_cpd) / primary_cpd * 100)
            versus = f" ({'' if ch.cpd < primary_cpd else '+'}{delta}% vs {label})"
        lines.append(
            f"  {pad(channel_label, 14)} Spend: {pad(fmt_money(ch.spend), 12)} "
            f"Demos: {pad(fmt_int(ch.demos), 6)} CPD: {cpd_text}{versus}"
        )

    lines.append(_section("DISQUALIFICATION BREAKDOWN (30-DAY)"))
    reasons = pipeline.sorted_disqual_reasons()
    if not reasons:
        lines.append("  No disqualification data available.")
    for reason, count in reasons:
        lines.append(f"  {pad(reason, 40)} {count} demos")

    lines.append(_section("AUDIENCE & TARGETING PLAYBOOK"))
    playbook = snapshot.playbook
    lines.append("Recommended Exclusions:")
    lines.extend(f"  - {item}" for item in playbook.exclusions)
    lines.append("\nAudience Layering Strategies to Test:")
    lines.extend(f"  - {item}" for item in playbook.layering_strategies)
    lines.append("\nBid Strategy Recommendations:")
    lines.extend(f"  - {item}" for item in playbook.bid_strategy)

    lines.append("\n" + "=" * 70)
    lines.append("END OF REPORT")
    lines.append("=" * 70)
    return "\n".join(lines)


def build_chat_summary(snapshot: ReportSnapshot, dashboard_url: str | None = None) -> str:
    """Short Slack mrkdwn summary: headline metrics, status, 2 alerts, top opportunity."""
    label = snapshot.channel_label
    channel = snapshot.channel_30d
    head = headline_numbers(channel)
    pipeline = snapshot.pipeline_30d
    intelligence = snapshot.intelligence
    target = snapshot.thresholds.cpd_target

    if channel.cpd > 0:
        cpd_icon = "🔴" if channel.cpd > target else "🟢"
        cpd_text = f"{cpd_icon} {head['cpd']} (target: {fmt_money(target)})"
    else:
        cpd_text = "No data"

    status_icon = STATUS_ICONS[intelligence.status]
    local = _local_time(snapshot)

    lines = [
        f"*🔗 {label} Campaign Optimizer — {snapshot.windows['d30'].name}*",
        local.strftime("%A, %B %d").replace(" 0", " "),
        "",
        f"*{label} Performance (30 Days)*",
        f"• Spend: {head['spend']} | Demos: {head['demos']} | CPD: {cpd_text}",
        f"• CTR: {head['ctr']} | CPM: {head['cpm']} | CPC: {head['cpc']}",
        "",
        "*Pipeline (30 Days)*",
        f"• Booked: {pipeline.demos_booked} | Happened: {pipeline.demos_happened} "
        f"({fmt_pct(pipeline.show_rate)} show rate)",
        f"• Disqualified: {pipeline.disqualified} ({fmt_pct(pipeline.disqual_rate)}) "
        f"| Closed Won: {pipeline.closed_won}",
        "",
        f"*{status_icon} Intelligence: {len(intelligence.alerts)} Alerts | "
        f"{len(intelligence.warnings)} Warnings | {len(intelligence.wins)} Wins*",
    ]
    lines.extend(finding_line(finding) for finding in intelligence.alerts[:2])
    if intelligence.opportunities:
        lines.append("")
        lines.append("*Top Opportunity:*")
        lines.append(finding_line(intelligence.opportunities[0]))

    lines.append("")
    lines.append("_Run `campaign-optimizer` for the full report + dashboard._")
    if dashboard_url:
        lines.append(f"<{dashboard_url}|View Full Dashboard →>")
    return "\n".join(lines)


def build_console_summary(snapshot: ReportSnapshot) -> list[str]:
    pipeline = snapshot.pipeline_30d
    label = snapshot.channel_label
    lines = [
        "─" * 60,
        "SUMMARY",
        "─" * 60,
        f"{label} CPD (30d): {fmt_money(snapshot.channel_30d.cpd)} vs target {fmt_money(snapshot.thresholds.cpd_target)}",
        f"Disqual Rate (30d): {fmt_pct(pipeline.disqual_rate)}",
        f"Show Rate (30d):    {fmt_pct(pipeline.show_rate)}",
        f"Campaigns tracked:  {len(snapshot.campaigns_30d)}",
    ]
    alerts = snapshot.intelligence.alerts
    if alerts:
        lines.append(f"\nALERTS ({len(alerts)}):")
        lines.extend(f"  {finding_line(finding)}" for finding in alerts)
    return lines


def report_stem(prefix: str, snapshot: ReportSnapshot) -> str:
    """File name stem shared by the saved report, dashboard and email attachment."""
    return f"{prefix}-{snapshot.generated_at.astimezone(timezone.utc).date().isoformat()}"

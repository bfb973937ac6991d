from __future__ import annotations

import html
from zoneinfo import ZoneInfo

from campaign_optimizer_agent.analysis import ReportSnapshot
from campaign_optimizer_agent.formatting import fmt_int, fmt_money, fmt_pct
from campaign_optimizer_agent.models import RecommendationType
from campaign_optimizer_agent.reporting import finding_line, headline_numbers


RED = "#EF4444"
AMBER = "#F59E0B"
GREEN = "#22C55E"
ACCENT = "#72A4BF"
MUTED = "#9CA3AF"

RECOMMENDATION_COLORS = {
    RecommendationType.PAUSE: RED,
    RecommendationType.REDUCE: AMBER,
    RecommendationType.SCALE: GREEN,
    RecommendationType.CREATIVE: ACCENT,
    RecommendationType.RISK: AMBER,
    RecommendationType.INFO: MUTED,
}

STYLE = """
  *{box-sizing:border-box; margin:0; padding:0;}
  body{font-family:'Libre Baskerville',Georgia,serif; background:linear-gradient(135deg,#020F18 0%,#1D4053 50%,#72A4BF 100%); min-height:100vh; color:#fff;}
  .header{display:flex; justify-content:space-between; align-items:center; padding:24px 40px; border-bottom:1px solid rgba(114,164,191,0.2);}
  .logo{font-size:20px; font-weight:bold;}
  .header-right{text-align:right; font-size:12px; opacity:0.7;}
  .main{padding:32px 40px; max-width:1400px; margin:0 auto;}
  .kpi-grid{display:grid; grid-template-columns:repeat(auto-fit,minmax(160px,1fr)); gap:16px; margin-bottom:24px;}
  .kpi-card,.section{background:rgba(2,15,24,0.55); border:1px solid rgba(114,164,191,0.2); border-radius:12px; padding:18px;}
  .section{margin-bottom:20px; padding:24px;}
  .kpi-label{font-size:11px; text-transform:uppercase; letter-spacing:0.05em; color:#72A4BF;}
  .kpi-value{font-size:26px; font-weight:bold; margin:6px 0;}
  .kpi-sub{font-size:12px; opacity:0.6;}
  h2{font-size:18px; font-weight:bold; color:#72A4BF; text-transform:uppercase; letter-spacing:0.05em; margin-bottom:16px;}
  h3{font-size:15px; color:#72A4BF; margin-bottom:12px; font-weight:normal;}
  .intel-item{padding:10px 14px; margin-bottom:8px; border-radius:0 8px 8px 0; font-size:14px; line-height:1.5; border-left:3px solid;}
  .intel-item.alert{border-color:#EF4444; background:rgba(239,68,68,0.1);}
  .intel-item.warning{border-color:#F59E0B; background:rgba(245,158,11,0.1);}
  .intel-item.opportunity{border-color:#72A4BF; background:rgba(114,164,191,0.1);}
  .intel-item.win{border-color:#22C55E; background:rgba(34,197,94,0.1);}
  .rec-item{padding:10px 14px; margin-bottom:8px; background:rgba(0,0,0,0.2); border-radius:0 8px 8px 0; border-left:3px solid;}
  .rec-type{font-weight:bold; text-transform:uppercase; font-size:11px;}
  table{width:100%; border-collapse:collapse; font-size:13px;}
  th{color:#72A4BF; text-align:left; padding:8px 10px; border-bottom:1px solid rgba(114,164,191,0.2); font-weight:normal; text-transform:uppercase; font-size:11px;}
  td{padding:9px 10px; border-bottom:1px solid rgba(114,164,191,0.08);}
  tr:last-child td{border-bottom:none;}
  .primary-row{background:rgba(114,164,191,0.12);}
  .two-col{display:grid; grid-template-columns:1fr 1fr; gap:20px;}
  .three-col{display:grid; grid-template-columns:1fr 1fr 1fr; gap:20px;}
  .playbook-item{font-size:13px; padding:8px 0; border-bottom:1px solid rgba(114,164,191,0.1); line-height:1.5;}
  .playbook-item:last-child{border-bottom:none;}
  .budget-bar{background:rgba(114,164,191,0.15); border-radius:4px; height:10px; overflow:hidden; margin-top:8px;}
  .budget-bar-fill{height:100%; border-radius:4px;}
  .empty{opacity:0.5;}
  footer{text-align:center; padding:24px; font-size:12px; opacity:0.4;}
  @media(max-width:768px){.two-col,.three-col{grid-template-columns:1fr;} .main{padding:20px;}}
"""


def _esc(value: object) -> str:
    return html.escape(str(value), quote=True)


def _kpi(label: str, value: str, sub: str, color: str = "#fff") -> str:
    return (
        '<div class="kpi-card">'
        f'<div class="kpi-label">{_esc(label)}</div>'
        f'<div class="kpi-value" style="color:{color};">{_esc(value)}</div>'
        f'<div class="kpi-sub">{_esc(sub)}</div>'
        "</div>"
    )


def _kpi_cards(snapshot: ReportSnapshot) -> str:
    limits = snapshot.thresholds
    channel = snapshot.channel_30d
    head = headline_numbers(channel)
    p30 = snapshot.pipeline_30d
    label = snapshot.channel_label

    if channel.cpd > limits.cpd_target * 1.3:
        cpd_color = RED
    elif channel.cpd > limits.cpd_target:
        cpd_color = AMBER
    else:
        cpd_color = ACCENT

    if p30.disqual_rate > limits.disqual_alert:
        disqual_color = RED
    elif p30.disqual_rate > limits.disqual_warn:
        disqual_color = AMBER
    else:
        disqual_color = GREEN

    cards = [
        _kpi(f"{label} Spend (30d)", head["spend"], f"Budget: {fmt_money(limits.monthly_budget)}/mo"),
        _kpi("Cost Per Demo", head["cpd"], f"Target: {fmt_money(limits.cpd_target)}", cpd_color),
        _kpi("Demos (ad platform)", head["demos"], f"7d: {fmt_int(snapshot.channel['d7'].demos)}"),
        _kpi("CTR", head["ctr"], f"Benchmark: {fmt_pct(limits.ctr_warn)}", AMBER if channel.ctr < limits.ctr_warn else ACCENT),
        _kpi("CPM", head["cpm"], f"CPC: {head['cpc']}", RED if channel.cpm > limits.cpm_alert else "#fff"),
        _kpi("Disqual Rate (30d)", fmt_pct(p30.disqual_rate), f"{p30.disqualified} / {p30.demos_booked} demos", disqual_color),
        _kpi(
            "Show Rate (30d)",
            fmt_pct(p30.show_rate),
            f"{p30.demos_happened} / {p30.demos_booked} showed",
            AMBER if p30.show_rate < limits.show_rate_warn else GREEN,
        ),
        _kpi("Closed Won Revenue (30d)", fmt_money(p30.revenue), f"{p30.closed_won} deals"),
    ]
    return '<div class="kpi-grid">' + "".join(cards) + "</div>"


def _budget_section(snapshot: ReportSnapshot) -> str:
    paced = snapshot.budget_paced
    if paced > snapshot.thresholds.pacing_over:
        color = RED
    elif paced > snapshot.thresholds.pacing_warn:
        color = AMBER
    else:
        color = GREEN
    width = min(100, round(paced * 100))
    return (
        '<div class="section"><h2>Budget Pacing</h2>'
        f"<div>{fmt_pct(paced)} of {fmt_money(snapshot.thresholds.monthly_budget)} monthly budget "
        f"(30-day spend {fmt_money(snapshot.channel_30d.spend)}; "
        f"month elapsed: {fmt_pct(snapshot.expected_pace)})</div>"
        f'<div class="budget-bar"><div class="budget-bar-fill" style="width:{width}%; background:{color};"></div></div>'
        "</div>"
    )


def _intelligence_section(snapshot: ReportSnapshot) -> str:
    items = [
        f'<div class="intel-item {finding.category.value}">{_esc(finding_line(finding))}</div>'
        for finding in snapshot.intelligence.all()
    ]
    body = "".join(items) or '<div class="intel-item win">✅ No issues detected at this time.</div>'
    return f'<div class="section"><h2>Intelligence Engine</h2>{body}</div>'


def _campaign_section(snapshot: ReportSnapshot) -> str:
    target = snapshot.thresholds.cpd_target
    rows = []
    for name, c in snapshot.ranked_campaigns():
        if c.cpd > target * 1.3:
            cpd_bg = "rgba(239,68,68,0.1)"
        elif 0 < c.cpd < target * snapshot.thresholds.scale_cpd_multiplier:
            cpd_bg = "rgba(34,197,94,0.1)"
        else:
            cpd_bg = "transparent"
        rows.append(
            "<tr>"
            f"<td>{_esc(name)}</td>"
            f"<td>{fmt_money(c.spend)}</td>"
            f"<td>{fmt_int(c.demos)}</td>"
            f'<td style="background:{cpd_bg}; font-weight:bold;">{fmt_money(c.cpd) if c.cpd > 0 else "-"}</td>'
            f"<td>{fmt_pct(c.ctr)}</td>"
            f"<td>{fmt_money(c.cpm)}</td>"
            f"<td>{fmt_money(c.cpc)}</td>"
            "</tr>"
        )
    body = "".join(rows) or '<tr><td colspan="7" class="empty">No campaign data</td></tr>'
    return (
        '<div class="section"><h2>Campaign Breakdown (30d)</h2><div style="overflow-x:auto;"><table>'
        "<thead><tr><th>Campaign</th><th>Spend</th><th>Demos</th><th>CPD</th><th>CTR</th><th>CPM</th><th>CPC</th></tr></thead>"
        f"<tbody>{body}</tbody></table></div></div>"
    )


def _recommendation_section(snapshot: ReportSnapshot) -> str:
    items = []
    for rec in snapshot.recommendations:
        color = RECOMMENDATION_COLORS.get(rec.type, MUTED)
        items.append(
            f'<div class="rec-item" style="border-color:{color};">'
            f'<span class="rec-type" style="color:{color};">{rec.type.value}</span>'
            f'<div style="margin-top:4px;">{_esc(rec.text)}</div></div>'
        )
    body = "".join(items) or '<div class="empty">No specific campaign actions at this time.</div>'
    return f'<div class="section"><h2>Campaign Action Items</h2>{body}</div>'


def _channel_section(snapshot: ReportSnapshot) -> str:
    target = snapshot.thresholds.cpd_target
    rows = []
    for key, label, ch in snapshot.comparison_rows():
        is_primary = key == snapshot.primary_channel
        if ch.cpd > target:
            color = RED if is_primary else MUTED
        else:
            color = GREEN
        row_attr = ' class="primary-row"' if is_primary else ""
        rows.append(
            f"<tr{row_attr}>"
            f"<td><strong>{_esc(label)}</strong>{' ◀' if is_primary else ''}</td>"
            f"<td>{fmt_money(ch.spend)}</td>"
            f"<td>{fmt_int(ch.demos)}</td>"
            f'<td style="font-weight:{"bold" if is_primary else "normal"}; color:{color};">'
            f"{fmt_money(ch.cpd) if ch.cpd > 0 else '-'}</td>"
            f"<td>{fmt_pct(ch.ctr)}</td>"
            f"<td>{fmt_money(ch.cpm)}</td>"
            "</tr>"
        )
    body = "".join(rows) or '<tr><td colspan="6" class="empty">No channel data</td></tr>'
    return (
        '<div class="section"><h2>Cross-Channel CPD Comparison (30d)</h2><div style="overflow-x:auto;"><table>'
        "<thead><tr><th>Channel</th><th>Spend</th><th>Demos</th><th>CPD</th><th>CTR</th><th>CPM</th></tr></thead>"
        f"<tbody>{body}</tbody></table></div></div>"
    )


def _pipeline_sections(snapshot: ReportSnapshot) -> str:
    p30 = snapshot.pipeline_30d
    bars = []
    for reason, count in p30.sorted_disqual_reasons(limit=8):
        share = count / p30.demos_booked if p30.demos_booked > 0 else 0.0
        bars.append(
            '<div style="display:flex; align-items:center; gap:12px; margin-bottom:8px;">'
            f'<div style="width:180px; font-size:13px;">{_esc(reason)}</div>'
            f'<div style="width:{round(share * 200)}px; height:8px; background:{ACCENT}; border-radius:4px;"></div>'
            f'<div style="font-size:13px;">{count} ({fmt_pct(share)})</div></div>'
        )
    disqual_body = "".join(bars) or '<div class="empty">No disqualification data.</div>'
    disqual_color = AMBER if p30.disqual_rate > snapshot.thresholds.disqual_warn else "#fff"
    health_rows = [
        ("Demos Booked", f"<strong>{p30.demos_booked}</strong>"),
        ("Demos Happened", f"<strong>{p30.demos_happened}</strong>"),
        ("No Shows", str(p30.no_show)),
        ("Cancelled", str(p30.cancelled)),
        ("Disqualified", f'<span style="color:{disqual_color};">{p30.disqualified} ({fmt_pct(p30.disqual_rate)})</span>'),
        ("Closed Won", f"<strong>{p30.closed_won}</strong>"),
        ("Revenue (Closed Won)", f"<strong>{fmt_money(p30.revenue)}</strong>"),
        ("Demos Booked (prior month)", str(snapshot.pipelines["prev_month"].demos_booked)),
    ]
    health_body = "".join(f"<tr><td>{label}</td><td>{value}</td></tr>" for label, value in health_rows)
    return (
        '<div class="two-col">'
        f'<div class="section"><h2>Disqualification Breakdown (30d)</h2><div style="margin-top:8px;">{disqual_body}</div></div>'
        f'<div class="section"><h2>Pipeline Health (30d)</h2><table><tbody>{health_body}</tbody></table></div>'
        "</div>"
    )


def _playbook_section(snapshot: ReportSnapshot) -> str:
    playbook = snapshot.playbook

    def column(title: str, icon: str, items: tuple[str, ...]) -> str:
        entries = "".join(f'<div class="playbook-item">{icon} {_esc(item)}</div>' for item in items)
        return f"<div><h3>{_esc(title)}</h3>{entries}</div>"

    return (
        '<div class="section"><h2>Audience &amp; Targeting Playbook</h2><div class="three-col">'
        + column("Recommended Exclusions", "❌", playbook.exclusions)
        + column("Layering Strategies to Test", "🎯", playbook.layering_strategies)
        + column("Bid Strategy Recommendations", "⚡", playbook.bid_strategy)
        + "</div></div>"
    )


def build_html_dashboard(snapshot: ReportSnapshot) -> str:
    d30 = snapshot.windows["d30"]
    label = snapshot.channel_label
    title = f"{snapshot.brand} — {label} Campaign Optimizer"
    generated = snapshot.generated_at.astimezone(ZoneInfo(snapshot.timezone)).strftime("%b %d, %Y")

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8"/>
<meta name="viewport" content="width=device-width, initial-scale=1.0"/>
<title>{_esc(title)}</title>
<link rel="preconnect" href="https://fonts.googleapis.com"/>
<link href="https://fonts.googleapis.com/css2?family=Libre+Baskerville:ital,wght@0,400;0,700;1,400&display=swap" rel="stylesheet"/>
<style>{STYLE}</style>
</head>
<body>
<div class="header">
  <div class="logo">{_esc(snapshot.brand)} — {_esc(label)} Optimizer</div>
  <div class="header-right">{d30.date_from} → {d30.date_to}<br/>Generated {generated}</div>
</div>
<div class="main">
{_kpi_cards(snapshot)}
{_budget_section(snapshot)}
{_intelligence_section(snapshot)}
<div class="two-col">
{_campaign_section(snapshot)}
{_recommendation_section(snapshot)}
</div>
{_channel_section(snapshot)}
{_pipeline_sections(snapshot)}
{_playbook_section(snapshot)}
</div>
<footer>{_esc(title)} · {d30.name}</footer>
</body>
</html>
"""

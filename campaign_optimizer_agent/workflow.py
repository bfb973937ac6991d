from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Any, TypedDict

from langgraph.graph import END, StateGraph

from campaign_optimizer_agent.analysis import ReportSnapshot, build_snapshot
from campaign_optimizer_agent.clients.hubspot_client import HubSpotClient
from campaign_optimizer_agent.clients.windsor_client import WindsorClient
from campaign_optimizer_agent.config import AgentConfig
from campaign_optimizer_agent.dashboard import build_html_dashboard
from campaign_optimizer_agent.delivery import (
    post_chat_summary,
    publish_dashboard,
    send_email_report,
)
from campaign_optimizer_agent.models import CrmBatch, DateWindow
from campaign_optimizer_agent.reporting import (
    build_chat_summary,
    build_console_summary,
    build_text_report,
    report_stem,
)
from campaign_optimizer_agent.time_windows import compute_windows, widest_window


class WorkflowState(TypedDict, total=False):
    run_at: datetime
    config: AgentConfig
    deliver: bool
    output_dir: str

    windsor_client: WindsorClient
    hubspot_client: HubSpotClient

    windows: dict[str, DateWindow]
    channel_records: dict[str, list[dict[str, Any]]]
    all_channel_records: list[dict[str, Any]]
    crm_batch: CrmBatch

    snapshot: ReportSnapshot
    text_report: str
    dashboard_html: str
    output_paths: dict[str, str]

    dashboard_url: str | None
    slack_posted: bool
    email_sent: bool
    console_summary: list[str]


def _windsor_client(state: WorkflowState) -> WindsorClient:
    client = state.get("windsor_client")
    if client is not None:
        return client
    config = state["config"]
    return WindsorClient(
        api_key=config.windsor_api_key,
        base_url=config.windsor_base_url,
        page_size=config.windsor_page_size,
        max_attempts=config.windsor_max_attempts,
        timeout_sec=config.http_timeout_sec,
    )


def _hubspot_client(state: WorkflowState) -> HubSpotClient:
    client = state.get("hubspot_client")
    if client is not None:
        return client
    config = state["config"]
    return HubSpotClient(
        token=config.hubspot_token,
        base_url=config.hubspot_base_url,
        max_pages=config.hubspot_max_pages,
        page_delay_sec=config.hubspot_page_delay_sec,
        timeout_sec=config.http_timeout_sec,
    )


def fetch_ad_metrics_node(state: WorkflowState) -> WorkflowState:
    config = state["config"]
    windows = compute_windows(state["run_at"])
    client = _windsor_client(state)
    connector = config.primary_connector

    print(f"Fetching {config.primary_channel_label} data from Windsor.ai...")
    with ThreadPoolExecutor(max_workers=4) as executor:
        futures = {
            key: executor.submit(client.fetch_channel_rows, windows[key], connector)
            for key in ("d7", "d30", "prev_month")
        }
        future_all = executor.submit(client.fetch_all_channel_rows, windows["d30"])
        channel_records = {key: future.result() for key, future in futures.items()}
        all_channel_records = future_all.result()

    for key, records in channel_records.items():
        print(f"  {windows[key].name}: {len(records)} rows")
    print(f"  All channels (30d): {len(all_channel_records)} rows")

    return {
        "windows": windows,
        "channel_records": channel_records,
        "all_channel_records": all_channel_records,
    }


def fetch_pipeline_node(state: WorkflowState) -> WorkflowState:
    windows = state["windows"]
    span = widest_window(windows, ("prev_month", "d30"))
    print(f"Fetching HubSpot pipeline data ({span.date_from} → {span.date_to})...")
    batch = _hubspot_client(state).fetch_pipeline(span)
    print(f"  Contacts: {len(batch.contacts)} | Closed-won deals: {len(batch.deals)}")
    return {"crm_batch": batch}


def analyze_node(state: WorkflowState) -> WorkflowState:
    print("Running intelligence engine...")
    snapshot = build_snapshot(
        windows=state["windows"],
        channel_records=state["channel_records"],
        all_channel_records=state["all_channel_records"],
        crm_batch=state["crm_batch"],
        config=state["config"],
        generated_at=state["run_at"],
    )
    intelligence = snapshot.intelligence
    print(
        f"  {len(intelligence.alerts)} alerts | {len(intelligence.warnings)} warnings | "
        f"{len(intelligence.opportunities)} opportunities | {len(intelligence.wins)} wins"
    )
    return {"snapshot": snapshot}


def render_node(state: WorkflowState) -> WorkflowState:
    snapshot = state["snapshot"]
    return {
        "text_report": build_text_report(snapshot),
        "dashboard_html": build_html_dashboard(snapshot),
    }


def write_outputs_node(state: WorkflowState) -> WorkflowState:
    config = state["config"]
    output_dir = Path(state.get("output_dir") or config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = report_stem(config.report_prefix, state["snapshot"])
    text_path = output_dir / f"{stem}.txt"
    html_path = output_dir / f"{stem}.html"
    text_path.write_text(state["text_report"], encoding="utf-8")
    html_path.write_text(state["dashboard_html"], encoding="utf-8")
    print(f"Report saved: {text_path}")
    print(f"Dashboard saved: {html_path}")
    return {"output_paths": {"text": str(text_path), "html": str(html_path)}}


def deliver_node(state: WorkflowState) -> WorkflowState:
    config = state["config"]
    snapshot = state["snapshot"]
    if not state.get("deliver", True):
        print("Delivery disabled for this run.")
        return {"dashboard_url": None, "slack_posted": False, "email_sent": False}

    # Publish first so the chat and email can link to the live dashboard.
    url = publish_dashboard(config, state["dashboard_html"], snapshot)
    slack_posted = post_chat_summary(config, build_chat_summary(snapshot, url))
    email_sent = send_email_report(
        config,
        snapshot,
        state["text_report"],
        state["dashboard_html"],
        url,
    )
    return {"dashboard_url": url, "slack_posted": slack_posted, "email_sent": email_sent}


def summary_node(state: WorkflowState) -> WorkflowState:
    lines = build_console_summary(state["snapshot"])
    for line in lines:
        print(line)
    return {"console_summary": lines}


def build_workflow_app():
    workflow = StateGraph(WorkflowState)
    workflow.add_node("fetch_ad_metrics", fetch_ad_metrics_node)
    workflow.add_node("fetch_pipeline", fetch_pipeline_node)
    workflow.add_node("analyze", analyze_node)
    workflow.add_node("render", render_node)
    workflow.add_node("write_outputs", write_outputs_node)
    workflow.add_node("deliver", deliver_node)
    workflow.add_node("summary", summary_node)

    workflow.set_entry_point("fetch_ad_metrics")
    workflow.add_edge("fetch_ad_metrics", "fetch_pipeline")
    workflow.add_edge("fetch_pipeline", "analyze")
    workflow.add_edge("analyze", "render")
    workflow.add_edge("render", "write_outputs")
    workflow.add_edge("write_outputs", "deliver")
    workflow.add_edge("deliver", "summary")
    workflow.add_edge("summary", END)

    return workflow.compile()


def run_optimizer_workflow(
    run_at: datetime,
    config: AgentConfig,
    *,
    windsor_client: WindsorClient | None = None,
    hubspot_client: HubSpotClient | None = None,
    deliver: bool = True,
    output_dir: str | None = None,
) -> WorkflowState:
    app = build_workflow_app()
    initial: WorkflowState = {
        "run_at": run_at,
        "config": config,
        "deliver": deliver,
        "output_dir": output_dir or config.output_dir,
    }
    if windsor_client is not None:
        initial["windsor_client"] = windsor_client
    if hubspot_client is not None:
        initial["hubspot_client"] = hubspot_client
    return app.invoke(initial)

from __future__ import annotations

import html
from zoneinfo import ZoneInfo

import requests
from slack_sdk.webhook import WebhookClient

from campaign_optimizer_agent.analysis import ReportSnapshot
from campaign_optimizer_agent.clients.github_pages_client import GitHubPagesClient
from campaign_optimizer_agent.clients.gmail_client import GmailClient
from campaign_optimizer_agent.config import AgentConfig
from campaign_optimizer_agent.reporting import report_stem


def report_subject(snapshot: ReportSnapshot) -> str:
    local = snapshot.generated_at.astimezone(ZoneInfo(snapshot.timezone))
    day = f"{local.strftime('%b')} {local.day}, {local.year}"
    return f"{snapshot.brand} {snapshot.channel_label} Optimizer — {day}"


def publish_dashboard(config: AgentConfig, dashboard_html: str, snapshot: ReportSnapshot) -> str | None:
    """Push the dashboard to GitHub Pages; returns the public URL or None."""
    if not config.publish_enabled:
        print("GitHub publish skipped: GITHUB_TOKEN / GITHUB_OWNER / GITHUB_REPO not set.")
        return None

    client = GitHubPagesClient(
        token=config.github_token,
        owner=config.github_owner,
        repo=config.github_repo,
        path=config.github_path,
        timeout_sec=config.http_timeout_sec,
    )
    message = f"Update {snapshot.channel_label} dashboard {snapshot.windows['d30'].date_to}"
    try:
        url = client.publish(dashboard_html, message)
    except (requests.RequestException, RuntimeError, ValueError) as exc:
        print(f"GitHub publish failed: {exc}")
        return None
    print(f"Dashboard published: {url}")
    return url


def post_chat_summary(config: AgentConfig, summary: str) -> bool:
    if not config.slack_enabled:
        print("Slack skipped: SLACK_WEBHOOK not set.")
        return False

    try:
        response = WebhookClient(config.slack_webhook).send(text=summary)
    except Exception as exc:
        print(f"Slack post failed: {exc}")
        return False
    if response.status_code != 200 or response.body != "ok":
        print(f"Slack post failed: {response.status_code} {response.body}")
        return False
    print("Slack summary posted.")
    return True


def _email_bodies(text_report: str, dashboard_html: str, dashboard_url: str | None) -> tuple[str, str]:
    if not dashboard_url:
        return text_report, dashboard_html
    safe_url = html.escape(dashboard_url, quote=True)
    link = (
        '<p style="font-family:sans-serif;padding:12px 24px;">'
        f'📊 Live dashboard: <a href="{safe_url}">{safe_url}</a></p>'
    )
    return f"{text_report}\n\nLive dashboard: {dashboard_url}\n", link + dashboard_html


def send_email_report(
    config: AgentConfig,
    snapshot: ReportSnapshot,
    text_report: str,
    dashboard_html: str,
    dashboard_url: str | None = None,
    *,
    gmail_client: GmailClient | None = None,
) -> bool:
    if not config.email_enabled:
        print("Email skipped: EMAIL_FROM / EMAIL_TO or Gmail credentials not set.")
        return False

    text_body, html_body = _email_bodies(text_report, dashboard_html, dashboard_url)
    try:
        client = gmail_client or GmailClient(
            sender=config.email_from,
            auth_mode=config.email_auth_mode,
            app_password=config.email_pass,
            smtp_host=config.smtp_host,
            smtp_port=config.smtp_port,
            service_account_path=config.gmail_service_account_path,
            delegated_user=config.email_from,
            oauth_client_secret_path=config.gmail_oauth_client_secret_path,
            oauth_refresh_token=config.gmail_oauth_refresh_token,
            timeout_sec=config.http_timeout_sec,
        )
        client.send_report(
            to_email=config.email_to,
            subject=report_subject(snapshot),
            text_body=text_body,
            html_body=html_body,
            attachment_html=dashboard_html,
            attachment_name=f"{report_stem(config.report_prefix, snapshot)}.html",
        )
    except Exception as exc:
        print(f"Email send failed: {exc}")
        return False
    print(f"Email sent to {config.email_to}.")
    return True

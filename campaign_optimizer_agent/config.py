from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env(name: str, default: str = "") -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default.strip()
    value = raw.strip()
    placeholder = f"{name}="
    unquoted = value.strip("'\"").strip()
    if unquoted.lower() == placeholder.lower():
        return default.strip()
    return unquoted if unquoted else default.strip()


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    return int(raw) if raw else default


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if not raw:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _env_map_str(name: str, default: str = "") -> dict[str, str]:
    raw = _env(name, default)
    out: dict[str, str] = {}
    for part in raw.split(","):
        chunk = part.strip()
        if not chunk or ":" not in chunk:
            continue
        key_raw, value_raw = chunk.split(":", 1)
        key = key_raw.strip().lower()
        value = value_raw.strip()
        if not key or not value:
            continue
        out[key] = value
    return out


DEFAULT_CHANNEL_LABELS = "linkedin:LinkedIn,facebook:Meta,tiktok:TikTok,google_ads:Google Ads,youtube:YouTube"


@dataclass(frozen=True)
class Thresholds:
    """Rule constants for the intelligence and recommendation engines."""

    cpd_target: float = 150.0
    monthly_budget: float = 35000.0
    cpd_alert_multiplier: float = 1.5
    cpd_warn_multiplier: float = 1.2
    cross_channel_multiplier: float = 2.0
    ctr_warn: float = 0.005
    ctr_strong: float = 0.008
    cpm_alert: float = 80.0
    cpm_warn: float = 50.0
    disqual_alert: float = 0.45
    disqual_warn: float = 0.35
    disqual_healthy: float = 0.25
    pacing_over: float = 1.0
    pacing_warn: float = 0.85
    pacing_under: float = 0.4
    pipeline_delta: float = 0.2
    show_rate_warn: float = 0.55
    show_rate_healthy: float = 0.75
    top_disqual_min_count: int = 3

    pause_spend_share: float = 0.3
    pause_max_demos: int = 3
    reduce_spend_share: float = 0.15
    scale_cpd_multiplier: float = 0.8
    scale_min_demos: int = 3
    creative_ctr: float = 0.003
    creative_min_impressions: int = 5000
    concentration_share: float = 0.6

    @classmethod
    def from_env(cls) -> "Thresholds":
        defaults = cls()
        return cls(
            cpd_target=_env_float("CPD_TARGET", defaults.cpd_target),
            monthly_budget=_env_float("MONTHLY_BUDGET", defaults.monthly_budget),
            ctr_warn=_env_float("CTR_WARN_THRESHOLD", defaults.ctr_warn),
            cpm_alert=_env_float("CPM_ALERT_THRESHOLD", defaults.cpm_alert),
            disqual_alert=_env_float("DISQUAL_ALERT_THRESHOLD", defaults.disqual_alert),
            disqual_warn=_env_float("DISQUAL_WARN_THRESHOLD", defaults.disqual_warn),
        )


@dataclass(frozen=True)
class AgentConfig:
    timezone: str
    output_dir: str
    report_brand: str

    windsor_api_key: str
    windsor_base_url: str
    windsor_page_size: int
    windsor_max_attempts: int
    hubspot_token: str
    hubspot_base_url: str
    hubspot_max_pages: int
    hubspot_page_delay_sec: float
    http_timeout_sec: int

    primary_connector: str
    primary_channel_label: str
    comparison_channel: str
    opportunity_channel: str
    channel_labels: dict[str, str]

    slack_webhook: str

    email_from: str
    email_pass: str
    email_to: str
    email_auth_mode: str
    smtp_host: str
    smtp_port: int
    gmail_service_account_path: str
    gmail_oauth_client_secret_path: str
    gmail_oauth_refresh_token: str

    github_token: str
    github_owner: str
    github_repo: str
    github_path: str

    thresholds: Thresholds = field(default_factory=Thresholds)

    @classmethod
    def from_env(cls) -> "AgentConfig":
        return cls(
            timezone=_env("REPORT_TIMEZONE", "America/New_York"),
            output_dir=_env("OUTPUT_DIR", "outputs"),
            report_brand=_env("REPORT_BRAND", "FrontrowMD"),
            windsor_api_key=_env("WINDSOR_API_KEY"),
            windsor_base_url=_env("WINDSOR_BASE_URL", "https://connectors.windsor.ai/all"),
            windsor_page_size=_env_int("WINDSOR_PAGE_SIZE", 5000),
            windsor_max_attempts=_env_int("WINDSOR_MAX_ATTEMPTS", 3),
            hubspot_token=_env("HUBSPOT_TOKEN"),
            hubspot_base_url=_env("HUBSPOT_BASE_URL", "https://api.hubapi.com"),
            hubspot_max_pages=_env_int("HUBSPOT_MAX_PAGES", 50),
            hubspot_page_delay_sec=_env_float("HUBSPOT_PAGE_DELAY_SEC", 0.12),
            http_timeout_sec=_env_int("HTTP_TIMEOUT_SEC", 30),
            primary_connector=_env("PRIMARY_CONNECTOR", "linkedin").lower(),
            primary_channel_label=_env("PRIMARY_CHANNEL_LABEL", "LinkedIn"),
            comparison_channel=_env("COMPARISON_CHANNEL", "facebook").lower(),
            opportunity_channel=_env("OPPORTUNITY_CHANNEL", "google_ads").lower(),
            channel_labels=_env_map_str("CHANNEL_LABEL_MAP", DEFAULT_CHANNEL_LABELS),
            slack_webhook=_env("SLACK_WEBHOOK"),
            email_from=_env("EMAIL_FROM"),
            email_pass=_env("EMAIL_PASS"),
            email_to=_env("EMAIL_TO"),
            email_auth_mode=_env("EMAIL_AUTH_MODE", "smtp").lower(),
            smtp_host=_env("SMTP_HOST", "smtp.gmail.com"),
            smtp_port=_env_int("SMTP_PORT", 465),
            gmail_service_account_path=_env("GMAIL_SERVICE_ACCOUNT_PATH"),
            gmail_oauth_client_secret_path=_env("GMAIL_OAUTH_CLIENT_SECRET_PATH"),
            gmail_oauth_refresh_token=_env("GMAIL_OAUTH_REFRESH_TOKEN"),
            github_token=_env("GITHUB_TOKEN"),
            github_owner=_env("GITHUB_OWNER"),
            github_repo=_env("GITHUB_REPO"),
            github_path=_env("GITHUB_PATH", "index.html"),
            thresholds=Thresholds.from_env(),
        )

    def missing_credentials(self) -> list[str]:
        missing: list[str] = []
        if not self.windsor_api_key:
            missing.append("WINDSOR_API_KEY")
        if not self.hubspot_token:
            missing.append("HUBSPOT_TOKEN")
        return missing

    @property
    def slack_enabled(self) -> bool:
        return bool(self.slack_webhook)

    @property
    def email_enabled(self) -> bool:
        if not (self.email_from and self.email_to):
            return False
        if self.email_auth_mode == "smtp":
            return bool(self.email_pass)
        if self.email_auth_mode == "oauth":
            return bool(self.gmail_oauth_client_secret_path and self.gmail_oauth_refresh_token)
        return bool(self.gmail_service_account_path)

    @property
    def publish_enabled(self) -> bool:
        return bool(self.github_token and self.github_owner and self.github_repo)

    @property
    def report_prefix(self) -> str:
        return f"{self.primary_connector or 'campaign'}-optimizer"

    def channel_label(self, channel: str) -> str:
        return self.channel_labels.get(channel.lower(), channel)

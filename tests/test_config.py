from campaign_optimizer_agent.config import AgentConfig, Thresholds


def test_defaults_when_env_is_empty(monkeypatch):
    for name in ("CPD_TARGET", "MONTHLY_BUDGET", "PRIMARY_CONNECTOR", "CHANNEL_LABEL_MAP", "WINDSOR_MAX_ATTEMPTS"):
        monkeypatch.delenv(name, raising=False)
    config = AgentConfig.from_env()

    assert config.thresholds.cpd_target == 150.0
    assert config.thresholds.monthly_budget == 35000.0
    assert config.primary_connector == "linkedin"
    assert config.windsor_max_attempts == 3
    assert config.channel_label("facebook") == "Meta"
    assert config.channel_label("google_ads") == "Google Ads"
    assert config.channel_label("snapchat") == "snapchat"
    assert config.report_prefix == "linkedin-optimizer"


def test_thresholds_from_env(monkeypatch):
    monkeypatch.setenv("CPD_TARGET", "120")
    monkeypatch.setenv("MONTHLY_BUDGET", "'50000'")
    monkeypatch.setenv("DISQUAL_ALERT_THRESHOLD", "0.5")
    thresholds = Thresholds.from_env()

    assert thresholds.cpd_target == 120.0
    assert thresholds.monthly_budget == 50000.0
    assert thresholds.disqual_alert == 0.5
    assert thresholds.ctr_strong == 0.008


def test_placeholder_value_is_treated_as_unset(monkeypatch):
    monkeypatch.setenv("WINDSOR_API_KEY", "WINDSOR_API_KEY=")
    monkeypatch.setenv("HUBSPOT_TOKEN", "  ")
    config = AgentConfig.from_env()

    assert config.windsor_api_key == ""
    assert config.missing_credentials() == ["WINDSOR_API_KEY", "HUBSPOT_TOKEN"]


def test_missing_credentials_empty_when_set(monkeypatch):
    monkeypatch.setenv("WINDSOR_API_KEY", "w_key")
    monkeypatch.setenv("HUBSPOT_TOKEN", '"pat-na1-123"')
    config = AgentConfig.from_env()

    assert config.hubspot_token == "pat-na1-123"
    assert config.missing_credentials() == []


def test_delivery_flags(monkeypatch):
    monkeypatch.setenv("SLACK_WEBHOOK", "https://hooks.slack.com/services/T/B/X")
    monkeypatch.setenv("EMAIL_FROM", "bot@acme.com")
    monkeypatch.setenv("EMAIL_TO", "team@acme.com")
    monkeypatch.setenv("EMAIL_AUTH_MODE", "smtp")
    monkeypatch.delenv("EMAIL_PASS", raising=False)
    monkeypatch.setenv("GITHUB_TOKEN", "gh")
    monkeypatch.setenv("GITHUB_OWNER", "acme")
    monkeypatch.delenv("GITHUB_REPO", raising=False)
    config = AgentConfig.from_env()

    assert config.slack_enabled is True
    assert config.email_enabled is False
    assert config.publish_enabled is False

    monkeypatch.setenv("EMAIL_PASS", "app-pass")
    monkeypatch.setenv("GITHUB_REPO", "reports")
    config = AgentConfig.from_env()

    assert config.email_enabled is True
    assert config.publish_enabled is True


def test_service_account_email_mode(monkeypatch):
    monkeypatch.setenv("EMAIL_FROM", "bot@acme.com")
    monkeypatch.setenv("EMAIL_TO", "team@acme.com")
    monkeypatch.setenv("EMAIL_AUTH_MODE", "SERVICE_ACCOUNT")
    monkeypatch.setenv("GMAIL_SERVICE_ACCOUNT_PATH", "/secrets/sa.json")
    config = AgentConfig.from_env()

    assert config.email_auth_mode == "service_account"
    assert config.email_enabled is True


def test_channel_label_map_override(monkeypatch):
    monkeypatch.setenv("PRIMARY_CONNECTOR", "Facebook")
    monkeypatch.setenv("CHANNEL_LABEL_MAP", "facebook:Meta Ads, linkedin:LinkedIn,broken")
    config = AgentConfig.from_env()

    assert config.primary_connector == "facebook"
    assert config.channel_labels == {"facebook": "Meta Ads", "linkedin": "LinkedIn"}
    assert config.report_prefix == "facebook-optimizer"

from __future__ import annotations

import base64
import json
import smtplib
from email.message import EmailMessage
from pathlib import Path

from google.auth.transport.requests import Request
from google.oauth2 import credentials as oauth_credentials
from google.oauth2 import service_account
from googleapiclient.discovery import build


GMAIL_SEND_SCOPE = "https://www.googleapis.com/auth/gmail.send"


def build_report_message(
    *,
    sender: str,
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str,
    attachment_html: str = "",
    attachment_name: str = "report.html",
) -> EmailMessage:
    message = EmailMessage()
    message["To"] = to_email
    message["From"] = sender
    message["Subject"] = subject
    message.set_content(text_body)
    message.add_alternative(html_body, subtype="html")
    if attachment_html:
        message.add_attachment(
            attachment_html.encode("utf-8"),
            maintype="text",
            subtype="html",
            filename=attachment_name,
        )
    return message


class GmailClient:
    """Sends report emails through Gmail.

    ``smtp`` mode logs in with the sender address and an app password.
    ``oauth`` and ``service_account`` modes go through the Gmail API.
    """

    def __init__(
        self,
        sender: str,
        auth_mode: str = "smtp",
        app_password: str = "",
        smtp_host: str = "smtp.gmail.com",
        smtp_port: int = 465,
        service_account_path: str = "",
        delegated_user: str = "",
        oauth_client_secret_path: str = "",
        oauth_refresh_token: str = "",
        oauth_token_uri: str = "https://oauth2.googleapis.com/token",
        timeout_sec: int = 30,
    ) -> None:
        self.mode = (auth_mode or "smtp").lower()
        self.sender = sender
        self.smtp_host = smtp_host
        self.smtp_port = int(smtp_port)
        self.timeout_sec = timeout_sec
        self._app_password = app_password
        self._service = None

        if self.mode == "smtp":
            if not sender or not app_password:
                raise ValueError("SMTP mode requires EMAIL_FROM and EMAIL_PASS.")
            return

        scopes = [GMAIL_SEND_SCOPE]
        if self.mode == "oauth":
            if not oauth_client_secret_path or not oauth_refresh_token:
                raise ValueError(
                    "OAuth mode requires GMAIL_OAUTH_CLIENT_SECRET_PATH and "
                    "GMAIL_OAUTH_REFRESH_TOKEN."
                )
            payload = json.loads(Path(oauth_client_secret_path).read_text(encoding="utf-8"))
            section = payload.get("installed") or payload.get("web") or {}
            client_id = section.get("client_id")
            client_secret = section.get("client_secret")
            token_uri = section.get("token_uri") or oauth_token_uri
            if not client_id or not client_secret:
                raise ValueError("OAuth client secret JSON missing client_id/client_secret.")

            credentials = oauth_credentials.Credentials(
                token=None,
                refresh_token=oauth_refresh_token,
                token_uri=token_uri,
                client_id=client_id,
                client_secret=client_secret,
                scopes=scopes,
            )
            credentials.refresh(Request())
        else:
            credentials = service_account.Credentials.from_service_account_file(
                service_account_path,
                scopes=scopes,
            )
            if delegated_user:
                credentials = credentials.with_subject(delegated_user)
            self.sender = sender or delegated_user or credentials.service_account_email

        if not self.sender:
            raise ValueError("Sender email is required for Gmail.")

        self._service = build("gmail", "v1", credentials=credentials, cache_discovery=False)

    def send(self, message: EmailMessage) -> dict:
        if self.mode == "smtp":
            with smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=self.timeout_sec) as smtp:
                smtp.login(self.sender, self._app_password)
                smtp.send_message(message)
            return {"mode": "smtp", "to": message["To"]}

        raw = base64.urlsafe_b64encode(message.as_bytes()).decode("utf-8")
        return self._service.users().messages().send(userId="me", body={"raw": raw}).execute()

    def send_report(
        self,
        *,
        to_email: str,
        subject: str,
        text_body: str,
        html_body: str,
        attachment_html: str = "",
        attachment_name: str = "report.html",
    ) -> dict:
        message = build_report_message(
            sender=self.sender,
            to_email=to_email,
            subject=subject,
            text_body=text_body,
            html_body=html_body,
            attachment_html=attachment_html,
            attachment_name=attachment_name,
        )
        return self.send(message)

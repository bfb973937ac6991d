from __future__ import annotations

import base64

import requests


class GitHubPagesClient:
    """Publishes a single file to a GitHub Pages repository via the contents API."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        path: str = "index.html",
        api_base_url: str = "https://api.github.com",
        timeout_sec: int = 30,
    ) -> None:
        self.token = token.strip()
        self.owner = owner.strip()
        self.repo = repo.strip()
        self.path = path.strip().lstrip("/") or "index.html"
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout_sec = max(5, int(timeout_sec))

    @property
    def contents_url(self) -> str:
        return f"{self.api_base_url}/repos/{self.owner}/{self.repo}/contents/{self.path}"

    @property
    def pages_url(self) -> str:
        return f"https://{self.owner}.github.io/{self.repo}/"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3+json",
        }

    def existing_sha(self) -> str | None:
        response = requests.get(self.contents_url, headers=self._headers(), timeout=self.timeout_sec)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        payload = response.json()
        if isinstance(payload, dict):
            return payload.get("sha") or None
        return None

    def publish(self, content: str, message: str) -> str:
        """Create or update the file and return the public Pages URL."""
        body = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        sha = self.existing_sha()
        if sha:
            body["sha"] = sha

        response = requests.put(self.contents_url, json=body, headers=self._headers(), timeout=self.timeout_sec)
        if not response.ok:
            raise RuntimeError(f"contents API HTTP {response.status_code}: {response.text[:300]}")
        return self.pages_url

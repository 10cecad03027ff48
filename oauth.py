"""
GitHub OAuth client

Only the three calls the login flow needs: build the authorize URL, swap the
callback code for an access token, and read the user's profile.
"""

import os
from typing import Optional

import httpx
import structlog

from schemas import Profile

logger = structlog.get_logger()

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
TOKEN_URL = "https://github.com/login/oauth/access_token"
API_URL = "https://api.github.com"


class OAuthError(Exception):
    pass


class GitHubOAuth:
    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        callback_url: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.client_id = client_id or os.getenv("GITHUB_CLIENT_ID", "")
        self.client_secret = client_secret or os.getenv("GITHUB_CLIENT_SECRET", "")
        self.callback_url = callback_url or os.getenv(
            "GITHUB_CALLBACK_URL", "http://localhost:8000/api/auth/github/callback"
        )
        self.timeout = timeout

    def authorization_url(self, state: str) -> str:
        return str(httpx.URL(AUTHORIZE_URL, params={
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "scope": "user:email",
            "state": state,
        }))

    async def fetch_profile(self, code: str) -> Profile:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "code": code,
                    "redirect_uri": self.callback_url,
                },
                headers={"Accept": "application/json"},
            )
            resp.raise_for_status()
            access_token = resp.json().get("access_token")
            if not access_token:
                raise OAuthError(resp.json().get("error_description") or "No access token returned")

            headers = {"Authorization": f"Bearer {access_token}", "Accept": "application/vnd.github+json"}
            user_resp = await client.get(f"{API_URL}/user", headers=headers)
            user_resp.raise_for_status()
            data = user_resp.json()

            emails = [data["email"]] if data.get("email") else []
            if not emails:
                emails_resp = await client.get(f"{API_URL}/user/emails", headers=headers)
                if emails_resp.status_code == 200:
                    listed = sorted(emails_resp.json(), key=lambda e: not e.get("primary"))
                    emails = [e["email"] for e in listed if e.get("verified")]

        logger.info("oauth_profile_fetched", provider="github", provider_id=str(data["id"]))
        return Profile(
            provider_id=str(data["id"]),
            display_name=data.get("name"),
            username=data.get("login"),
            emails=emails,
            photos=[data["avatar_url"]] if data.get("avatar_url") else [],
        )

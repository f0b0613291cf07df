"""Password sign-in against Supabase auth.

Produces the access token used by the query and realtime adapters and the
recipient identity that scopes them.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from getpass import getpass
import json
import logging
import os
import urllib.error
import urllib.request

from dotenv import load_dotenv

from gridwatch.client import SupabaseProject
from gridwatch.core.models import Recipient

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserSession:
    access_token: str
    recipient: Recipient


def _resolve_email() -> str:
    email = os.getenv("GRIDWATCH_EMAIL")
    if email:
        return email
    return input("Email: ").strip()


def _resolve_password() -> str:
    password = os.getenv("GRIDWATCH_PASSWORD")
    if password:
        return password
    return getpass("Password: ")


def parse_session(payload: dict) -> UserSession:
    """Build a UserSession from a token endpoint response."""

    user = payload.get("user") or {}
    token = payload.get("access_token")
    if not token or not user.get("id") or not user.get("email"):
        raise RuntimeError("Sign-in response is missing access_token or user identity")
    return UserSession(
        access_token=token,
        recipient=Recipient(user_id=str(user["id"]), email=str(user["email"])),
    )


def _sign_in_sync(project: SupabaseProject, email: str, password: str) -> UserSession:
    url = f"{project.url.rstrip('/')}/auth/v1/token?grant_type=password"
    data = json.dumps({"email": email, "password": password}).encode("utf-8")
    request = urllib.request.Request(url, data=data, method="POST")
    request.add_header("apikey", project.api_key)
    request.add_header("Content-Type", "application/json")
    try:
        with urllib.request.urlopen(request, timeout=10) as response:
            payload = json.loads(response.read().decode("utf-8"))
    except urllib.error.HTTPError as e:
        body = e.read().decode("utf-8", errors="replace")
        raise RuntimeError(f"Sign-in failed ({e.code}): {body}") from e
    return parse_session(payload)


async def authorize(project: SupabaseProject) -> UserSession:
    """Sign in, prompting for anything missing from the environment."""

    load_dotenv()
    email = _resolve_email()
    password = _resolve_password()
    session = await asyncio.to_thread(_sign_in_sync, project, email, password)
    LOGGER.info("Signed in as %s", session.recipient.email)
    return session

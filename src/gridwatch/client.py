"""Supabase connection settings for gridwatch.

Credentials are read from the environment via python-dotenv to keep secrets
out of the repo.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os

from dotenv import load_dotenv

from gridwatch.adapters.supabase_realtime import SupabaseRealtimeFeed
from gridwatch.adapters.supabase_rest import SupabaseQueryClient


@dataclass(frozen=True)
class SupabaseProject:
    url: str
    api_key: str


def load_project() -> SupabaseProject:
    """Read SUPABASE_URL/SUPABASE_KEY from the environment."""

    load_dotenv()

    url = os.getenv("SUPABASE_URL")
    api_key = os.getenv("SUPABASE_KEY")

    # Fail fast on missing credentials to avoid an ambiguous auth error later.
    if not url or not api_key:
        raise RuntimeError("Missing SUPABASE_URL or SUPABASE_KEY in environment")

    return SupabaseProject(url=url, api_key=api_key)


def build_query_client(project: SupabaseProject, access_token: str) -> SupabaseQueryClient:
    logging.getLogger(__name__).info("Initializing Supabase query client")
    return SupabaseQueryClient(project.url, project.api_key, access_token)


def build_realtime_feed(project: SupabaseProject, access_token: str) -> SupabaseRealtimeFeed:
    return SupabaseRealtimeFeed(project.url, project.api_key, access_token)

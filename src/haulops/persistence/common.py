"""Shared helpers for Supabase-backed stores."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from ..db.supabase import get_supabase_client
from ..errors import OwnerRequiredError, PersistenceError

logger = logging.getLogger(__name__)


def require_client(client: Any = None) -> Any:
    """Return ``client`` or the configured Supabase client, raising if there is none."""
    if client is not None:
        return client
    supabase = get_supabase_client()
    if supabase is None:
        raise PersistenceError(
            "Supabase not configured. Set HAULOPS_SUPABASE_URL and HAULOPS_SUPABASE_KEY environment variables."
        )
    return supabase


def require_owner(owner_id: str | None) -> str:
    """Owner-scoped tables are unique per (owner_id, ...); every read and write names the owner."""
    if not owner_id:
        raise OwnerRequiredError("X-Owner-Id header is required when Supabase storage is configured.")
    return owner_id


def execute(query: Any, action: str) -> list[dict]:
    """Run a postgrest query and return its rows, translating failures to ``PersistenceError``."""
    try:
        response = query.execute()
    except Exception as exc:
        message = str(exc)
        logger.error(f"Failed to {action}: {message}")
        if "row-level security" in message:
            raise PersistenceError(f"Failed to {action}: blocked by row-level security policy") from exc
        raise PersistenceError(f"Failed to {action}: {message}") from exc
    return list(response.data or [])


def parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def parse_datetime(value: Any) -> datetime | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)

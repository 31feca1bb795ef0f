"""Construct the clients and stores the API hands to the services.

Supabase-backed stores are used when Supabase is configured; they need the
caller's owner id and raise ``OwnerRequiredError`` without one. Otherwise each
store falls back to a process-wide in-memory instance, kept separately per
owner id (``None`` is its own partition) for day entries, paid checkpoints and
completed jobs. Tests replace these functions with ``monkeypatch``.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from .db.supabase import get_supabase_client
from .persistence.day_entries import DayEntryStore, InMemoryDayEntryStore, SupabaseDayEntryStore
from .persistence.jobs import InMemoryJobRouteStore, JobRouteStore, SupabaseJobRouteStore
from .persistence.payroll import (
    CompletedJobSource,
    DriverDirectory,
    InMemoryCompletedJobSource,
    InMemoryDriverDirectory,
    InMemoryPayrollStore,
    PayrollStore,
    SupabaseCompletedJobSource,
    SupabaseDriverDirectory,
    SupabasePayrollStore,
)
from .services.routing.assembler import RouteAssembler
from .services.routing.geocoding import PostcodesIOClient
from .services.routing.osrm_client import OSRMClient

logger = logging.getLogger(__name__)


def get_geocoder() -> PostcodesIOClient:
    return PostcodesIOClient()


def get_route_client() -> OSRMClient:
    return OSRMClient()


def get_route_assembler() -> RouteAssembler:
    return RouteAssembler(geocoder=get_geocoder(), router=get_route_client())


@lru_cache()
def _memory_stores() -> dict:
    logger.warning("Supabase not configured - payroll and job data are kept in memory only")
    return {
        "drivers": InMemoryDriverDirectory(),
        "routes": InMemoryJobRouteStore(),
    }


@lru_cache(maxsize=None)
def _owner_memory_stores(owner_id: str | None) -> dict:
    return {
        "entries": InMemoryDayEntryStore(),
        "payroll": InMemoryPayrollStore(),
        "jobs": InMemoryCompletedJobSource(),
    }


def get_day_entry_store(owner_id: str | None = None) -> DayEntryStore:
    client = get_supabase_client()
    if client is None:
        return _owner_memory_stores(owner_id)["entries"]
    return SupabaseDayEntryStore(owner_id=owner_id, client=client)


def get_payroll_store(owner_id: str | None = None) -> PayrollStore:
    client = get_supabase_client()
    if client is None:
        return _owner_memory_stores(owner_id)["payroll"]
    return SupabasePayrollStore(owner_id=owner_id, client=client)


def get_driver_directory() -> DriverDirectory:
    client = get_supabase_client()
    if client is None:
        return _memory_stores()["drivers"]
    return SupabaseDriverDirectory(client=client)


def get_completed_job_source(owner_id: str | None = None) -> CompletedJobSource:
    client = get_supabase_client()
    if client is None:
        return _owner_memory_stores(owner_id)["jobs"]
    return SupabaseCompletedJobSource(owner_id=owner_id, client=client)


def get_job_route_store() -> JobRouteStore:
    client = get_supabase_client()
    if client is None:
        return _memory_stores()["routes"]
    return SupabaseJobRouteStore(client=client)

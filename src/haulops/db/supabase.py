"""Supabase client for Python backend."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
        return client
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


# Tables and views used by the stores:
#
# driver_day_entries (owner_id, driver_id, entry_date, status, shifts, hours, notes, provenance)
#   unique (owner_id, driver_id, entry_date)
# driver_week_payroll (owner_id, driver_id, week_start, paid, paid_at, paid_note)
#   unique (owner_id, driver_id, week_start)
# drivers (id, full_name, pay_type, pay_rate)
# jobs (id, planned_distance_miles, ...)
# job_stops (job_id, stop_order, postcode, name, planned_time, lat, lng)
# v_driver_completed_job_days (driver_id, entry_date, jobs_count, owner_id)

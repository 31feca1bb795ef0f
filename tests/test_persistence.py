from datetime import date, datetime, timezone

import pytest

from haulops.errors import OwnerRequiredError, PersistenceError
from haulops.models.domain import (
    DayStatus,
    DriverDayEntry,
    DriverWeekPayroll,
    EntryProvenance,
    PayType,
    ResolvedStop,
    RouteResult,
)
from haulops.persistence.day_entries import InMemoryDayEntryStore, SupabaseDayEntryStore, entry_from_row
from haulops.persistence.jobs import InMemoryJobRouteStore, SupabaseJobRouteStore
from haulops.persistence.payroll import SupabaseCompletedJobSource, SupabaseDriverDirectory, SupabasePayrollStore

MON = date(2026, 3, 2)


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Records the postgrest call chain and returns canned rows on execute()."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.calls = []

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return method

    def execute(self):
        self.client.executed.append(self)
        if self.client.error:
            raise self.client.error
        return FakeResponse(self.client.rows.get(self.table, []))


class FakeSupabase:
    def __init__(self, rows=None, error=None):
        self.rows = rows or {}
        self.error = error
        self.executed = []

    def table(self, name):
        return FakeQuery(self, name)


def test_in_memory_upsert_replaces_whole_record():
    store = InMemoryDayEntryStore()
    store.upsert(DriverDayEntry("D1", MON, DayStatus.WORK, shifts=1, hours=8.0, notes="first"))
    store.upsert(DriverDayEntry("D1", MON, DayStatus.SICK))

    entry = store.get("D1", MON)
    assert entry.status is DayStatus.SICK
    assert entry.hours is None
    assert entry.notes is None
    assert len(store.list_entries(MON, MON)) == 1


@pytest.mark.parametrize(
    "row, expected",
    [
        ({"provenance": "auto", "notes": "anything"}, EntryProvenance.AUTO),
        ({"provenance": None, "notes": "Auto: from completed job"}, EntryProvenance.AUTO),
        ({"provenance": None, "notes": "Work"}, EntryProvenance.MANUAL),
        ({"notes": "  MANUAL: Work (Training)"}, EntryProvenance.MANUAL),
        ({"notes": "Auto: from completed job"}, EntryProvenance.AUTO),
        ({"notes": None}, EntryProvenance.MANUAL),
    ],
)
def test_provenance_is_read_from_column_or_legacy_notes(row, expected):
    base = {"driver_id": "D1", "entry_date": "2026-03-02", "status": "work", "shifts": 1, "hours": None}

    assert entry_from_row({**base, **row}).provenance is expected


def test_supabase_day_entry_upsert_uses_owner_conflict_key():
    client = FakeSupabase()
    store = SupabaseDayEntryStore(owner_id="owner-1", client=client)

    store.upsert(DriverDayEntry("D1", MON, DayStatus.WORK, shifts=1, provenance=EntryProvenance.AUTO))

    query = client.executed[0]
    name, args, kwargs = query.calls[0]
    assert query.table == "driver_day_entries"
    assert name == "upsert"
    assert args[0]["owner_id"] == "owner-1"
    assert args[0]["entry_date"] == "2026-03-02"
    assert args[0]["provenance"] == "auto"
    assert kwargs == {"on_conflict": "owner_id,driver_id,entry_date"}


@pytest.mark.parametrize(
    "store_cls",
    [SupabaseDayEntryStore, SupabasePayrollStore, SupabaseCompletedJobSource],
)
@pytest.mark.parametrize("owner_id", [None, ""])
def test_owner_scoped_stores_require_an_owner(store_cls, owner_id):
    client = FakeSupabase()

    with pytest.raises(OwnerRequiredError, match="X-Owner-Id"):
        store_cls(owner_id=owner_id, client=client)

    assert client.executed == []


def test_supabase_day_entry_reads_are_scoped_to_owner():
    client = FakeSupabase()
    store = SupabaseDayEntryStore(owner_id="owner-1", client=client)

    store.list_entries(MON, date(2026, 3, 8))
    store.get("D1", MON)

    assert len(client.executed) == 2
    for query in client.executed:
        assert ("eq", ("owner_id", "owner-1"), {}) in query.calls


def test_supabase_paid_status_upsert_uses_owner_conflict_key():
    client = FakeSupabase()
    store = SupabasePayrollStore(owner_id="owner-1", client=client)

    store.set_paid(DriverWeekPayroll(driver_id="D1", week_start=MON, paid=False))
    store.list_for_week(MON)

    upsert, listing = client.executed
    name, args, kwargs = upsert.calls[0]
    assert (name, upsert.table) == ("upsert", "driver_week_payroll")
    assert args[0]["owner_id"] == "owner-1"
    assert args[0]["paid_at"] is None
    assert kwargs == {"on_conflict": "owner_id,driver_id,week_start"}
    assert ("eq", ("owner_id", "owner-1"), {}) in listing.calls


def test_supabase_list_entries_skips_invalid_rows():
    client = FakeSupabase(
        rows={
            "driver_day_entries": [
                {"driver_id": "D1", "entry_date": "2026-03-02", "status": "leave", "shifts": 1, "hours": "8"},
                {"driver_id": "D1", "entry_date": "2026-03-03", "status": "holiday"},
            ]
        }
    )

    entries = SupabaseDayEntryStore(owner_id="owner-1", client=client).list_entries(MON, date(2026, 3, 8))

    assert len(entries) == 1
    assert entries[0].status is DayStatus.LEAVE
    assert entries[0].hours == 8.0


def test_supabase_errors_become_persistence_errors():
    client = FakeSupabase(error=RuntimeError('new row violates row-level security policy for table "x"'))

    with pytest.raises(PersistenceError, match="row-level security"):
        SupabaseDayEntryStore(owner_id="owner-1", client=client).delete("D1", MON)


def test_driver_directory_reads_pay_settings():
    client = FakeSupabase(
        rows={"drivers": [{"id": 7, "full_name": "Ann", "pay_type": "hourly", "pay_rate": "14.25"}]}
    )

    drivers = SupabaseDriverDirectory(client=client).list_drivers()

    assert drivers[0].id == "7"
    assert drivers[0].pay_type is PayType.HOURLY
    assert drivers[0].pay_rate == 14.25


def test_completed_job_source_ignores_incomplete_rows():
    client = FakeSupabase(
        rows={
            "v_driver_completed_job_days": [
                {"driver_id": "D1", "entry_date": "2026-03-02"},
                {"driver_id": None, "entry_date": "2026-03-03"},
            ]
        }
    )

    signals = SupabaseCompletedJobSource(owner_id="o", client=client).completed_job_days(MON, date(2026, 3, 8))

    assert [(s.driver_id, s.entry_date) for s in signals] == [("D1", MON)]


def _route() -> RouteResult:
    planned = datetime(2025, 12, 21, 9, 30, tzinfo=timezone.utc)
    return RouteResult(
        stops=[
            ResolvedStop(1, "WN5 0LR", "Collection", planned, 53.54, -2.69),
            ResolvedStop(2, "WS13 8NF", "Delivery", None, 52.69, -2.02),
        ],
        total_distance_miles=61.3,
    )


def test_supabase_job_route_replaces_stops_and_sets_miles():
    client = FakeSupabase()

    SupabaseJobRouteStore(client=client).replace_stops("job-1", _route())

    tables = [(query.table, query.calls[0][0]) for query in client.executed]
    assert tables == [("job_stops", "delete"), ("job_stops", "insert"), ("jobs", "update")]
    rows = client.executed[1].calls[0][1][0]
    assert rows[0] == {
        "job_id": "job-1",
        "stop_order": 1,
        "postcode": "WN5 0LR",
        "name": "Collection",
        "planned_time": "2025-12-21T09:30:00+00:00",
        "lat": 53.54,
        "lng": -2.69,
    }
    assert client.executed[2].calls[0][1][0] == {"planned_distance_miles": 61.3}


def test_in_memory_job_route_store_keeps_latest_route():
    store = InMemoryJobRouteStore()
    store.replace_stops("job-1", _route())

    stops = store.get_stops("job-1")

    assert [stop.sequence for stop in stops] == [1, 2]
    assert store.planned_miles["job-1"] == 61.3

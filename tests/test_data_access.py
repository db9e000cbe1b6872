import asyncio

import pytest
import httpx
from unittest.mock import AsyncMock, Mock

from perfect_plumbing.exceptions import (
    BackendRequestError,
    CustomerInUseError,
    RecordNotFoundError,
    ReferentialConstraintError,
)
from perfect_plumbing.models import JobStatus
from perfect_plumbing.services.client import SupabaseBackend
from perfect_plumbing.services.query_cache import QueryCache
from tests.fake_supabase import api_error


class TestQueryCache:
    """Unit tests for QueryCache"""

    @pytest.mark.asyncio
    async def test_fetch_caches_result(self):
        """Test a second fetch is served from cache"""
        cache = QueryCache()
        loader = AsyncMock(return_value=["a"])

        assert await cache.fetch(("jobs", "all"), loader) == ["a"]
        assert await cache.fetch(("jobs", "all"), loader) == ["a"]

        loader.assert_awaited_once()
        assert (cache.hits, cache.misses) == (1, 1)

    @pytest.mark.asyncio
    async def test_invalidate_by_prefix(self):
        """Test invalidation drops every key under a prefix and nothing else"""
        cache = QueryCache()
        for key in [("jobs", "all"), ("jobs", "draft"), ("job", "j1"), ("job", "j2"), ("customers",)]:
            await cache.fetch(key, AsyncMock(return_value=key))

        assert cache.invalidate("jobs") == 2
        assert cache.invalidate("job", "j1") == 1
        assert ("job", "j2") in cache
        assert "customers" in cache
        assert len(cache) == 2

    @pytest.mark.asyncio
    async def test_failed_load_is_not_cached(self):
        """Test a loader error leaves no entry behind"""
        cache = QueryCache()
        with pytest.raises(RuntimeError):
            await cache.fetch("customers", AsyncMock(side_effect=RuntimeError("down")))
        assert "customers" not in cache

    @pytest.mark.asyncio
    async def test_load_started_before_invalidation_is_not_cached(self):
        """Test a result loaded across an invalidation is returned but not kept"""
        cache = QueryCache()
        release = asyncio.Event()

        async def slow_load():
            await release.wait()
            return ["old"]

        pending = asyncio.ensure_future(cache.fetch(("customers",), slow_load))
        await asyncio.sleep(0)
        cache.invalidate("customers")
        release.set()

        assert await pending == ["old"]
        assert ("customers",) not in cache
        assert len(cache) == 0


class TestSupabaseBackend:
    """Unit tests for backend error translation"""

    @pytest.fixture
    def backend(self):
        return SupabaseBackend(Mock())

    @staticmethod
    def failing_query(error):
        query = Mock()
        query.execute = AsyncMock(side_effect=error)
        return query

    @pytest.mark.asyncio
    async def test_foreign_key_violation(self, backend):
        """Test 23503 becomes a referential error"""
        with pytest.raises(ReferentialConstraintError) as exc_info:
            await backend.execute(self.failing_query(api_error("fk", "23503")), "delete customer")
        assert exc_info.value.code == "23503"
        assert exc_info.value.operation == "delete customer"

    @pytest.mark.asyncio
    async def test_no_rows_for_single(self, backend):
        """Test PGRST116 becomes not found"""
        with pytest.raises(RecordNotFoundError):
            await backend.execute(self.failing_query(api_error("no rows", "PGRST116")), "get job")

    @pytest.mark.asyncio
    async def test_other_api_error(self, backend):
        """Test any other API error is a generic backend failure"""
        with pytest.raises(BackendRequestError) as exc_info:
            await backend.execute(self.failing_query(api_error("permission denied", "42501")), "create job")
        assert not isinstance(exc_info.value, ReferentialConstraintError)
        assert exc_info.value.code == "42501"

    @pytest.mark.asyncio
    async def test_transport_error(self, backend):
        """Test network failures are backend failures"""
        with pytest.raises(BackendRequestError):
            await backend.execute(self.failing_query(httpx.ConnectError("refused")), "list jobs")


class TestCustomersService:
    """Tests for customer reads and writes"""

    @pytest.mark.asyncio
    async def test_list_ordered_by_name(self, store, db):
        """Test customers come back in name order"""
        for name in ["Wes Ortiz", "Ana Blake", "Kim Tran"]:
            db.seed("customers", full_name=name, phone="555-0000")
        customers = await store.customers.list_customers()
        assert [c.full_name for c in customers] == ["Ana Blake", "Kim Tran", "Wes Ortiz"]

    @pytest.mark.asyncio
    async def test_create_invalidates_list(self, store, db):
        """Test a new customer shows up in the next list read"""
        assert await store.customers.list_customers() == []
        await store.customers.create_customer({"full_name": "Lee Park", "phone": "555-0101"})
        assert [c.full_name for c in await store.customers.list_customers()] == ["Lee Park"]
        assert db.requests.count(("customers", "select")) == 2

    @pytest.mark.asyncio
    async def test_list_is_cached_between_mutations(self, store, db, customer_row):
        """Test repeat reads are not re-fetched"""
        await store.customers.list_customers()
        await store.customers.list_customers()
        assert db.requests.count(("customers", "select")) == 1

    @pytest.mark.asyncio
    async def test_delete_customer_with_jobs(self, store, db, customer_row, make_job):
        """Test deleting a customer that has jobs is refused"""
        make_job("draft")
        with pytest.raises(CustomerInUseError) as exc_info:
            await store.customers.delete_customer(customer_row["id"])
        assert "linked jobs" in exc_info.value.message
        assert customer_row["id"] in db.tables["customers"]

    @pytest.mark.asyncio
    async def test_delete_customer_without_jobs(self, store, customer_row):
        """Test a customer with no jobs is removed from later list reads"""
        assert len(await store.customers.list_customers()) == 1
        await store.customers.delete_customer(customer_row["id"])
        assert await store.customers.list_customers() == []

    @pytest.mark.asyncio
    async def test_write_during_read_is_visible_next_read(self, store, customer_row):
        """Test a list read in flight during a create does not hide the new customer"""
        release = asyncio.Event()
        execute = store.backend.execute

        async def held_execute(query, operation):
            response = await execute(query, operation)
            if operation == "list customers" and not release.is_set():
                await release.wait()
            return response

        store.backend.execute = held_execute
        pending = asyncio.ensure_future(store.customers.list_customers())
        await asyncio.sleep(0)

        await store.customers.create_customer({"full_name": "Lee Park", "phone": "555-0101"})
        release.set()
        assert [c.full_name for c in await pending] == ["Dana Whitfield"]

        names = [c.full_name for c in await store.customers.list_customers()]
        assert names == ["Dana Whitfield", "Lee Park"]

    @pytest.mark.asyncio
    async def test_rename_refreshes_job_reads(self, store, customer_row, make_job):
        """Test jobs read before a customer rename show the new name afterwards"""
        job = make_job("complete")
        await store.jobs.get_job(job.id)
        await store.jobs.list_jobs()

        await store.customers.update_customer(customer_row["id"], {"full_name": "Dana Renamed"})

        assert (await store.jobs.get_job(job.id)).customer_name == "Dana Renamed"
        assert [j.customer_name for j in await store.jobs.list_jobs()] == ["Dana Renamed"]

    @pytest.mark.asyncio
    async def test_get_missing_customer(self, store):
        """Test reading an unknown customer"""
        with pytest.raises(RecordNotFoundError):
            await store.customers.get_customer("missing")


class TestJobsService:
    """Tests for job reads and writes"""

    @pytest.mark.asyncio
    async def test_list_filters_by_status(self, store, make_job):
        """Test the status filter and the all filter"""
        quoted = make_job("quoted")
        make_job("draft")

        assert [j.id for j in await store.jobs.list_jobs(JobStatus.QUOTED)] == [quoted.id]
        assert len(await store.jobs.list_jobs("all")) == 2
        assert len(await store.jobs.list_jobs()) == 2

    @pytest.mark.asyncio
    async def test_list_embeds_customer_and_orders_by_date(self, store, make_job):
        """Test newest scheduled date first, with customer name and phone"""
        make_job(scheduled_date="2026-10-01")
        make_job(scheduled_date="2026-11-05")

        jobs = await store.jobs.list_jobs()
        assert [j.scheduled_date.isoformat() for j in jobs] == ["2026-11-05", "2026-10-01"]
        assert jobs[0].customer.full_name == "Dana Whitfield"
        assert jobs[0].customer.phone == "416-555-0142"
        assert jobs[0].customer.address is None

    @pytest.mark.asyncio
    async def test_get_job_embeds_full_customer(self, store, make_job):
        job = make_job()
        fetched = await store.jobs.get_job(job.id)
        assert fetched.customer.address == "18 Birchmount Rd"

    @pytest.mark.asyncio
    async def test_update_invalidates_job_and_lists(self, store, make_job, db):
        """Test a job update refreshes both the list and the single read"""
        job = make_job("draft")
        await store.jobs.list_jobs("draft")
        await store.jobs.get_job(job.id)

        await store.jobs.update_job(job.id, {"description": "Replace water heater"})

        assert await store.jobs.list_jobs("draft") != []
        assert (await store.jobs.get_job(job.id)).description == "Replace water heater"
        assert db.requests.count(("jobs", "select")) == 4

    @pytest.mark.asyncio
    async def test_update_sends_only_changes(self, store, make_job, db):
        """Test partial updates leave other columns alone"""
        job = make_job("draft", scheduled_time="09:30")
        await store.jobs.update_job(job.id, {"status": "quoted"})
        row = db.tables["jobs"][job.id]
        assert row["status"] == "quoted"
        assert row["scheduled_time"] == "09:30"

    @pytest.mark.asyncio
    async def test_create_job_with_unknown_customer(self, store):
        """Test the backend's reference check on job creation"""
        with pytest.raises(ReferentialConstraintError):
            await store.jobs.create_job({
                "customer_id": "nobody",
                "job_address": "1 Main St",
                "description": "Leak",
                "scheduled_date": "2026-10-20",
            })


class TestPaymentsAndDocumentsServices:
    """Tests for payment and document reads"""

    @pytest.mark.asyncio
    async def test_payments_by_job_newest_first(self, store, make_job, db):
        first = make_job("complete")
        other = make_job("complete")
        db.seed("payments", job_id=first.id, client_name="Dana", amount=50, method="cash", payment_date="2026-10-01")
        db.seed("payments", job_id=first.id, client_name="Dana", amount=70, method="cash", payment_date="2026-10-09")
        db.seed("payments", job_id=other.id, client_name="Dana", amount=10, method="e_transfer", payment_date="2026-10-05")

        payments = await store.payments.list_payments(first.id)
        assert [p.amount for p in payments] == [70, 50]
        assert len(await store.payments.list_payments()) == 3

    @pytest.mark.asyncio
    async def test_payment_invalidates_jobs(self, store, make_job):
        """Test recording a payment refreshes cached job lists"""
        job = make_job("complete")
        await store.jobs.list_jobs()
        await store.payments.create_payment({
            "job_id": job.id, "client_name": "Dana", "amount": 40, "method": "cash", "payment_date": "2026-10-19",
        })
        assert "jobs" not in store.cache
        assert ("jobs", "all") not in store.cache

    @pytest.mark.asyncio
    async def test_empty_line_item_batch_sends_nothing(self, store, db):
        assert await store.line_items.create_line_items([]) == []
        assert db.requests == []

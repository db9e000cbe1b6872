"""
Pytest configuration and shared fixtures
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from perfect_plumbing.models import Job  # noqa: E402
from perfect_plumbing.services.client import SupabaseBackend  # noqa: E402
from perfect_plumbing.services.store import DataStore  # noqa: E402
from tests.fake_supabase import FakeDatabase  # noqa: E402


class FixedClock:
    """Clock that only moves when told to"""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta) -> datetime:
        self.current += timedelta(**delta)
        return self.current


@pytest.fixture
def db():
    """Fresh in-memory backend"""
    return FakeDatabase()


@pytest.fixture
def store(db):
    """Data store wired to the in-memory backend"""
    return DataStore(SupabaseBackend(db))


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def customer_row(db):
    return db.seed(
        "customers",
        full_name="Dana Whitfield",
        phone="416-555-0142",
        email="dana@example.com",
        address="18 Birchmount Rd",
    )


@pytest.fixture
def make_job(db, customer_row):
    """Factory seeding a job for ``customer_row`` and returning it as read with its customer"""
    def _make(status="draft", **fields):
        row = db.seed(
            "jobs",
            customer_id=customer_row["id"],
            job_address=fields.pop("job_address", customer_row["address"]),
            description=fields.pop("description", "Replace kitchen faucet cartridge"),
            scheduled_date=fields.pop("scheduled_date", "2026-10-19"),
            status=status,
            **fields,
        )
        return Job.model_validate({**row, "customers": customer_row})
    return _make

"""
Data store bundling the per-table services around one backend and cache
"""

from typing import Optional

from .client import SupabaseBackend
from .customers import CustomersService
from .documents import DocumentsService
from .jobs import JobsService
from .line_items import LineItemsService
from .payments import PaymentsService
from .query_cache import QueryCache
from ..config import Settings


class DataStore:
    """Entry point to the data access layer"""

    def __init__(self, backend: SupabaseBackend, cache: Optional[QueryCache] = None):
        self.backend = backend
        self.cache = cache or QueryCache()
        self.customers = CustomersService(backend, self.cache)
        self.jobs = JobsService(backend, self.cache)
        self.documents = DocumentsService(backend, self.cache)
        self.line_items = LineItemsService(backend, self.cache)
        self.payments = PaymentsService(backend, self.cache)

    @classmethod
    async def connect(cls, settings: Optional[Settings] = None) -> "DataStore":
        backend = await SupabaseBackend.connect(settings)
        return cls(backend)

"""
Data access layer over the hosted Supabase backend.

This module contains:
- The backend client wrapper and its error translation
- One service per table (customers, jobs, documents, line items, payments)
- The shared query cache and its invalidation rules
"""

from .client import SupabaseBackend
from .query_cache import QueryCache
from .customers import CustomersService
from .jobs import JobsService
from .documents import DocumentsService
from .line_items import LineItemsService
from .payments import PaymentsService
from .store import DataStore

__all__ = [
    'SupabaseBackend',
    'QueryCache',
    'CustomersService',
    'JobsService',
    'DocumentsService',
    'LineItemsService',
    'PaymentsService',
    'DataStore',
]

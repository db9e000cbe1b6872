"""
Shared plumbing for the per-table services.
"""

from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel

from .client import SupabaseBackend
from .query_cache import QueryCache
from ..exceptions import RecordNotFoundError

ModelT = TypeVar("ModelT", bound=BaseModel)


class TableService:
    """Base class holding the backend, the shared cache and the table name"""

    table_name: str = ""

    def __init__(self, backend: SupabaseBackend, cache: QueryCache):
        self.backend = backend
        self.cache = cache

    def query(self) -> Any:
        return self.backend.table(self.table_name)

    @staticmethod
    def _rows(response: Any) -> List[Dict[str, Any]]:
        data = response.data
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    def _many(self, response: Any, model: Type[ModelT]) -> List[ModelT]:
        return [model.model_validate(row) for row in self._rows(response)]

    def _one(self, response: Any, model: Type[ModelT], operation: str) -> ModelT:
        rows = self._rows(response)
        if not rows:
            raise RecordNotFoundError(f"{operation}: no record returned", operation=operation)
        return model.model_validate(rows[0])

"""
Line Items Service

Reads and writes priced material rows in the ``line_items`` table.
"""

import logging
from typing import Any, Dict, List

from .base import TableService
from ..models import LineItem


logger = logging.getLogger(__name__)


class LineItemsService(TableService):
    """Service for document line items"""

    table_name = "line_items"

    async def list_line_items(self, document_id: str) -> List[LineItem]:
        async def load() -> List[LineItem]:
            query = self.query().select("*").eq("document_id", document_id)
            response = await self.backend.execute(query, f"list line items for document {document_id}")
            return self._many(response, LineItem)

        return await self.cache.fetch(("line_items", document_id), load)

    async def create_line_items(self, rows: List[Dict[str, Any]]) -> List[LineItem]:
        """Insert a batch of line items in one request; an empty batch sends nothing"""
        if not rows:
            return []
        response = await self.backend.execute(self.query().insert(rows), "create line items")
        items = self._many(response, LineItem)
        self.cache.invalidate("line_items")
        logger.info(f"Created {len(items)} line items")
        return items

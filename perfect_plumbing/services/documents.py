"""
Documents Service

Reads and writes quote/invoice rows in the ``documents`` table. Documents
are immutable, so there is no update path.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from .base import TableService
from ..models import Document, DocumentType


logger = logging.getLogger(__name__)


class DocumentsService(TableService):
    """Service for quotes and invoices"""

    table_name = "documents"

    async def list_documents(self, job_id: str,
                             document_type: Optional[Union[DocumentType, str]] = None) -> List[Document]:
        """List a job's documents, newest first, optionally of one type"""
        type_key = DocumentType(document_type).value if document_type else None

        async def load() -> List[Document]:
            query = self.query().select("*").eq("job_id", job_id)
            if type_key:
                query = query.eq("document_type", type_key)
            query = query.order("created_at", desc=True)
            response = await self.backend.execute(query, f"list documents for job {job_id}")
            return self._many(response, Document)

        return await self.cache.fetch(("documents", job_id, type_key), load)

    async def create_document(self, data: Dict[str, Any]) -> Document:
        response = await self.backend.execute(self.query().insert(data), "create document")
        document = self._one(response, Document, "create document")
        self.cache.invalidate("documents")
        logger.info(f"✅ {document.document_type.value.title()} created: {document.id} for job {document.job_id}")
        return document

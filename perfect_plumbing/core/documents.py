"""
Quote and invoice generation

A quote is built from a work description, material rows and a labour or
flat-rate charge. An invoice is built from a recorded payment and carries
no line items. Both carry the apprentice disclaimer.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .job_lifecycle import JobLifecycleController
from ..models import (
    Document,
    DocumentType,
    Job,
    JobStatus,
    LineItem,
    MaterialRow,
    QuoteIn,
    validate_form,
)
from ..services.store import DataStore


logger = logging.getLogger(__name__)

APPRENTICE_DISCLAIMER = (
    "This work was performed by a 4th-year plumbing apprentice, not a licensed plumber. "
    "The client was made aware of this prior to the commencement of work and agreed to proceed. "
    "Pricing reflects apprentice-level rates."
)


@dataclass
class QuoteResult:
    document: Document
    line_items: List[LineItem] = field(default_factory=list)
    job: Optional[Job] = None


def billable_rows(materials: Iterable[MaterialRow]) -> List[MaterialRow]:
    """Material rows that name an item; unnamed rows are never persisted"""
    return [row for row in materials if row.item_name]


def materials_total(materials: Iterable[MaterialRow]) -> float:
    return round(sum(row.quantity * row.unit_price for row in materials), 2)


def document_total(materials: Iterable[MaterialRow], labour_charge: float) -> float:
    return round(materials_total(materials) + labour_charge, 2)


def build_document_row(job: Job, document_type: DocumentType, description: Optional[str],
                       labour_charge: float, total: float) -> Dict[str, Any]:
    return {
        "job_id": job.id,
        "document_type": document_type.value,
        "charge_to": job.customer_name,
        "job_address": job.job_address,
        "description_of_work": description,
        "labour_charge": round(labour_charge, 2),
        "total": total,
        "disclaimer_text": APPRENTICE_DISCLAIMER,
        "pdf_file_path": None,
    }


class DocumentGenerator:
    """Creates quotes and invoices for jobs"""

    def __init__(self, store: DataStore, lifecycle: Optional[JobLifecycleController] = None):
        self.store = store
        self.lifecycle = lifecycle or JobLifecycleController(store)

    async def generate_quote(self, job: Job, description: str = "",
                             materials: Sequence[Union[MaterialRow, Dict[str, Any]]] = (),
                             labour_charge: Union[float, str] = 0) -> QuoteResult:
        """
        Generate and persist a quote for ``job``

        Writes the document, then its named line items (if any), then moves
        a draft job to quoted.

        Args:
            job: Job being quoted, ideally read with its customer
            description: Free-text description of the work
            materials: Material rows (item name, quantity, unit price)
            labour_charge: Labour or flat-rate charge

        Returns:
            QuoteResult with the document, its line items and the job as it
            stands after the quote
        """
        form = validate_form(
            QuoteIn,
            {
                "description": description,
                "materials": [m.model_dump() if isinstance(m, MaterialRow) else m for m in materials],
                "labour_charge": labour_charge,
            },
            "Enter valid quantities and prices",
        )
        rows = billable_rows(form.materials)
        total = document_total(rows, form.labour_charge)

        document = await self.store.documents.create_document(
            build_document_row(job, DocumentType.QUOTE, form.description, form.labour_charge, total)
        )
        line_items = await self.store.line_items.create_line_items([
            {
                "document_id": document.id,
                "quantity": row.quantity,
                "item_name": row.item_name,
                "unit_price": row.unit_price,
                "line_total": row.line_total,
            }
            for row in rows
        ])

        if job.status == JobStatus.DRAFT:
            job = await self.lifecycle.transition(job, JobStatus.QUOTED)

        logger.info(f"✅ Quote generated for job {job.id}: ${total:.2f}",
                    extra={"evt": "quote_generated", "job_id": job.id, "document_id": document.id})
        return QuoteResult(document=document, line_items=line_items, job=job)

    async def generate_invoice(self, job: Job, amount: float) -> Document:
        """Persist an invoice for ``job`` charging ``amount`` as a flat rate"""
        amount = round(amount, 2)
        document = await self.store.documents.create_document(
            build_document_row(job, DocumentType.INVOICE, job.description, amount, amount)
        )
        logger.info(f"✅ Invoice generated for job {job.id}: ${amount:.2f}",
                    extra={"evt": "invoice_generated", "job_id": job.id, "document_id": document.id})
        return document

    async def latest_document(self, job_id: str,
                              document_type: Union[DocumentType, str]) -> Optional[Document]:
        documents = await self.store.documents.list_documents(job_id, document_type)
        return documents[0] if documents else None

    async def document_lines(self, document: Document) -> List[LineItem]:
        return await self.store.line_items.list_line_items(document.id)

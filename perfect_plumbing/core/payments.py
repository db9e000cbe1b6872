"""
Payment recording

Saving a payment runs three writes in order: the payment itself, an
invoice for the same amount, and the job's move to invoiced. Each write
starts only after the previous one has returned. There is no transaction
around them; a failure part-way leaves the earlier writes in place and is
reported through ``PaymentRecordingError``.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Optional, Union

from .documents import DocumentGenerator
from .job_lifecycle import JobLifecycleController, can_transition
from ..exceptions import BackendRequestError, InvalidTransitionError, PaymentRecordingError
from ..models import Document, Job, JobStatus, Payment, PaymentIn, PaymentMethod, validate_form
from ..services.store import DataStore


logger = logging.getLogger(__name__)


@dataclass
class PaymentOutcome:
    payment: Payment
    invoice: Document
    job: Job


class PaymentRecorder:
    """Records payments and issues the matching invoice"""

    def __init__(self, store: DataStore,
                 lifecycle: Optional[JobLifecycleController] = None,
                 documents: Optional[DocumentGenerator] = None,
                 today: Callable[[], date] = date.today):
        self.store = store
        self.lifecycle = lifecycle or JobLifecycleController(store)
        self.documents = documents or DocumentGenerator(store, self.lifecycle)
        self.today = today

    async def record_payment(self, job: Job, amount: Union[float, str],
                             method: Union[PaymentMethod, str] = PaymentMethod.CASH) -> PaymentOutcome:
        """
        Record a payment for a completed job

        Args:
            job: The job being paid for, ideally read with its customer
            amount: Amount received; must be a positive number
            method: ``cash`` or ``e_transfer``

        Returns:
            PaymentOutcome with the payment, the invoice and the invoiced job

        Raises:
            InvalidInputError: Amount or method rejected before any write
            InvalidTransitionError: The job cannot be invoiced from its status
            PaymentRecordingError: One of the three writes failed
        """
        form = validate_form(PaymentIn, {"amount": amount, "method": method}, "Enter a valid amount")
        if not can_transition(job.status, JobStatus.INVOICED):
            raise InvalidTransitionError(job.status.value, JobStatus.INVOICED.value)

        completed: Dict[str, Any] = {}

        try:
            payment = await self.store.payments.create_payment({
                "job_id": job.id,
                "client_name": job.customer_name,
                "amount": form.amount,
                "method": form.method.value,
                "payment_date": self.today().isoformat(),
            })
        except BackendRequestError as e:
            raise self._step_failed("payment", e, completed) from e
        completed["payment"] = payment

        try:
            invoice = await self.documents.generate_invoice(job, form.amount)
        except BackendRequestError as e:
            raise self._step_failed("invoice", e, completed) from e
        completed["invoice"] = invoice

        try:
            invoiced_job = await self.lifecycle.transition(job, JobStatus.INVOICED)
        except BackendRequestError as e:
            raise self._step_failed("status", e, completed) from e

        logger.info(f"✅ Payment recorded & invoice generated for job {job.id}",
                    extra={"evt": "payment_recorded", "job_id": job.id, "payment_id": payment.id,
                           "document_id": invoice.id})
        return PaymentOutcome(payment=payment, invoice=invoice, job=invoiced_job)

    def _step_failed(self, step: str, error: BackendRequestError,
                     completed: Dict[str, Any]) -> PaymentRecordingError:
        logger.error(f"❌ Payment recording failed at {step} step after {sorted(completed) or 'no writes'}",
                     extra={"evt": "payment_failed", "step": step})
        return PaymentRecordingError(f"Failed to save: {error.message}", step=step,
                                     completed=dict(completed), code=error.code)

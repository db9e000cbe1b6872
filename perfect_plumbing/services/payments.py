"""
Payments Service

Reads and writes the ``payments`` table. Payments are immutable.
"""

import logging
from typing import Any, Dict, List, Optional

from .base import TableService
from ..models import Payment


logger = logging.getLogger(__name__)


class PaymentsService(TableService):
    """Service for recorded payments"""

    table_name = "payments"

    async def list_payments(self, job_id: Optional[str] = None) -> List[Payment]:
        """List payments, most recent payment date first, optionally for one job"""
        async def load() -> List[Payment]:
            query = self.query().select("*")
            if job_id:
                query = query.eq("job_id", job_id)
            query = query.order("payment_date", desc=True)
            response = await self.backend.execute(query, "list payments")
            return self._many(response, Payment)

        return await self.cache.fetch(("payments", job_id), load)

    async def create_payment(self, data: Dict[str, Any]) -> Payment:
        response = await self.backend.execute(self.query().insert(data), "create payment")
        payment = self._one(response, Payment, "create payment")
        self.cache.invalidate("payments")
        self.cache.invalidate("jobs")
        self.cache.invalidate("dashboard")
        logger.info(f"✅ Payment recorded: ${payment.amount:.2f} ({payment.method.value}) for job {payment.job_id}")
        return payment

"""
Customers Service

Reads and writes the ``customers`` table.
"""

import logging
from typing import Any, Dict, List

from .base import TableService
from ..exceptions import CustomerInUseError, ReferentialConstraintError
from ..models import Customer


logger = logging.getLogger(__name__)

CUSTOMER_IN_USE_MESSAGE = "Cannot delete: customer has linked jobs"


class CustomersService(TableService):
    """Service for managing customers"""

    table_name = "customers"

    async def list_customers(self) -> List[Customer]:
        """List all customers ordered by name"""
        async def load() -> List[Customer]:
            query = self.query().select("*").order("full_name")
            response = await self.backend.execute(query, "list customers")
            return self._many(response, Customer)

        return await self.cache.fetch(("customers",), load)

    async def get_customer(self, customer_id: str) -> Customer:
        """Get a single customer by ID"""
        async def load() -> Customer:
            query = self.query().select("*").eq("id", customer_id).single()
            response = await self.backend.execute(query, f"get customer {customer_id}")
            return self._one(response, Customer, "get customer")

        return await self.cache.fetch(("customers", customer_id), load)

    async def create_customer(self, data: Dict[str, Any]) -> Customer:
        """
        Create a new customer

        Args:
            data: Validated customer fields (full_name, phone, email, address, notes)

        Returns:
            Created customer record
        """
        response = await self.backend.execute(self.query().insert(data), "create customer")
        customer = self._one(response, Customer, "create customer")
        self._invalidate()
        logger.info(f"Created customer with ID: {customer.id}")
        return customer

    async def update_customer(self, customer_id: str, changes: Dict[str, Any]) -> Customer:
        """Apply a partial update to a customer"""
        query = self.query().update(changes).eq("id", customer_id)
        response = await self.backend.execute(query, f"update customer {customer_id}")
        customer = self._one(response, Customer, "update customer")
        self._invalidate()
        logger.info(f"Updated customer {customer_id}: {sorted(changes)}")
        return customer

    async def delete_customer(self, customer_id: str) -> None:
        """
        Delete a customer

        Raises:
            CustomerInUseError: If jobs still reference the customer
        """
        query = self.query().delete().eq("id", customer_id)
        try:
            await self.backend.execute(query, f"delete customer {customer_id}")
        except ReferentialConstraintError as e:
            raise CustomerInUseError(CUSTOMER_IN_USE_MESSAGE, operation=e.operation, code=e.code) from e
        self._invalidate()
        logger.info(f"Deleted customer {customer_id}")

    def _invalidate(self) -> None:
        # job reads embed customer fields
        self.cache.invalidate("customers")
        self.cache.invalidate("jobs")
        self.cache.invalidate("job")
        self.cache.invalidate("dashboard")

"""
Customer directory: validated create/edit/delete plus search.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..exceptions import InvalidInputError
from ..models import Customer, CustomerIn, validate_form
from ..services.store import DataStore


logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("full_name", "phone", "email", "address", "notes")
REQUIRED_FIELDS = ("full_name", "phone")


def filter_customers(customers: Iterable[Customer], search: Optional[str]) -> List[Customer]:
    """Case-insensitive match of ``search`` against name, phone and address"""
    needle = (search or "").strip().lower()
    if not needle:
        return list(customers)
    return [
        c for c in customers
        if any(needle in value.lower() for value in (c.full_name, c.phone, c.address) if value)
    ]


class CustomerDirectory:
    """Customer operations behind the customers screen"""

    def __init__(self, store: DataStore):
        self.store = store

    async def list_customers(self, search: Optional[str] = None) -> List[Customer]:
        return filter_customers(await self.store.customers.list_customers(), search)

    async def create_customer(self, form: Dict[str, Any]) -> Customer:
        """
        Create a customer from form input

        Raises:
            InvalidInputError: Name or phone missing; nothing is sent
        """
        customer = validate_form(CustomerIn, form, "Name and phone are required")
        return await self.store.customers.create_customer(customer.model_dump())

    async def update_customer_field(self, customer_id: str, field: str, value: Optional[str]) -> Customer:
        """Save a single edited field; blank values clear optional fields"""
        if field not in EDITABLE_FIELDS:
            raise InvalidInputError(f"Unknown customer field: {field}", fields=[field])

        value = (value or "").strip() or None
        if value is None and field in REQUIRED_FIELDS:
            raise InvalidInputError("Name and phone are required", fields=[field])

        return await self.store.customers.update_customer(customer_id, {field: value})

    async def delete_customer(self, customer_id: str) -> None:
        """
        Delete a customer

        Raises:
            CustomerInUseError: The customer still has jobs
        """
        await self.store.customers.delete_customer(customer_id)

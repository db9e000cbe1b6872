"""
Data models for customers, jobs, documents, line items and payments.

Record models mirror the rows returned by the backend; the ``*In`` models
validate form input before anything is sent.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import InvalidInputError


class JobStatus(str, Enum):
    DRAFT = "draft"
    QUOTED = "quoted"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    INVOICED = "invoiced"
    ARCHIVED = "archived"


class DocumentType(str, Enum):
    QUOTE = "quote"
    INVOICE = "invoice"


class PaymentMethod(str, Enum):
    CASH = "cash"
    E_TRANSFER = "e_transfer"


# ===== RECORDS =====

class Record(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Customer(Record):
    id: str
    full_name: str
    phone: str
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CustomerRef(Record):
    """Customer fields embedded in a job read"""
    id: Optional[str] = None
    full_name: str = ""
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class Job(Record):
    id: str
    customer_id: str
    status: JobStatus = JobStatus.DRAFT
    job_address: str
    description: str
    scheduled_date: date
    scheduled_time: Optional[str] = None
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    total_hours: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    customer: Optional[CustomerRef] = Field(default=None, alias="customers")

    @property
    def customer_name(self) -> str:
        return self.customer.full_name if self.customer else ""


class Document(Record):
    id: str
    job_id: str
    document_type: DocumentType
    charge_to: str
    job_address: str
    description_of_work: Optional[str] = None
    labour_charge: float
    total: float
    disclaimer_text: str
    pdf_file_path: Optional[str] = None
    created_at: Optional[datetime] = None


class LineItem(Record):
    id: str
    document_id: str
    quantity: int
    item_name: str
    unit_price: float
    line_total: float


class Payment(Record):
    id: str
    job_id: str
    client_name: str
    amount: float
    method: PaymentMethod
    payment_date: date
    created_at: Optional[datetime] = None


# ===== FORMS =====

def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _blank_to_none(value: Any) -> Any:
    value = _strip(value)
    return value or None


class CustomerIn(BaseModel):
    full_name: str
    phone: str
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("full_name", "phone", mode="before")
    @classmethod
    def require_text(cls, value: Any) -> Any:
        value = _strip(value)
        if not value:
            raise ValueError("field is required")
        return value

    @field_validator("email", "address", "notes", mode="before")
    @classmethod
    def optional_text(cls, value: Any) -> Any:
        return _blank_to_none(value)


class JobIn(BaseModel):
    customer_id: str
    job_address: str
    description: str
    scheduled_date: date
    scheduled_time: Optional[str] = None

    @field_validator("customer_id", "job_address", "description", "scheduled_date", mode="before")
    @classmethod
    def require_value(cls, value: Any) -> Any:
        value = _strip(value)
        if value is None or value == "":
            raise ValueError("field is required")
        return value

    @field_validator("scheduled_time", mode="before")
    @classmethod
    def optional_time(cls, value: Any) -> Any:
        return _blank_to_none(value)


class JobDetailsIn(BaseModel):
    """Editable job fields; status and timestamps change only through the lifecycle"""
    model_config = ConfigDict(extra="forbid")

    customer_id: Optional[str] = None
    job_address: Optional[str] = None
    description: Optional[str] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[str] = None


class MaterialRow(BaseModel):
    item_name: str = ""
    quantity: int = Field(default=1, ge=1)
    unit_price: float = Field(default=0.0, ge=0, allow_inf_nan=False)

    @field_validator("item_name", mode="before")
    @classmethod
    def clean_name(cls, value: Any) -> Any:
        return _strip(value) if value is not None else ""

    @property
    def line_total(self) -> float:
        return round(self.quantity * self.unit_price, 2)


class QuoteIn(BaseModel):
    description: str = ""
    materials: List[MaterialRow] = Field(default_factory=list)
    labour_charge: float = Field(default=0.0, ge=0, allow_inf_nan=False)


class PaymentIn(BaseModel):
    amount: float = Field(gt=0, allow_inf_nan=False)
    method: PaymentMethod = PaymentMethod.CASH


FormT = TypeVar("FormT", bound=BaseModel)


def validate_form(model: Type[FormT], data: Dict[str, Any], message: str) -> FormT:
    """Validate form data locally, raising ``InvalidInputError`` with a user-facing message"""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise InvalidInputError(message, fields=fields) from e

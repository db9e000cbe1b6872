from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import Body, Depends, FastAPI, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
from pydantic import BaseModel

from .config import get_settings
from .core.calendar_view import build_month, shift_month
from .core.customers import CustomerDirectory
from .core.dashboard import Dashboard
from .core.documents import DocumentGenerator
from .core.job_lifecycle import ACTION_LABELS, STATUS_LABELS, JobLifecycleController, next_status
from .core.payments import PaymentRecorder
from .core.scheduling import JobScheduler
from .exceptions import (
    BackendRequestError,
    ConfigurationError,
    InvalidInputError,
    InvalidTransitionError,
    PaymentRecordingError,
    RecordNotFoundError,
    ReferentialConstraintError,
)
from .logging_conf import configure_logging
from .models import Customer, Document, Job, LineItem, Payment
from .services.store import DataStore

load_dotenv()
settings = get_settings()

configure_logging()
logger = logging.getLogger("perfect_plumbing.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    created = getattr(app.state, "store", None) is None
    if created:
        app.state.store = await DataStore.connect(get_settings())
    logger.info("startup", extra={"evt": "startup"})
    yield
    # Shutdown
    if created:
        del app.state.store
    logger.info("shutdown", extra={"evt": "shutdown"})


app = FastAPI(title="Perfect Plumbing Ops", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_ORIGIN],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


class CustomerFieldIn(BaseModel):
    field: str
    value: Optional[str] = None


class StatusIn(BaseModel):
    status: str


def get_store(request: Request) -> DataStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise ConfigurationError("Data store is not connected")
    return store


def _error(status_code: int, reason: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "reason": reason, **extra})


# ===== ERROR MAPPING =====

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("validation_error", extra={"evt": "validation_error", "path": request.url.path, "status_code": 422})
    return _error(422, "validation error")


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    logger.info("invalid_input", extra={"evt": "invalid_input", "path": request.url.path, "reason": exc.message, "status_code": 422})
    return _error(422, exc.message, fields=exc.fields)


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    logger.info("invalid_transition", extra={"evt": "invalid_transition", "current": exc.current, "target": exc.target, "status_code": 409})
    return _error(409, exc.message)


@app.exception_handler(ReferentialConstraintError)
async def referential_handler(request: Request, exc: ReferentialConstraintError):
    logger.info("referential_conflict", extra={"evt": "referential_conflict", "path": request.url.path, "status_code": 409})
    return _error(409, exc.message)


@app.exception_handler(RecordNotFoundError)
async def not_found_handler(request: Request, exc: RecordNotFoundError):
    return _error(404, "not found")


@app.exception_handler(PaymentRecordingError)
async def payment_failure_handler(request: Request, exc: PaymentRecordingError):
    return _error(502, "Failed to save", step=exc.step, completed=sorted(exc.completed))


@app.exception_handler(BackendRequestError)
async def backend_failure_handler(request: Request, exc: BackendRequestError):
    logger.warning("backend_error", extra={"evt": "backend_error", "operation": exc.operation, "code": exc.code, "status_code": 502})
    return _error(502, "Request failed")


@app.exception_handler(ConfigurationError)
async def configuration_handler(request: Request, exc: ConfigurationError):
    logger.error("configuration_error", extra={"evt": "configuration_error", "reason": exc.message})
    return _error(503, "service not configured")


def _job_out(job: Job) -> Dict[str, Any]:
    payload = job.model_dump(mode="json", by_alias=True)
    upcoming = next_status(job.status)
    payload["status_label"] = STATUS_LABELS[job.status]
    payload["next_status"] = upcoming.value if upcoming else None
    payload["action_label"] = ACTION_LABELS.get(job.status)
    return payload


@app.get("/")
def health() -> Dict[str, str]:
    return {"service": "perfect-plumbing-ops"}


# ===== CUSTOMERS =====

@app.get("/customers", response_model=List[Customer])
async def list_customers(search: Optional[str] = None, store: DataStore = Depends(get_store)):
    return await CustomerDirectory(store).list_customers(search)


@app.post("/customers", response_model=Customer, status_code=status.HTTP_201_CREATED)
async def create_customer(form: Dict[str, Any] = Body(...), store: DataStore = Depends(get_store)):
    customer = await CustomerDirectory(store).create_customer(form)
    logger.info("customer_created", extra={"evt": "customer_created", "customer_id": customer.id})
    return customer


@app.patch("/customers/{customer_id}", response_model=Customer)
async def update_customer(customer_id: str, body: CustomerFieldIn, store: DataStore = Depends(get_store)):
    return await CustomerDirectory(store).update_customer_field(customer_id, body.field, body.value)


@app.delete("/customers/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(customer_id: str, store: DataStore = Depends(get_store)) -> Response:
    await CustomerDirectory(store).delete_customer(customer_id)
    logger.info("customer_deleted", extra={"evt": "customer_deleted", "customer_id": customer_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ===== JOBS =====

@app.get("/jobs")
async def list_jobs(status: Optional[str] = None, search: Optional[str] = None,
                    store: DataStore = Depends(get_store)) -> List[Dict[str, Any]]:
    jobs = await JobScheduler(store).list_jobs(status, search)
    return [_job_out(j) for j in jobs]


@app.post("/jobs", status_code=status.HTTP_201_CREATED)
async def create_job(form: Dict[str, Any] = Body(...), store: DataStore = Depends(get_store)) -> Dict[str, Any]:
    job = await JobScheduler(store).create_job(form)
    return _job_out(job)


@app.get("/jobs/{job_id}")
async def get_job(job_id: str, store: DataStore = Depends(get_store)) -> Dict[str, Any]:
    return _job_out(await store.jobs.get_job(job_id))


@app.patch("/jobs/{job_id}")
async def update_job(job_id: str, changes: Dict[str, Any] = Body(...),
                     store: DataStore = Depends(get_store)) -> Dict[str, Any]:
    return _job_out(await JobScheduler(store).update_job_details(job_id, changes))


@app.post("/jobs/{job_id}/status")
async def change_status(job_id: str, body: StatusIn, store: DataStore = Depends(get_store)) -> Dict[str, Any]:
    job = await store.jobs.get_job(job_id)
    updated = await JobLifecycleController(store).transition(job, body.status)
    return _job_out(updated)


# ===== DOCUMENTS =====

@app.get("/jobs/{job_id}/documents", response_model=List[Document])
async def list_documents(job_id: str, document_type: Optional[str] = Query(None, alias="type"),
                         store: DataStore = Depends(get_store)):
    if document_type not in (None, "quote", "invoice"):
        raise InvalidInputError(f"Unknown document type: {document_type}", fields=["type"])
    return await store.documents.list_documents(job_id, document_type)


@app.post("/jobs/{job_id}/quote", status_code=status.HTTP_201_CREATED)
async def generate_quote(job_id: str, form: Dict[str, Any] = Body(...),
                         store: DataStore = Depends(get_store)) -> Dict[str, Any]:
    job = await store.jobs.get_job(job_id)
    result = await DocumentGenerator(store).generate_quote(
        job,
        description=form.get("description", job.description),
        materials=form.get("materials", []),
        labour_charge=form.get("labour_charge", 0),
    )
    return {
        "document": result.document.model_dump(mode="json"),
        "line_items": [item.model_dump(mode="json") for item in result.line_items],
        "job": _job_out(result.job) if result.job else None,
    }


@app.get("/documents/{document_id}/line-items", response_model=List[LineItem])
async def list_line_items(document_id: str, store: DataStore = Depends(get_store)):
    return await store.line_items.list_line_items(document_id)


# ===== PAYMENTS =====

@app.get("/payments", response_model=List[Payment])
async def list_payments(job_id: Optional[str] = None, store: DataStore = Depends(get_store)):
    return await store.payments.list_payments(job_id)


@app.post("/jobs/{job_id}/payments", status_code=status.HTTP_201_CREATED)
async def record_payment(job_id: str, form: Dict[str, Any] = Body(...),
                         store: DataStore = Depends(get_store)) -> Dict[str, Any]:
    job = await store.jobs.get_job(job_id)
    outcome = await PaymentRecorder(store).record_payment(job, form.get("amount"), form.get("method", "cash"))
    return {
        "payment": outcome.payment.model_dump(mode="json"),
        "invoice": outcome.invoice.model_dump(mode="json"),
        "job": _job_out(outcome.job),
    }


# ===== DASHBOARD / CALENDAR =====

@app.get("/dashboard")
async def dashboard(store: DataStore = Depends(get_store)) -> Dict[str, Any]:
    stats = await Dashboard(store, window_days=get_settings().DASHBOARD_WINDOW_DAYS).stats()
    return {
        "today_jobs": [_job_out(j) for j in stats.today_jobs],
        "week_count": stats.week_count,
        "unpaid_count": stats.unpaid_count,
        "pending_quotes": stats.pending_quotes,
    }


@app.get("/calendar")
async def calendar(month: Optional[str] = None, store: DataStore = Depends(get_store)) -> Dict[str, Any]:
    today = date.today()
    try:
        current = date.fromisoformat(f"{month}-01") if month else today.replace(day=1)
    except ValueError as e:
        raise InvalidInputError("month must look like YYYY-MM", fields=["month"]) from e

    jobs = await store.jobs.list_jobs()
    days = build_month(jobs, current, today)
    return {
        "month": current.strftime("%Y-%m"),
        "previous": shift_month(current, -1).strftime("%Y-%m"),
        "next": shift_month(current, 1).strftime("%Y-%m"),
        "days": [
            {
                "date": d.day.isoformat(),
                "in_month": d.in_month,
                "is_today": d.is_today,
                "jobs": [{"id": j.id, "customer_name": j.customer_name, "status": j.status.value} for j in d.jobs],
            }
            for d in days
        ],
    }


def main() -> None:
    uvicorn.run("perfect_plumbing.api:app", host=settings.SERVER_HOST, port=settings.SERVER_PORT)


if __name__ == "__main__":
    main()

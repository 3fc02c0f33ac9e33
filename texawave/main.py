"""
FastAPI application entry point.
Run with: uvicorn texawave.main:app --host 0.0.0.0 --port 8001
"""
from contextlib import asynccontextmanager
from datetime import datetime
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from texawave import __version__
from texawave.config import settings, FEATURES, validate_settings
from texawave.database import Database
from texawave.middleware import add_exception_handlers, request_logging_middleware
from texawave.scheduler import start_scheduler, stop_scheduler
from texawave.utils.logger import setup_logging
from texawave.routers import (
    auth,
    employees,
    attendance,
    leaves,
    loans,
    bonus,
    contacts,
    quotations,
    sales_orders,
    invoices,
    credit_notes,
    payments_received,
    purchases,
    recurring_invoices
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    validate_settings(settings)
    logger.info(f"🚀 Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")

    await Database.connect_db()

    if settings.SCHEDULER_ENABLED:
        start_scheduler()
    else:
        logger.info("Scheduler disabled")

    yield

    if settings.SCHEDULER_ENABLED:
        stop_scheduler()
    await Database.close_db()
    logger.info("Application stopped")


app = FastAPI(
    title=settings.APP_NAME,
    description="HR, payroll, sales production/QC, invoicing and purchases",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(request_logging_middleware)
add_exception_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(employees.router, prefix="/api/employees", tags=["Employees"])
app.include_router(attendance.router, prefix="/api/attendance", tags=["Attendance"])
app.include_router(leaves.router, prefix="/api/leaves", tags=["Leaves"])
app.include_router(loans.router, prefix="/api/loans", tags=["Loans"])
app.include_router(bonus.router, prefix="/api/bonus", tags=["Bonus"])
app.include_router(contacts.customers_router, prefix="/api/customers", tags=["Customers"])
app.include_router(contacts.vendors_router, prefix="/api/vendors", tags=["Vendors"])
app.include_router(quotations.router, prefix="/api/quotations", tags=["Quotations"])
app.include_router(sales_orders.router, prefix="/api/sales-orders", tags=["Sales Orders"])
app.include_router(invoices.router, prefix="/api/invoices", tags=["Invoices"])
app.include_router(credit_notes.router, prefix="/api/credit-notes", tags=["Credit Notes"])
app.include_router(payments_received.router, prefix="/api/payments-received", tags=["Payments Received"])
app.include_router(purchases.bills_router, prefix="/api/bills", tags=["Bills"])
app.include_router(purchases.payments_made_router, prefix="/api/payments-made", tags=["Payments Made"])
app.include_router(recurring_invoices.router, prefix="/api/recurring-invoices", tags=["Recurring Invoices"])


@app.get("/api/health", tags=["Health"])
async def health_check():
    """Liveness probe with enabled feature flags."""
    return {
        "status": "ok",
        "version": __version__,
        "features": FEATURES,
        "timestamp": datetime.utcnow().isoformat()
    }

"""
Scheduler for automatic tasks.
Recurring invoices are raised once a day.
"""
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from texawave.config import settings
from texawave.database import Database, Collections
from texawave.repositories.invoice_repository import InvoiceRepository, RecurringProfileRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.services.recurring_invoice_service import RecurringInvoiceService

logger = logging.getLogger(__name__)

# Scheduler instance
scheduler = AsyncIOScheduler()


async def process_recurring_invoices_daily():
    """Raise the invoices of every recurring profile that is due today."""
    logger.info("🕐 [SCHEDULER] Processing recurring invoices")

    try:
        db = Database.get_db()
        service = RecurringInvoiceService(
            RecurringProfileRepository(db[Collections.RECURRING_PROFILES]),
            InvoiceRepository(db[Collections.INVOICES]),
            CustomerRepository(db[Collections.CUSTOMERS])
        )
        result = await service.process_due_profiles()
        logger.info(
            f"✅ [SCHEDULER] Recurring invoices: {result['invoices_created']} created, "
            f"{result['expired']} expired"
        )
    except Exception as e:
        logger.error(f"❌ [SCHEDULER] Recurring invoice run failed: {e}", exc_info=True)


def start_scheduler():
    """Start the scheduler with its jobs."""
    scheduler.add_job(
        process_recurring_invoices_daily,
        CronTrigger(hour=settings.RECURRING_INVOICE_HOUR, minute=0),
        id="recurring_invoices",
        name="Daily recurring invoices",
        replace_existing=True
    )

    scheduler.start()
    logger.info(f"✅ [SCHEDULER] Started - recurring invoices at {settings.RECURRING_INVOICE_HOUR:02d}:00")


def stop_scheduler():
    """Stop the scheduler."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("🛑 [SCHEDULER] Stopped")

"""
MongoDB connection management.
Single Motor client shared by the whole application.
"""
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
import logging

from texawave.config import settings
from texawave.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class Collections:
    """Collection names. Routers and services never hardcode them."""

    USERS = "users"

    # HR
    EMPLOYEES = "employees"
    ATTENDANCE = "attendance"
    HOLIDAYS = "holidays"
    LEAVES = "leaves"
    LOANS = "loans"
    PAYROLL_CREDITS = "payroll_credits"

    # Contacts
    CUSTOMERS = "customers"
    VENDORS = "vendors"

    # Sales
    QUOTATIONS = "quotations"
    SALES_ORDERS = "sales_orders"
    PRODUCTION_JOBS = "production_jobs"
    INSPECTIONS = "inspections"
    INVOICES = "invoices"
    CREDIT_NOTES = "credit_notes"
    PAYMENTS_RECEIVED = "payments_received"
    RECURRING_PROFILES = "recurring_invoice_profiles"

    # Purchases
    BILLS = "bills"
    PAYMENTS_MADE = "payments_made"


class Database:
    """Holds the Motor client and database handle."""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect_db(cls) -> None:
        """
        Open the MongoDB connection and verify it with a ping.

        Raises:
            DatabaseError: If the server cannot be reached
        """
        logger.info(f"Connecting to MongoDB: {settings.DB_NAME}")
        cls.client = AsyncIOMotorClient(settings.MONGO_URL, serverSelectionTimeoutMS=5000)
        cls.db = cls.client[settings.DB_NAME]
        try:
            await cls.client.admin.command("ping")
            await cls.create_indexes()
        except PyMongoError as e:
            logger.error(f"❌ MongoDB connection failed: {e}")
            raise DatabaseError("Could not connect to MongoDB", details={"db": settings.DB_NAME}) from e
        logger.info("✅ MongoDB connected")

    @classmethod
    async def close_db(cls) -> None:
        """Close the MongoDB connection."""
        if cls.client:
            cls.client.close()
            logger.info("MongoDB connection closed")
        cls.client = None
        cls.db = None

    @classmethod
    def get_db(cls):
        """
        Get the active database handle.

        Raises:
            DatabaseError: If connect_db was never called
        """
        if cls.db is None:
            raise DatabaseError("Database not initialized")
        return cls.db

    @classmethod
    def set_db(cls, db) -> None:
        """Replace the database handle (used by tests)."""
        cls.db = db

    @classmethod
    async def create_indexes(cls) -> None:
        """Create the unique and lookup indexes the services rely on."""
        db = cls.db
        await db[Collections.USERS].create_index("email", unique=True)
        await db[Collections.EMPLOYEES].create_index("employee_code", unique=True)
        await db[Collections.ATTENDANCE].create_index(
            [("employee_id", 1), ("date", 1)], unique=True
        )
        await db[Collections.PRODUCTION_JOBS].create_index("order_id")
        await db[Collections.INSPECTIONS].create_index("job_id", unique=True)
        await db[Collections.INVOICES].create_index("customer_id")
        await db[Collections.INVOICES].create_index("invoice_number", unique=True)
        await db[Collections.SALES_ORDERS].create_index("so_number", unique=True)
        await db[Collections.LOANS].create_index("employee_id")
        logger.info("Indexes ensured")

# customer_service/main.py
# Customer Service - profiles, addresses, measurements, wishlist, back-in-stock
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from customer_service.database import Database
from customer_service.errors import CustomerServiceError
from customer_service.events import EventBus, RestockSubscriber
from customer_service.logging_setup import setup_logging
from customer_service.services.notifications import HttpNotificationClient, NotificationSender
from customer_service.services.restock import RestockNotifier
from customer_service.settings import Settings, settings as default_settings

from customer_service.routers.profile import router as profile_router
from customer_service.routers.addresses import router as addresses_router
from customer_service.routers.measurements import router as measurements_router
from customer_service.routers.wishlist import router as wishlist_router
from customer_service.routers.back_in_stock import router as back_in_stock_router
from customer_service.routers.admin_back_in_stock import router as admin_back_in_stock_router
from customer_service.routers.admin_customers import router as admin_customers_router

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    notification_sender: Optional[NotificationSender] = None,
    event_bus: Optional[EventBus] = None,
) -> FastAPI:
    """
    Build the application. Collaborators default to the ones described by
    `settings`; tests pass their own database and notification sender.
    """
    settings = settings or default_settings
    database = database or Database.from_settings(settings)

    # ---------------------------------------------------------
    # Lifespan: logging, database, restock consumer
    # ---------------------------------------------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings)
        await database.init()
        if settings.AUTO_CREATE_SCHEMA:
            await database.create_all()
            logger.info("Database schema ensured")

        http_client = None
        sender = notification_sender
        if sender is None:
            http_client = HttpNotificationClient(
                settings.NOTIFICATION_SERVICE_URL, timeout=settings.NOTIFICATION_TIMEOUT
            )
            sender = http_client

        app.state.notifier = RestockNotifier(database, sender, timeout=settings.RESTOCK_EVENT_TIMEOUT)
        if event_bus is not None:
            await RestockSubscriber(app.state.notifier, settings.RESTOCK_SUBJECT).start(event_bus)
        else:
            logger.warning("No event bus configured; restock notifications are disabled")

        logger.info(f"Customer service {VERSION} started")
        try:
            yield
        finally:
            if http_client is not None:
                await http_client.aclose()
            await database.close()
            logger.info("Customer service stopped")

    app = FastAPI(
        title="Customer Service API",
        version=VERSION,
        description="Customer profiles, addresses, measurements, wishlist and back-in-stock alerts",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CustomerServiceError)
    async def customer_service_error(request: Request, exc: CustomerServiceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        """Health check endpoint with database status."""
        db_health = await database.check_health()
        return {
            "status": "ok" if db_health.get("status") == "healthy" else "degraded",
            "version": VERSION,
            "database": db_health,
        }

    app.include_router(profile_router)
    app.include_router(addresses_router)
    app.include_router(measurements_router)
    app.include_router(wishlist_router)
    app.include_router(back_in_stock_router)
    app.include_router(admin_back_in_stock_router)
    app.include_router(admin_customers_router)
    return app


app = create_app()

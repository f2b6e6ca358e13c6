from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from backoffice.common import settings
from backoffice.common.logging_config import configure_logging
from backoffice.db.core import resolve_database_url

configure_logging()
logger = logging.getLogger(__name__)


def custom_generate_unique_id(route: APIRoute) -> str:
    return f"{route.tags[0]}_{route.name}" if route.tags else route.name


app = FastAPI(
    title="SK Tours Back Office API",
    description="Bookings, offline inventory, checkouts and PhonePe payments",
    version="1.0.0",
    generate_unique_id_function=custom_generate_unique_id,
)

logger.info("[BOOT] database url = %s", resolve_database_url().split("@")[-1])


# ============================
#  CORS
# ============================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================
# DEV MODE
# ============================
if settings.dev_mode():
    from backoffice.init_db import init_db

    logger.info("[BOOT] DEV_MODE=1, creating missing tables")
    init_db()


# ============================
# Routers
# ============================

# --- Bookings ---
from backoffice.tour_booking.api.tour_booking_api import router as tour_booking_router
from backoffice.stays.api.stay_booking_api import (
    bungalow_router,
    weekend_router,
)
from backoffice.stays.api.stay_listing_api import (
    bungalow_listing_router,
    weekend_listing_router,
)
from backoffice.tour_departures.api.tour_departure_api import (
    router as tour_departure_router,
)

# --- Site content (admin) ---
from backoffice.mice.api.mice_api import router as mice_router
from backoffice.exhibitions.api.exhibition_api import router as exhibition_router

# --- Offline inventory (admin) ---
from backoffice.offline_inventory.api.offline_flight_api import (
    router as offline_flight_router,
)
from backoffice.offline_inventory.api.offline_hotel_api import (
    router as offline_hotel_router,
)

# --- Checkout / Payments ---
from backoffice.checkout.api.checkout_api import router as checkout_router
from backoffice.integrations.payments.phonepe.api.phonepe_orders_api import (
    router as phonepe_router,
)
from backoffice.integrations.payments.flight_transactions.api.flight_transaction_api import (
    router as flight_transaction_router,
)

# ============================
# Router Registration
# ============================

app.include_router(tour_booking_router)
app.include_router(bungalow_router)
app.include_router(weekend_router)
app.include_router(bungalow_listing_router)
app.include_router(weekend_listing_router)
app.include_router(tour_departure_router)

app.include_router(mice_router)
app.include_router(exhibition_router)

app.include_router(offline_flight_router)
app.include_router(offline_hotel_router)

app.include_router(checkout_router)
app.include_router(phonepe_router)
app.include_router(flight_transaction_router)


@app.get("/")
def root():
    return {"message": "SK Tours Back Office API is running"}

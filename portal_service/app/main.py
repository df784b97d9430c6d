# app/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from shared.core.config import settings
from shared.core.database import Base, engine
from shared.core.logging import setup_logging
from shared.helpers.exception_handler import setup_exception_handlers
from shared.models import users, activity_log, partners
from .models import venues, devices, products, purchase_requests, prospects
from .crud.purchase_requests_crud import install_summary_function
from .router import (
    location_partners_router,
    referral_partners_router,
    venues_router,
    devices_router,
    products_router,
    purchase_requests_router,
    prospects_router,
    crypto_prices_router,
    tipalti_router,
    webhooks_router,
)

setup_logging()
logger = logging.getLogger(__name__)

# Create tables
Base.metadata.create_all(bind=engine)

try:
    install_summary_function(engine)
except SQLAlchemyError:
    # summary falls back to counting rows
    logger.exception("Could not install get_purchase_request_summary()")

app = FastAPI(title="SkyYield Portal Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
setup_exception_handlers(app)

# Routers
app.include_router(location_partners_router.router)
app.include_router(referral_partners_router.router)
app.include_router(venues_router.router)
app.include_router(devices_router.router)
app.include_router(products_router.router)
app.include_router(purchase_requests_router.router)
app.include_router(prospects_router.router)
app.include_router(crypto_prices_router.router)
app.include_router(tipalti_router.router)
app.include_router(webhooks_router.router)


@app.get("/api/portal/health")
def health():
    return {"status": "healthy"}

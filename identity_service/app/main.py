# app/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, engine
from shared.core.logging import setup_logging
from shared.helpers.exception_handler import setup_exception_handlers
from shared.models import users, activity_log, partners
from .routers import userrouter, admin_users_router, clerk_webhook_router

setup_logging()

# Create tables
Base.metadata.create_all(bind=engine)

# This MUST exist for uvicorn
app = FastAPI(title="SkyYield Identity Service")

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
app.include_router(userrouter.router)
app.include_router(admin_users_router.router)
app.include_router(clerk_webhook_router.router)


@app.get("/api/identity/health")
def health():
    return {"status": "healthy"}

# opsboard/main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# load .env before settings are read
load_dotenv()

from opsboard.config import settings
from opsboard.db import create_indexes, close_client
from opsboard.routes.invoices import router as invoices_router
from opsboard.routes.payroll import router as payroll_router
from opsboard.routes.reminders import router as reminders_router
from opsboard.services.invoice_events import invoice_events

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    description="Payment lifecycle and reminder reconciliation for the operations dashboard",
    version=settings.app_version,
)

# CORS - tighten in production
if settings.allowed_origins == "*":
    cors_origins = ["*"]
else:
    cors_origins = [o.strip() for o in settings.allowed_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reminders_router)
app.include_router(invoices_router)
app.include_router(payroll_router)


@app.on_event("startup")
async def on_startup():
    await create_indexes()


@app.on_event("shutdown")
async def on_shutdown():
    await invoice_events.drain()
    close_client()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Operations dashboard payments API",
        "status": "running",
        "version": settings.app_version,
    }

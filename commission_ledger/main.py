import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from commission_ledger.core.config import settings
from commission_ledger.core.database import init_db
from commission_ledger.core.exceptions import (
    CommissionLedgerError,
    commission_ledger_exception_handler,
)
from commission_ledger.routers import (
    adjustments,
    audit_logs,
    closings,
    financial_entries,
    forecast,
    ledger_entries,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

OPENAPI_TAGS = [
    {"name": "Commissions", "description": "Commission and operator payment ledger entries."},
    {"name": "Closings", "description": "Seal entries into numbered invoices and undo them."},
    {"name": "Adjustments", "description": "Request and review changes to entry amounts."},
    {"name": "Forecast", "description": "Expected income and liabilities from open entries."},
    {"name": "Financial Entries", "description": "Payables and receivables created by closings."},
    {"name": "Audit Logs", "description": "Query the audit trail for ledger changes."},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Production schemas come from alembic; create_all only fills gaps.
    init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Back-office service for travel-agency commission and operator payment "
        "closings: ledger, adjustments, invoiced closings, reversals and forecast."
    ),
    openapi_tags=OPENAPI_TAGS,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count", "Content-Disposition"],
)

app.add_exception_handler(CommissionLedgerError, commission_ledger_exception_handler)  # type: ignore[arg-type]

# Fixed paths first so "/adjustments/..." and "/closings/..." are never read
# as an entry id by the ledger routes.
app.include_router(adjustments.router, prefix="/api/commissions", tags=["Adjustments"])
app.include_router(closings.router, prefix="/api/commissions", tags=["Closings"])
app.include_router(forecast.router, prefix="/api/commissions", tags=["Forecast"])
app.include_router(ledger_entries.router, prefix="/api/commissions", tags=["Commissions"])
app.include_router(
    financial_entries.router,
    prefix="/api/financial-entries",
    tags=["Financial Entries"],
)
app.include_router(audit_logs.router, prefix="/api/audit-logs", tags=["Audit Logs"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "status": "running",
    }

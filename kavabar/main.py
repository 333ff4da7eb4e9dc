import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kavabar.core.config import settings
from kavabar.core.errors import LedgerError
from kavabar.routes.auth import router as auth_router
from kavabar.routes.health import router as health_router
from kavabar.routes.admin import router as admin_router
from kavabar.routes.entries import router as entries_router
from kavabar.routes.powder_purchases import router as powder_purchases_router
from kavabar.routes.adjustments import router as adjustments_router
from kavabar.routes.credit_payments import router as credit_payments_router
from kavabar.routes.creditors import router as creditors_router
from kavabar.routes.inventory import router as inventory_router
from kavabar.routes.reports import router as reports_router
from kavabar.core.database import SessionLocal, init_db
from kavabar.services.seed import seed_admin

logging.basicConfig(
    level=settings.log_level.upper(),
    format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    if exc.status_code >= 403:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def create_app() -> FastAPI:
    app = FastAPI(title="Kava Bar Ledger API", version="0.1.0")

    origins = settings.cors_origins
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(LedgerError, ledger_error_handler)

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(admin_router, prefix="/admin", tags=["admin"])
    app.include_router(entries_router, prefix="/entries", tags=["entries"])
    app.include_router(powder_purchases_router, prefix="/powder-purchases", tags=["powder-purchases"])
    app.include_router(adjustments_router, prefix="/adjustments", tags=["adjustments"])
    app.include_router(credit_payments_router, prefix="/credit-payments", tags=["credit-payments"])
    app.include_router(creditors_router, prefix="/creditors", tags=["creditors"])
    app.include_router(inventory_router, prefix="/inventory", tags=["inventory"])
    app.include_router(reports_router, tags=["reports"])

    return app


app = create_app()

# Schema and default admin are set up once per process; tests build their own
if settings.env != "test":
    try:
        init_db()
        with SessionLocal() as db:
            seed_admin(db)
    except Exception:
        logger.exception("Database initialisation failed")
        raise

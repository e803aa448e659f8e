# apps/backend/main.py

from __future__ import annotations

import sys
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

# -----------------------------------------------------------------------------
# Paths + Python path
# -----------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent  # .../apps/backend
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

# -----------------------------------------------------------------------------
# Load .env (MUST be before importing anything that needs env)
# -----------------------------------------------------------------------------
ENV_PATH = BASE_DIR / ".env"
load_dotenv(ENV_PATH, override=True)

import structlog  # noqa: E402

from tracker.core.config import settings  # noqa: E402
from tracker.core.logging_config import configure_logging  # noqa: E402
from tracker.db import Base, engine  # noqa: E402
from tracker.models import event as _event_model  # noqa: E402,F401  (registers the table)
from tracker.routes.admin import router as admin_router  # noqa: E402
from tracker.routes.collect import router as collect_router  # noqa: E402
from tracker.routes.events import router as events_router  # noqa: E402

configure_logging(settings.log_level, settings.log_json)
log = structlog.get_logger()

# -----------------------------------------------------------------------------
# Create app
# -----------------------------------------------------------------------------
app = FastAPI(title=settings.app_name, version="0.1.0")

# -----------------------------------------------------------------------------
# CORS (the shop calls /collect from its own domain)
# -----------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
)


@app.on_event("startup")
def _startup_create_tables():
    # Minimal & safe: create tables if they don't exist
    Base.metadata.create_all(bind=engine)
    log.info("db_initialized")


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------
@app.exception_handler(SQLAlchemyError)
async def _storage_error(request: Request, exc: SQLAlchemyError):
    log.error("storage_error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": str(exc) or f"generic error in {request.url.path}"},
    )


# -----------------------------------------------------------------------------
# Routers
# -----------------------------------------------------------------------------
app.include_router(collect_router, tags=["collect"])
app.include_router(events_router, prefix="/api", tags=["events"])
app.include_router(admin_router, prefix="/admin", tags=["admin"])


# -----------------------------------------------------------------------------
# Basic health check
# -----------------------------------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


# -----------------------------------------------------------------------------
# Dashboard + static assets (mounted last so API routes win)
# -----------------------------------------------------------------------------
PUBLIC_DIR = Path(settings.public_dir)


@app.get("/dashboard", include_in_schema=False)
def dashboard():
    return FileResponse(PUBLIC_DIR / "dashboard" / "index.html")


if PUBLIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=PUBLIC_DIR), name="public")

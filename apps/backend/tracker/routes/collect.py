# apps/backend/tracker/routes/collect.py
import json

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from tracker.core.config import settings
from tracker.db import get_db, get_session_factory
from tracker.services.event_store import insert_event
from tracker.services.normalizer import normalize_payload
from tracker.services.retention import RetentionSweeper

log = structlog.get_logger()

router = APIRouter()

# one per process; last_run lives as long as the worker
sweeper = RetentionSweeper(
  retention_days=settings.retention_days,
  interval_seconds=settings.sweep_interval_hours * 60 * 60,
)


def get_sweeper() -> RetentionSweeper:
  return sweeper


def _parse_body(body: bytes):
  if not body:
    return {}
  try:
    return json.loads(body)
  except ValueError:
    # never reject a beacon over bad JSON, store it as an empty event
    return {}


def _too_large():
  return JSONResponse(status_code=413, content={"ok": False, "error": "payload too large"})


@router.post("/collect")
async def collect(
  request: Request,
  background_tasks: BackgroundTasks,
  db: Session = Depends(get_db),
  retention: RetentionSweeper = Depends(get_sweeper),
  session_factory=Depends(get_session_factory),
):
  declared = request.headers.get("content-length")
  if declared and declared.isdigit() and int(declared) > settings.max_body_bytes:
    return _too_large()

  # chunked bodies carry no length up front
  body = await request.body()
  if len(body) > settings.max_body_bytes:
    return _too_large()

  clean = normalize_payload(_parse_body(body))
  await run_in_threadpool(insert_event, db, clean)

  # runs after the response is sent; failures are logged inside the sweeper
  background_tasks.add_task(retention.maybe_sweep, session_factory)
  return {"ok": True}

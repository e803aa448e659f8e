# apps/backend/tracker/routes/admin.py
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from tracker.core.config import settings
from tracker.db import get_db
from tracker.routes._params import parse_int
from tracker.schemas.events import DbUsageOut
from tracker.services.event_store import read_events_since, storage_size_bytes
from tracker.services.export import export_filename, project_event, render_csv

log = structlog.get_logger()

router = APIRouter()


@router.get("/db-usage", response_model=DbUsageOut)
def db_usage(db: Session = Depends(get_db)):
  used_bytes = storage_size_bytes(db)
  return DbUsageOut(
    used_bytes=used_bytes,
    used_mb=used_bytes / (1024 * 1024),
    used_percent=(used_bytes / settings.storage_quota_bytes) * 100,
  )


@router.get("/export-events")
def export_events(days: Optional[str] = None, db: Session = Depends(get_db)):
  n_days = parse_int(days) or settings.export_default_days
  try:
    since = datetime.now(timezone.utc) - timedelta(days=n_days)
  except OverflowError:
    # window reaches past datetime.min: everything; past datetime.max: nothing
    since = None

  if since is None and n_days < 0:
    rows = []
  else:
    rows = [project_event(e) for e in read_events_since(db, since)]
  log.info("export_events", days=n_days, rows=len(rows))

  return Response(
    content=render_csv(rows),
    media_type="text/csv; charset=utf-8",
    headers={"Content-Disposition": f'attachment; filename="{export_filename(n_days)}"'},
  )

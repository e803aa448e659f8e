# apps/backend/tracker/routes/events.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tracker.core.config import settings
from tracker.db import get_db
from tracker.routes._params import parse_int
from tracker.schemas.events import EventOut, SummaryOut
from tracker.services.event_store import read_last_events
from tracker.services.summary import summarize

router = APIRouter()


def _clamp_limit(raw: Optional[str]) -> int:
  limit = parse_int(raw)
  if limit is None or limit <= 0:
    return settings.events_default_limit
  return min(limit, settings.events_max_limit)


@router.get("/events", response_model=List[EventOut])
def list_events(limit: Optional[str] = None, db: Session = Depends(get_db)):
  return read_last_events(db, _clamp_limit(limit))


@router.get("/summary", response_model=SummaryOut)
def summary(db: Session = Depends(get_db)):
  events = read_last_events(db, settings.summary_window)
  return summarize(e.payload for e in events)

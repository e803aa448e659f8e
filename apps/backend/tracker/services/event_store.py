from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from tracker.models.event import Event


def insert_event(db: Session, payload: Dict[str, Any]) -> Event:
    e = Event(payload=payload)
    db.add(e)
    db.commit()
    return e


def read_last_events(db: Session, limit: int) -> List[Event]:
    return (
        db.query(Event)
        .order_by(Event.created_at.desc(), Event.id.desc())
        .limit(limit)
        .all()
    )


def read_events_since(db: Session, since: Optional[datetime]) -> List[Event]:
    """Oldest first; `since=None` means no lower bound."""
    q = db.query(Event)
    if since is not None:
        q = q.filter(Event.created_at >= since)
    return (
        q.order_by(Event.created_at.asc(), Event.id.asc())
        .all()
    )


def delete_events_before(db: Session, cutoff: datetime) -> int:
    deleted = (
        db.query(Event)
        .filter(Event.created_at < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    return int(deleted or 0)


def storage_size_bytes(db: Session) -> int:
    """Size of the whole database on disk, as the hosting plan counts it."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        size = db.execute(text("SELECT pg_database_size(current_database())")).scalar()
    elif dialect == "sqlite":
        page_count = db.execute(text("PRAGMA page_count")).scalar() or 0
        page_size = db.execute(text("PRAGMA page_size")).scalar() or 0
        size = page_count * page_size
    else:
        raise NotImplementedError(f"storage size not supported for {dialect}")
    return int(size or 0)

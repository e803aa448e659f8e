# apps/backend/tracker/models/event.py
from datetime import datetime, timezone

from sqlalchemy import Column, BigInteger, Integer, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from tracker.db import Base


def _utcnow():
  return datetime.now(timezone.utc)


class Event(Base):
  __tablename__ = "events"

  # SQLite only autoincrements INTEGER primary keys
  id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)

  created_at = Column(
    DateTime(timezone=True),
    default=_utcnow,
    server_default=func.now(),
    nullable=False,
    index=True,
  )

  payload = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)

# apps/backend/tracker/db.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from tracker.core.config import settings

DATABASE_URL = settings.database_url.strip()

if not DATABASE_URL:
  # Fail fast: better to know immediately in logs
  raise RuntimeError("DATABASE_URL is not set")


def make_engine(url: str):
  if url.startswith("sqlite"):
    # tests / local dev: one file, shared across the threadpool
    return create_engine(url, connect_args={"check_same_thread": False})
  return create_engine(
    url,
    pool_pre_ping=True,
    pool_size=5,
    max_overflow=10,
  )


engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
  db = SessionLocal()
  try:
    yield db
  finally:
    db.close()

def get_session_factory():
  return SessionLocal

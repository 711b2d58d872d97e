from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from typing import Optional

from ainews.config import settings

Base = declarative_base()

engine = None
SessionLocal = None


def init_db(database_url: Optional[str] = None):
    global engine, SessionLocal
    if engine is None:
        url = database_url or settings.DATABASE_URL
        if not url:
            raise ValueError("DATABASE_URL environment variable is not set")
        if url.startswith("sqlite"):
            engine = create_engine(url, connect_args={"check_same_thread": False})
        else:
            engine = create_engine(
                url,
                pool_pre_ping=True,
                pool_recycle=300,
                pool_size=10,
                max_overflow=20
            )
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        from ainews.models import content  # noqa: F401  registers tables
        Base.metadata.create_all(bind=engine)


def get_session():
    """Session for background work (scheduler threads, pipeline runs)"""
    if SessionLocal is None:
        init_db()
    return SessionLocal()


def get_db():
    db = get_session()
    try:
        yield db
    finally:
        db.close()

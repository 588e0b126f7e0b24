import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from itimock.core.config import settings

logger = logging.getLogger(__name__)

engine = create_engine(settings.DATABASE_URL, future=True, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db(bind=None) -> None:
    """Create tables if they don't exist. Production deployments should migrate instead."""
    from itimock.models.orm import Base
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")

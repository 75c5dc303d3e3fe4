import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from blog_api.config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


settings = get_settings()
engine = create_engine(settings.database_url, future=True, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session, future=True)


def create_tables() -> None:
    from blog_api import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Ensured tables: %s", ", ".join(sorted(Base.metadata.tables)))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

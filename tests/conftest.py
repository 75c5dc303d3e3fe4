import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from blog_api.database import Base, get_db
from blog_api.main import app
from blog_api.models import Category, Post


def _sqlite_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # let SQLAlchemy drive BEGIN so SAVEPOINTs behave like on a real server
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest.fixture()
def db_session() -> Session:
    engine = _sqlite_engine()
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session, future=True)
    Base.metadata.create_all(bind=engine)
    session = testing_session_local()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture()
def seeded_post(db_session) -> Post:
    category = Category(name="Travel")
    db_session.add(category)
    db_session.flush()

    post = Post(
        title="Lisbon in spring",
        content="Trams, tiles and too many pasteis de nata.",
        image_url="https://cdn.example.com/lisbon.jpg",
        category_id=category.id,
    )
    db_session.add(post)
    db_session.commit()
    return post


@pytest.fixture()
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def post_payload() -> dict:
    return {
        "title": "My first blog post",
        "content": "Lorem ipsum dolor sit amet",
        "imageUrl": "https://domain.ext/images/MyPhoto.png",
        "category": "Default category",
    }

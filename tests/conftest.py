import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("APP_SECRET", "test-secret")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

import random
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from itimock.core.auth import create_token
from itimock.core.cache import RedisCache, get_cache
from itimock.core.database import get_db, init_db
from itimock.main import app
from itimock.models.schemas import QuestionIn
from itimock.stores.sql import SqlPaperStore, SqlQuestionStore
from fakes import FakeRedis, question_payload

@pytest.fixture
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool, future=True)
    init_db(eng)
    yield eng
    eng.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

@pytest.fixture
def db(session_factory):
    s = session_factory()
    yield s
    s.close()

@pytest.fixture
def question_store(db):
    return SqlQuestionStore(db)

@pytest.fixture
def paper_store(db):
    return SqlPaperStore(db)

@pytest.fixture
def rng():
    return random.Random(1234)

@pytest.fixture
def fake_cache():
    return RedisCache(FakeRedis())

@pytest.fixture
def client(session_factory, fake_cache):
    def _db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()
    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_cache] = lambda: fake_cache
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def auth():
    def _hdr(user_id: str, *roles: str, name: str | None = None):
        return {"Authorization": f"Bearer {create_token(user_id, list(roles) or ['student'], name=name)}"}
    return _hdr

@pytest.fixture
def seed_questions(question_store):
    def _seed(n: int, trade_id: str = "T-ELE", year: str = "1", user_id: str = "author-1", **extra):
        items = [QuestionIn(**question_payload(i, trade_id, year, **extra)) for i in range(n)]
        return question_store.create_many(items, user_id, "Author One")
    return _seed

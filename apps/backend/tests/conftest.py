from __future__ import annotations

import os
import tempfile
from typing import Generator, Any

import pytest

# 테스트에서는 bcrypt 비용을 최소로
os.environ.setdefault("GAGYEBU_BCRYPT_ROUNDS", "4")
os.environ.setdefault("GAGYEBU_ENV", "test")

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from gagyebu.core.database import Base, get_db
from gagyebu.core.security import hash_password
from gagyebu.main import app
from gagyebu import models

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo1234"


@pytest.fixture(scope="session")
def test_db_url() -> Generator[str, Any, Any]:
    # 사용자 환경을 건드리지 않도록 임시 파일 SQLite 사용
    fd, path = tempfile.mkstemp(prefix="gagyebu_test_", suffix=".sqlite3")
    os.close(fd)
    url = f"sqlite:///{path}"
    yield url
    try:
        os.remove(path)
    except OSError:
        pass


@pytest.fixture(scope="session")
def engine(test_db_url: str):
    eng = create_engine(test_db_url, connect_args={"check_same_thread": False})

    @event.listens_for(eng, "connect")
    def _fk_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(eng)
    return eng


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Any, Any, Any]:
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    # 간단 시드: demo user 1명
    user = models.User(email=DEMO_EMAIL, password_hash=hash_password(DEMO_PASSWORD), name="Demo")
    session.add(user)
    session.commit()

    try:
        yield session
    finally:
        session.close()
        # 테이블 데이터 정리
        with engine.begin() as conn:
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
            for tbl in reversed(Base.metadata.sorted_tables):
                conn.execute(tbl.delete())
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=ON")


@pytest.fixture()
def demo_user(db_session) -> models.User:
    return db_session.query(models.User).filter(models.User.email == DEMO_EMAIL).one()


@pytest.fixture(autouse=True)
def override_dependency(db_session):
    # FastAPI DI override
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_category(client, demo_user):
    def _make(name: str = "식비", type: str = "EXPENSE", **extra) -> dict:
        r = client.post("/api/categories", json={"user_id": demo_user.id, "name": name, "type": type, **extra})
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _make


@pytest.fixture()
def make_txn(client, demo_user):
    def _make(amount: int, type: str = "EXPENSE", **extra) -> dict:
        r = client.post("/api/transactions", json={"user_id": demo_user.id, "type": type, "amount": amount, **extra})
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _make

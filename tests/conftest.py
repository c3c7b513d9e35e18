# tests/conftest.py
import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# src 설정을 읽기 전에 지정해야 합니다. (bcrypt 최소 작업 계수로 테스트 속도 확보)
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

from src.database import models
from src.database.database import Base
from src.database.unit_of_work import SqlalchemyUnitOfWork

# ===================================================================
#  인메모리 SQLite Fixture
# ===================================================================

@pytest.fixture
def engine():
    """테스트마다 새로운 인메모리 SQLite 엔진을 생성합니다. (모든 세션이 같은 연결 공유)"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def unit_of_work(db_session) -> SqlalchemyUnitOfWork:
    return SqlalchemyUnitOfWork(db_session)

@pytest.fixture
def seeded_roles(db_session):
    """기본 역할 3개(Super Admin, Seller, Buyer)를 삽입하고 이름 → Role 딕셔너리를 반환합니다."""
    roles = {}
    for role_id, name, description in models.DEFAULT_ROLES:
        role = models.Role(id=role_id, name=name, description=description, is_active=True)
        db_session.add(role)
        roles[name] = role
    db_session.commit()
    return roles

def make_user(db_session, index: int, **overrides) -> models.User:
    """테스트용 사용자를 생성합니다. index로 이름/이메일을 구분합니다."""
    values = dict(
        first_name=f"First{index:02d}",
        last_name=f"Last{index:02d}",
        email=f"user{index:02d}@example.com",
        password_hash="x",
        phone_number=f"010-0000-{index:04d}",
        is_active=True,
        login_attempt_count=0,
        created_at=datetime(2026, 1, 1, 0, 0, index % 60),
    )
    values.update(overrides)
    user = models.User(**values)
    db_session.add(user)
    db_session.flush()
    return user

@pytest.fixture
def user_factory(db_session):
    """make_user를 현재 세션에 묶어 반환합니다. 사용법: user_factory(1, first_name="Amy")"""
    def factory(index: int, **overrides) -> models.User:
        return make_user(db_session, index, **overrides)
    return factory

"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from vcoin.api.main import create_app
from vcoin.domain.models import ClassSettings, Investment
from vcoin.domain.throttle import LoginThrottle
from vcoin.infrastructure.auth.passwords import hash_password
from vcoin.infrastructure.database.models import (
    AchievementRecord,
    Base,
    ClassRecord,
    InterestRateRecord,
    InvestmentRecord,
    StudentRecord,
)
from vcoin.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

STUDENT_PASSWORD = "Secreto-123!"


class FakeClock:
    """Monotonic clock under test control (seconds)"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep that records requested durations instead of waiting"""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@dataclass
class SeededData:
    class_id: int
    student_id: int
    registro: int
    other_student_id: int


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def throttle(clock: FakeClock, sleeper: RecordingSleep) -> LoginThrottle:
    """Throttle with default limits, a fake clock and no real waiting"""
    return LoginThrottle(clock=clock, sleep=sleeper)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session, throttle: LoginThrottle) -> TestClient:
    """Create FastAPI test client with test database and controllable throttle"""
    app = create_app(login_throttle=throttle)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def seeded(db: Session) -> SeededData:
    """A running class at 3% monthly with one funded student and one without investments"""
    now = datetime.now(timezone.utc)
    today = now.date()

    class_ = ClassRecord(
        name="5to A",
        description="Economía",
        start_date=now - timedelta(days=60),
        end_date=now + timedelta(days=60),
        timezone="America/Argentina/Buenos_Aires",
    )
    db.add(class_)
    db.flush()

    db.add_all(
        [
            InterestRateRecord(class_id=class_.id, monthly_interest_rate=0.02, effective_date=today - timedelta(days=60)),
            InterestRateRecord(class_id=class_.id, monthly_interest_rate=0.03, effective_date=today - timedelta(days=30)),
        ]
    )

    student = StudentRecord(
        class_id=class_.id,
        registro=42,
        name="Lucía Fernández",
        email="lucia@example.com",
        password_hash=hash_password(STUDENT_PASSWORD),
    )
    other = StudentRecord(class_id=class_.id, registro=7, name="Tomás Ruiz", password_hash=None)
    db.add_all([student, other])
    db.flush()

    db.add_all(
        [
            InvestmentRecord(student_id=student.id, fecha=now - timedelta(days=30), monto=1000.0, concepto="Ahorro inicial"),
            InvestmentRecord(student_id=student.id, fecha=now - timedelta(days=10), monto=500.0, concepto="Tarea cumplida"),
            AchievementRecord(
                name="Primera inversión",
                description="Registraste tu primera inversión",
                points=10,
                trigger_type="automatic",
                trigger_config={"metric": "investment_count", "operator": ">=", "value": 1},
            ),
            AchievementRecord(
                name="Gran ahorrista",
                description="Invertiste 5000 o más",
                points=50,
                trigger_type="automatic",
                trigger_config={"metric": "total_invested", "operator": ">=", "value": 5000},
            ),
            AchievementRecord(name="Mejor compañero", points=20, trigger_type="manual"),
        ]
    )
    db.commit()

    return SeededData(class_id=class_.id, student_id=student.id, registro=42, other_student_id=other.id)


@pytest.fixture
def class_settings() -> ClassSettings:
    """Class ending on 2026-12-15 at 3% monthly, no timezone shift"""
    return ClassSettings(
        id=1,
        name="5to A",
        end_date=datetime(2026, 12, 15, tzinfo=timezone.utc),
        current_monthly_interest_rate=0.03,
        created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_investments() -> List[Investment]:
    """Two contributions a month apart"""
    return [
        Investment(id=1, fecha=datetime(2026, 9, 1, 12, tzinfo=timezone.utc), monto=1000.0, concepto="Ahorro", student_id=1),
        Investment(id=2, fecha=datetime(2026, 10, 1, 12, tzinfo=timezone.utc), monto=500.0, concepto="Premio", student_id=1, category_id=2),
    ]

"""Data access layer for VCOIN entities"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Set
from sqlalchemy.orm import Session
from vcoin.infrastructure.database.models import (
    AchievementRecord,
    ClassRecord,
    InterestRateRecord,
    InvestmentRecord,
    StudentAchievementRecord,
    StudentRecord,
)
from vcoin.domain.models import Achievement, AchievementTrigger, ClassSettings, Investment
from vcoin.domain.exceptions import ClassNotFoundError, StudentNotFoundError


def _to_investment(record: InvestmentRecord) -> Investment:
    return Investment(
        id=record.id,
        fecha=record.fecha,
        monto=record.monto,
        concepto=record.concepto,
        student_id=record.student_id,
        category_id=record.category_id,
    )


class ClassRepository:
    """Repository for classes and their interest rates"""

    def __init__(self, db: Session):
        self.db = db

    def get_current_rate(self, class_id: int) -> Optional[float]:
        """Latest monthly rate recorded for a class"""
        record = (
            self.db.query(InterestRateRecord)
            .filter(InterestRateRecord.class_id == class_id)
            .order_by(
                InterestRateRecord.effective_date.desc(),
                InterestRateRecord.created_at.desc(),
                InterestRateRecord.id.desc(),
            )
            .first()
        )
        return record.monthly_interest_rate if record else None

    def get_settings(self, class_id: int) -> ClassSettings:
        """
        Load simulation settings for a class.

        Raises:
            ClassNotFoundError: If the class does not exist
        """
        record = self.db.get(ClassRecord, class_id)
        if record is None:
            raise ClassNotFoundError(f"Class {class_id} not found")

        return ClassSettings(
            id=record.id,
            name=record.name,
            end_date=record.end_date,
            current_monthly_interest_rate=self.get_current_rate(record.id),
            created_at=record.created_at,
            timezone=record.timezone,
            start_date=record.start_date,
        )


class StudentRepository:
    """Repository for students"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, student_id: int) -> StudentRecord:
        """
        Raises:
            StudentNotFoundError: If the student does not exist
        """
        student = self.db.get(StudentRecord, student_id)
        if student is None:
            raise StudentNotFoundError(f"Student {student_id} not found")
        return student

    def get_by_class_and_registro(self, class_id: int, registro: int) -> Optional[StudentRecord]:
        return (
            self.db.query(StudentRecord)
            .filter(StudentRecord.class_id == class_id, StudentRecord.registro == registro)
            .first()
        )


class InvestmentRepository:
    """Repository for investments"""

    def __init__(self, db: Session):
        self.db = db

    def list_by_student(self, student_id: int) -> List[Investment]:
        records = (
            self.db.query(InvestmentRecord)
            .filter(InvestmentRecord.student_id == student_id)
            .order_by(InvestmentRecord.fecha.asc(), InvestmentRecord.id.asc())
            .all()
        )
        return [_to_investment(record) for record in records]

    def create_investment(
        self,
        student_id: int,
        fecha: datetime,
        monto: float,
        concepto: str,
        category_id: Optional[int] = None,
    ) -> Investment:
        """Persist an investment"""
        record = InvestmentRecord(
            student_id=student_id,
            fecha=fecha,
            monto=monto,
            concepto=concepto,
            category_id=category_id,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return _to_investment(record)


class AchievementRepository:
    """Repository for achievements and student unlocks"""

    def __init__(self, db: Session):
        self.db = db

    def list_active(self) -> List[Achievement]:
        records = (
            self.db.query(AchievementRecord)
            .filter(AchievementRecord.is_active.is_(True))
            .order_by(AchievementRecord.id.asc())
            .all()
        )
        achievements = []
        for record in records:
            config = record.trigger_config or {}
            trigger = None
            if config.get("metric") and config.get("operator"):
                trigger = AchievementTrigger(
                    metric=config["metric"],
                    operator=config["operator"],
                    value=config.get("value", 0),
                    category_id=config.get("category_id"),
                )
            achievements.append(
                Achievement(
                    id=record.id,
                    name=record.name,
                    trigger_type=record.trigger_type,
                    trigger_config=trigger,
                    description=record.description or "",
                    points=record.points,
                )
            )
        return achievements

    def get_unlocked_ids(self, student_id: int) -> Set[int]:
        rows = (
            self.db.query(StudentAchievementRecord.achievement_id)
            .filter(StudentAchievementRecord.student_id == student_id)
            .all()
        )
        return {row.achievement_id for row in rows}

    def unlock(self, student_id: int, achievement_id: int, metadata: Dict[str, Any]) -> StudentAchievementRecord:
        record = StudentAchievementRecord(
            student_id=student_id,
            achievement_id=achievement_id,
            unlock_metadata=metadata,
        )
        self.db.add(record)
        self.db.flush()
        return record

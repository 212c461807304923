"""SQLAlchemy ORM models for classes, students and their investments"""

from sqlalchemy import Column, String, Boolean, Float, DateTime, Date, Integer, ForeignKey, Text, JSON, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class ClassRecord(Base):
    """A class running the investment simulation"""

    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=False)
    timezone = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    students = relationship("StudentRecord", back_populates="class_", cascade="all, delete-orphan")
    interest_rates = relationship("InterestRateRecord", back_populates="class_", cascade="all, delete-orphan")


class InterestRateRecord(Base):
    """Monthly rate effective for a class from a given date"""

    __tablename__ = "interest_rate_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    monthly_interest_rate = Column(Float, nullable=False)
    effective_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    class_ = relationship("ClassRecord", back_populates="interest_rates")


class StudentRecord(Base):
    """Student enrolled in a class, identified there by a registry number"""

    __tablename__ = "students"
    __table_args__ = (UniqueConstraint("class_id", "registro", name="uq_students_class_registro"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    registro = Column(Integer, nullable=False)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    password_hash = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    class_ = relationship("ClassRecord", back_populates="students")
    investments = relationship("InvestmentRecord", back_populates="student", cascade="all, delete-orphan")


class InvestmentCategoryRecord(Base):
    """Label grouping investments (savings, purchases, ...)"""

    __tablename__ = "investment_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)


class InvestmentRecord(Base):
    """Funds contributed by a student"""

    __tablename__ = "investments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    fecha = Column(DateTime(timezone=True), nullable=False)
    monto = Column(Float, nullable=False)
    concepto = Column(Text, nullable=False)
    category_id = Column(Integer, ForeignKey("investment_categories.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    student = relationship("StudentRecord", back_populates="investments")


class AchievementRecord(Base):
    """Achievement definition; trigger_config holds metric/operator/value/category_id"""

    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    points = Column(Integer, nullable=False, default=0)
    trigger_type = Column(String(16), nullable=False, default="manual")
    trigger_config = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class StudentAchievementRecord(Base):
    """Achievement unlocked by a student"""

    __tablename__ = "student_achievements"
    __table_args__ = (UniqueConstraint("student_id", "achievement_id", name="uq_student_achievement"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    achievement_id = Column(Integer, ForeignKey("achievements.id", ondelete="CASCADE"), nullable=False)
    unlocked_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    unlock_metadata = Column(JSON, nullable=True)

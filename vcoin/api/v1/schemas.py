"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Optional

PASSWORD_PATTERN = r"^[a-zA-Z0-9\-.+$&/!?]+$"
MAX_ID = 2**63 - 1  # BIGINT


class StudentLoginRequest(BaseModel):
    """Request body for POST /v1/auth/student/login"""

    class_id: str = Field(..., pattern=r"^\d+$", description="Class identifier, digits only")
    registro: str = Field(..., pattern=r"^\d+$", description="Registry number within the class, digits only")
    password: str = Field(..., min_length=1, max_length=128, pattern=PASSWORD_PATTERN)

    @field_validator("class_id", "registro")
    @classmethod
    def must_be_positive(cls, value: str) -> str:
        if not 0 < int(value) <= MAX_ID:
            raise ValueError("must be a positive integer within range")
        return value


class StudentInfo(BaseModel):
    student_id: int
    name: str
    class_name: str


class StudentLoginResponse(BaseModel):
    """Response for POST /v1/auth/student/login"""

    success: bool
    student: StudentInfo


class InvestmentSchema(BaseModel):
    """Single investment with its projection"""

    id: int
    fecha: datetime
    monto: float
    concepto: str
    category_id: Optional[int] = None
    current_value: float
    gain_amount: float
    gain_percentage: float
    days_held: int


class DisplayValues(BaseModel):
    """Pre-formatted es-AR strings for the student dashboard"""

    current_amount: str
    total_invested: str
    total_gain: str
    gain_percentage: str
    projected_final_amount: str
    monthly_interest_rate: str


class StudentSummaryResponse(BaseModel):
    """Response for GET /v1/students/{student_id}/summary"""

    student_id: int
    student_name: str
    class_id: int
    class_name: str
    monthly_interest_rate: float
    total_invested: float
    current_amount: float
    total_gain: float
    gain_percentage: float
    days_remaining: int
    projected_final_amount: float
    class_progress_percent: float
    has_ended: bool
    display: DisplayValues
    investments: List[InvestmentSchema]


class CurrentAmountResponse(BaseModel):
    """Response for GET /v1/students/{student_id}/current-amount"""

    monto_actual: float
    timestamp: int  # epoch milliseconds
    success: bool = True


class InvestmentCreateRequest(BaseModel):
    """Request body for POST /v1/investments"""

    student_id: int = Field(..., gt=0)
    fecha: datetime
    monto: float = Field(..., gt=0, description="Principal amount")
    concepto: str = Field(..., min_length=1, max_length=255)
    category_id: Optional[int] = Field(None, gt=0)


class InvestmentItem(BaseModel):
    id: int
    student_id: int
    fecha: datetime
    monto: float
    concepto: str
    category_id: Optional[int] = None


class AchievementSchema(BaseModel):
    id: int
    name: str
    description: str
    points: int


class InvestmentCreateResponse(BaseModel):
    """Response for POST /v1/investments"""

    investment: InvestmentItem
    unlocked_achievements: List[AchievementSchema]

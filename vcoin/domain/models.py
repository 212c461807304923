"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Investment:
    """Funds a student contributed at a point in time"""

    id: int
    fecha: datetime
    monto: float
    concepto: str
    student_id: int
    category_id: Optional[int] = None


@dataclass
class ClassSettings:
    """Simulation parameters of a class"""

    id: int
    name: str
    end_date: datetime
    current_monthly_interest_rate: Optional[float]  # None when no rate was ever recorded
    created_at: datetime
    timezone: Optional[str] = None
    start_date: Optional[datetime] = None


@dataclass
class InvestmentSummary:
    """Projection of a single investment"""

    investment: Investment
    current_value: float
    gain_amount: float
    gain_percentage: float
    days_held: int


@dataclass
class InvestmentStats:
    """Aggregated projection of a student's portfolio"""

    total_invested: float
    current_amount: float
    total_gain: float
    gain_percentage: float
    days_remaining: int


@dataclass
class FailedAttempt:
    """Throttle state for one login identifier"""

    timestamp: float  # clock seconds of the last failure
    attempts: int


@dataclass
class ThrottleStats:
    """Snapshot of the throttle table for monitoring"""

    total_tracked: int
    oldest_age_ms: Optional[int]
    memory_usage_percent: float
    is_near_capacity: bool


@dataclass
class AchievementTrigger:
    """Condition that unlocks an automatic achievement"""

    metric: str
    operator: str  # ">=", ">", "=", "<=", "<"
    value: float
    category_id: Optional[int] = None


@dataclass
class Achievement:
    """Badge a student can unlock"""

    id: int
    name: str
    trigger_type: str  # "automatic" or "manual"
    trigger_config: Optional[AchievementTrigger] = None
    description: str = ""
    points: int = 0

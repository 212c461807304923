"""Achievement engine - student metrics and unlock conditions"""

from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from vcoin.domain.models import Achievement, AchievementTrigger, Investment
from vcoin.utils.date_utils import ensure_utc, utc_now

_OPERATORS = {
    ">=": lambda current, target: current >= target,
    ">": lambda current, target: current > target,
    "=": lambda current, target: current == target,
    "<=": lambda current, target: current <= target,
    "<": lambda current, target: current < target,
}


def calculate_streak_days(investments: List[Investment], today: Optional[date] = None) -> int:
    """
    Count consecutive calendar days with at least one investment.

    The streak ends at the most recent investment day and is broken (0)
    when that day is more than one day before today.
    """
    if not investments:
        return 0

    today = today or utc_now().date()
    days = sorted({ensure_utc(item.fecha).date() for item in investments}, reverse=True)

    if (today - days[0]).days > 1:
        return 0

    streak = 1
    for previous, current in zip(days, days[1:]):
        if (previous - current).days != 1:
            break
        streak += 1
    return streak


def calculate_student_metrics(investments: List[Investment], today: Optional[date] = None) -> Dict[str, float]:
    """
    Metrics that automatic achievements are evaluated against.

    Keys: investment_count, total_invested, streak_days and one
    category_<id>_count per category the student invested in.
    """
    category_counts: Dict[int, int] = {}
    for item in investments:
        if item.category_id:
            category_counts[item.category_id] = category_counts.get(item.category_id, 0) + 1

    metrics: Dict[str, float] = {
        "investment_count": len(investments),
        "total_invested": sum(item.monto for item in investments),
        "streak_days": calculate_streak_days(investments, today),
    }
    for category_id, count in category_counts.items():
        metrics[f"category_{category_id}_count"] = count
    return metrics


def check_achievement_condition(trigger: Optional[AchievementTrigger], metrics: Dict[str, float]) -> bool:
    if trigger is None:
        return False

    if trigger.metric == "category_count":
        if not trigger.category_id:
            return False
        current = metrics.get(f"category_{trigger.category_id}_count", 0)
    else:
        current = metrics.get(trigger.metric, 0)

    compare = _OPERATORS.get(trigger.operator)
    if compare is None:
        return False
    return compare(current, trigger.value)


def evaluate_achievements(
    achievements: Iterable[Achievement],
    metrics: Dict[str, float],
    unlocked_ids: Set[int],
) -> List[Achievement]:
    """Automatic achievements newly satisfied by the metrics"""
    return [
        achievement
        for achievement in achievements
        if achievement.trigger_type == "automatic"
        and achievement.id not in unlocked_ids
        and check_achievement_condition(achievement.trigger_config, metrics)
    ]

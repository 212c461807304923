"""GET /v1/students/{student_id}/... - Investment projections for a student"""

from typing import List, Tuple
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from vcoin.api.v1.schemas import (
    CurrentAmountResponse,
    DisplayValues,
    InvestmentSchema,
    StudentSummaryResponse,
)
from vcoin.infrastructure.database.models import StudentRecord
from vcoin.infrastructure.database.session import get_db
from vcoin.infrastructure.database.repositories import ClassRepository, InvestmentRepository, StudentRepository
from vcoin.domain import interest
from vcoin.domain.exceptions import ClassNotFoundError, StudentNotFoundError
from vcoin.domain.models import ClassSettings, Investment
from vcoin.utils.date_utils import utc_now
from vcoin.utils.formatting import format_currency, format_percentage, format_percentage_from_whole

router = APIRouter()


def load_portfolio(db: Session, student_id: int) -> Tuple[StudentRecord, ClassSettings, List[Investment]]:
    """Student, their class settings and their investments, or 404"""
    try:
        student = StudentRepository(db).get_by_id(student_id)
        class_settings = ClassRepository(db).get_settings(student.class_id)
    except (StudentNotFoundError, ClassNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))

    return student, class_settings, InvestmentRepository(db).list_by_student(student_id)


@router.get("/students/{student_id}/summary", response_model=StudentSummaryResponse)
def get_student_summary(student_id: int, db: Session = Depends(get_db)):
    """
    Portfolio projection for the student dashboard.

    Returns:
        Totals, gain, days remaining, projected value at class end and
        per-investment projections, all evaluated at the same instant
    """
    student, class_settings, investments = load_portfolio(db, student_id)
    now = utc_now()

    stats = interest.calculate_stats(investments, class_settings, now)
    projected = interest.value_at_class_end(investments, class_settings)
    rate = interest.effective_monthly_rate(class_settings)

    summaries = [interest.summarize_investment(item, class_settings, now) for item in investments]

    return StudentSummaryResponse(
        student_id=student.id,
        student_name=student.name,
        class_id=class_settings.id,
        class_name=class_settings.name,
        monthly_interest_rate=rate,
        total_invested=stats.total_invested,
        current_amount=stats.current_amount,
        total_gain=stats.total_gain,
        gain_percentage=stats.gain_percentage,
        days_remaining=stats.days_remaining,
        projected_final_amount=projected,
        class_progress_percent=interest.class_progress_percent(class_settings, now),
        has_ended=interest.has_reached_end_date(class_settings, now),
        display=DisplayValues(
            current_amount=format_currency(stats.current_amount),
            total_invested=format_currency(stats.total_invested),
            total_gain=format_currency(stats.total_gain),
            gain_percentage=format_percentage_from_whole(stats.gain_percentage, show_sign=True),
            projected_final_amount=format_currency(projected),
            monthly_interest_rate=format_percentage(rate),
        ),
        investments=[
            InvestmentSchema(
                id=summary.investment.id,
                fecha=summary.investment.fecha,
                monto=summary.investment.monto,
                concepto=summary.investment.concepto,
                category_id=summary.investment.category_id,
                current_value=summary.current_value,
                gain_amount=summary.gain_amount,
                gain_percentage=summary.gain_percentage,
                days_held=summary.days_held,
            )
            for summary in summaries
        ],
    )


@router.get("/students/{student_id}/current-amount", response_model=CurrentAmountResponse)
def get_current_amount(student_id: int, db: Session = Depends(get_db)):
    """Live value for the dashboard ticker"""
    _, class_settings, investments = load_portfolio(db, student_id)
    now = utc_now()

    return CurrentAmountResponse(
        monto_actual=interest.current_value(investments, class_settings, now),
        timestamp=int(now.timestamp() * 1000),
    )

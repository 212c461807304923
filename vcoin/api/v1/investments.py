"""POST /v1/investments - Register an investment and unlock achievements"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from vcoin.api.v1.schemas import (
    AchievementSchema,
    InvestmentCreateRequest,
    InvestmentCreateResponse,
    InvestmentItem,
)
from vcoin.api.dependencies import get_request_id
from vcoin.infrastructure.database.session import get_db
from vcoin.infrastructure.database.repositories import (
    AchievementRepository,
    InvestmentRepository,
    StudentRepository,
)
from vcoin.infrastructure.observability.metrics import record_investment
from vcoin.domain.achievements import calculate_student_metrics, evaluate_achievements
from vcoin.domain.exceptions import StudentNotFoundError
from vcoin.utils.date_utils import ensure_utc

router = APIRouter()


@router.post("/investments", response_model=InvestmentCreateResponse, status_code=201)
def create_investment(
    request_body: InvestmentCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Record a student's investment.

    Flow:
    1. Check the student exists
    2. Persist the investment
    3. Recompute student metrics and unlock satisfied automatic achievements
    4. Commit and return the investment with the new achievements
    """
    request_id = get_request_id(request)

    try:
        StudentRepository(db).get_by_id(request_body.student_id)

        investment_repo = InvestmentRepository(db)
        investment = investment_repo.create_investment(
            student_id=request_body.student_id,
            fecha=ensure_utc(request_body.fecha),
            monto=request_body.monto,
            concepto=request_body.concepto,
            category_id=request_body.category_id,
        )

        achievement_repo = AchievementRepository(db)
        metrics = calculate_student_metrics(investment_repo.list_by_student(request_body.student_id))
        unlocked = evaluate_achievements(
            achievement_repo.list_active(),
            metrics,
            achievement_repo.get_unlocked_ids(request_body.student_id),
        )
        for achievement in unlocked:
            achievement_repo.unlock(
                request_body.student_id,
                achievement.id,
                {
                    "triggered_by": "investment",
                    "investment_id": investment.id,
                    "trigger_value": metrics.get(achievement.trigger_config.metric),
                },
            )

        db.commit()

    except StudentNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_investment(investment.monto, len(unlocked))
    logging.info(
        "Investment registered",
        extra={
            "request_id": request_id,
            "student_id": investment.student_id,
            "investment_id": investment.id,
            "achievements_unlocked": [a.id for a in unlocked],
        },
    )

    return InvestmentCreateResponse(
        investment=InvestmentItem(
            id=investment.id,
            student_id=investment.student_id,
            fecha=investment.fecha,
            monto=investment.monto,
            concepto=investment.concepto,
            category_id=investment.category_id,
        ),
        unlocked_achievements=[
            AchievementSchema(id=a.id, name=a.name, description=a.description, points=a.points)
            for a in unlocked
        ],
    )

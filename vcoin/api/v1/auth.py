"""POST /v1/auth/student/login - Student login with failed-attempt throttling"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from vcoin.api.v1.schemas import StudentInfo, StudentLoginRequest, StudentLoginResponse
from vcoin.api.dependencies import get_login_throttle, get_request_id
from vcoin.infrastructure.auth.passwords import verify_password
from vcoin.infrastructure.database.models import StudentRecord
from vcoin.infrastructure.database.session import get_db
from vcoin.infrastructure.database.repositories import StudentRepository
from vcoin.infrastructure.observability.logging import log_login_attempt
from vcoin.infrastructure.observability.metrics import record_login
from vcoin.domain.exceptions import InvalidCredentialsError
from vcoin.domain.throttle import LoginThrottle

router = APIRouter()

INVALID_CREDENTIALS_MESSAGE = (
    "Credenciales inválidas. Verificá el ID de clase, el número de registro y la contraseña."
)


def authenticate_student(db: Session, class_id: int, registro: int, password: str) -> StudentRecord:
    """
    Raises:
        InvalidCredentialsError: Unknown student, no password set, or wrong password
    """
    student = StudentRepository(db).get_by_class_and_registro(class_id, registro)
    if student is None or not verify_password(password, student.password_hash):
        raise InvalidCredentialsError(f"Invalid credentials for class {class_id}")
    return student


@router.post("/auth/student/login", response_model=StudentLoginResponse)
async def student_login(
    request_body: StudentLoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    throttle: LoginThrottle = Depends(get_login_throttle),
):
    """
    Authenticate a student by class, registry number and password.

    Flow:
    1. Normalise class_id and registro to integers
    2. Verify the password hash
    3. On failure, hold the response for the throttle delay and return 401
    4. On success, clear the throttle state for the identifier
    """
    start_time = time.time()
    request_id = get_request_id(request)

    class_id = int(request_body.class_id)
    registro = int(request_body.registro)
    identifier = f"{class_id}:{registro}"

    try:
        student = authenticate_student(db, class_id, registro, request_body.password)

    except InvalidCredentialsError:
        await throttle.record_failed_attempt(identifier)
        record_login(False)
        log_login_attempt(request_id, class_id, registro, False, (time.time() - start_time) * 1000)
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS_MESSAGE)

    except Exception as e:
        logging.error(f"Unexpected login error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    throttle.record_successful_attempt(identifier)
    record_login(True)
    log_login_attempt(request_id, class_id, registro, True, (time.time() - start_time) * 1000)

    return StudentLoginResponse(
        success=True,
        student=StudentInfo(
            student_id=student.id,
            name=student.name,
            class_name=student.class_.name,
        ),
    )

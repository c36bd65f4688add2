import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatepass.dependencies import ensure_database_ready, get_db, server_error
from gatepass.models.user import User
from gatepass.routes.user_routes import UserResponse

router = APIRouter(tags=['students'])

logger = logging.getLogger(__name__)

STUDENT_ROLE = 'student'
OFFENDER_THRESHOLD = 1


@router.get('/students/offenders', response_model=list[UserResponse])
def list_offenders(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return db.query(User).filter(
            User.role == STUDENT_ROLE,
            User.offences > OFFENDER_THRESHOLD,
        ).order_by(User.offences.desc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching offenders.')
        raise server_error('Failed to fetch students with offences') from exc


@router.patch('/students/{username}/clear-offences', response_model=UserResponse)
def clear_offences(username: str, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        student = db.query(User).filter(User.username == username).with_for_update().first()

        if student is None:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Student not found.',
            )

        student.offences = 0
        db.commit()
        db.refresh(student)
        logger.info('Offences cleared for %s.', username)

        return student
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error clearing offences for %s.', username)
        raise server_error('Failed to clear offences') from exc

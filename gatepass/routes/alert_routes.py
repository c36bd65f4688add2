import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatepass.core import config
from gatepass.dependencies import ensure_database_ready, get_db, server_error
from gatepass.models.user import User
from gatepass.notifications import sms

router = APIRouter(tags=['alert'])

logger = logging.getLogger(__name__)

STUDENT_ROLE = 'student'
VISITOR_ROLE = 'visitor'


class FailedDispatchResponse(BaseModel):
    phone: str
    error: str


class AlertResponse(BaseModel):
    message: str
    penalized: int
    notified: int
    failed: list[FailedDispatchResponse] = []


def penalize_students(student_ids: list[int], db: Session) -> None:
    if not student_ids:
        return
    db.query(User).filter(User.id.in_(student_ids)).update(
        {User.offences: User.offences + 1},
        synchronize_session=False,
    )


def collect_recipients(*phone_groups: list[str | None]) -> list[str]:
    recipients: list[str] = []
    for phones in phone_groups:
        recipients.extend(phone.strip() for phone in phones if phone and phone.strip())
    return recipients


@router.post('/alert', response_model=AlertResponse)
async def send_alert(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        students_out = db.query(User.id, User.phone).filter(
            User.role == STUDENT_ROLE,
            User.status == 'out',
        ).all()
        visitors_in = db.query(User.phone).filter(
            User.role == VISITOR_ROLE,
            User.status == 'in',
        ).all()

        student_ids = [student_id for student_id, _ in students_out]
        penalize_students(student_ids, db)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error updating offences during alert sweep.')
        raise server_error('Failed to send alerts') from exc

    recipients = collect_recipients(
        [phone for _, phone in students_out],
        [phone for (phone,) in visitors_in],
    )

    if not recipients:
        logger.info('Alert sweep penalized %s student(s); no users to notify.', len(student_ids))
        return AlertResponse(message='No users to notify.', penalized=len(student_ids), notified=0)

    outcomes = await sms.dispatch_bulk_sms(recipients, config.ALERT_MESSAGE)
    failed = [
        FailedDispatchResponse(phone=outcome.phone, error=outcome.error)
        for outcome in outcomes
        if not outcome.delivered
    ]
    notified = len(outcomes) - len(failed)
    logger.info(
        'Alert sweep penalized %s student(s); %s of %s SMS sent.',
        len(student_ids),
        notified,
        len(outcomes),
    )

    if failed:
        message = f'Offences updated; {len(failed)} of {len(outcomes)} alerts failed to send.'
    else:
        message = 'Alert sent and offences updated successfully!'

    return AlertResponse(message=message, penalized=len(student_ids), notified=notified, failed=failed)

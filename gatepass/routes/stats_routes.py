import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends
from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatepass.dependencies import ensure_database_ready, get_db, server_error
from gatepass.models.gate_request import APPROVED, PENDING, REJECTED, GateRequest
from gatepass.models.user import User

router = APIRouter(tags=['stats'])

logger = logging.getLogger(__name__)

REQUEST_STATS_RANGE_DAYS = 30


def _count_where(condition):
    return func.sum(case((condition, 1), else_=0))


@router.get('/userstats')
def user_stats(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        by_role = db.query(User.role, func.count(User.id)).group_by(User.role).all()
        by_status = db.query(User.status, func.count(User.id)).group_by(User.status).all()
        in_count, out_count, home_count = db.query(
            _count_where(User.status == 'in'),
            _count_where(User.status == 'out'),
            _count_where(User.status == 'home'),
        ).one()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching user stats.')
        raise server_error('Failed to fetch user statistics') from exc

    return {
        'byRole': [{'role': role, 'count': count} for role, count in by_role],
        'byStatus': [{'status': user_status, 'count': count} for user_status, count in by_status],
        'inCampus': {
            'in_count': in_count or 0,
            'out_count': out_count or 0,
            'home_count': home_count or 0,
        },
    }


@router.get('/requeststats')
def request_stats(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        cutoff = datetime.now() - timedelta(days=REQUEST_STATS_RANGE_DAYS)
        request_date = func.date(GateRequest.requested_at)
        daily = db.query(
            request_date,
            func.count(GateRequest.id),
            _count_where(GateRequest.status == APPROVED),
            _count_where(GateRequest.status == REJECTED),
            _count_where(GateRequest.status == PENDING),
        ).filter(
            GateRequest.requested_at >= cutoff,
        ).group_by(request_date).order_by(request_date.desc()).all()

        by_type = db.query(GateRequest.type, func.count(GateRequest.id)).group_by(GateRequest.type).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching request stats.')
        raise server_error('Failed to fetch request statistics') from exc

    return {
        'daily': [
            {
                'date': str(day),
                'total_requests': total,
                'approved': approved or 0,
                'rejected': rejected or 0,
                'pending': pending or 0,
            }
            for day, total, approved, rejected, pending in daily
        ],
        'byType': [{'type': request_type, 'count': count} for request_type, count in by_type],
    }

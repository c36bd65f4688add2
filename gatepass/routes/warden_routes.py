import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatepass.database import acquire_advisory_lock
from gatepass.dependencies import ensure_database_ready, get_db, server_error, validate_action
from gatepass.models.gate_request import OUT_OF_HOSTEL_REQUEST_TYPE, PENDING, GateRequest
from gatepass.routes.request_routes import GateRequestResponse, MessageResponse, apply_resolution

router = APIRouter(tags=['warden'])

logger = logging.getLogger(__name__)


@router.get('/warden/requests/pending', response_model=list[GateRequestResponse])
def list_pending_out_of_hostel_requests(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return db.query(GateRequest).filter(
            GateRequest.type == OUT_OF_HOSTEL_REQUEST_TYPE,
            GateRequest.status == PENDING,
        ).order_by(GateRequest.requested_at.desc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching OOHostel requests.')
        raise server_error() from exc


@router.patch('/warden/requests/{request_id}/{action}', response_model=MessageResponse)
def resolve_out_of_hostel_request(request_id: int, action: str, db: Session = Depends(get_db)):
    new_request_status = validate_action(action)

    ensure_database_ready()

    try:
        acquire_advisory_lock(db, f'request:{request_id}')

        pending_request = db.query(GateRequest).filter(
            GateRequest.id == request_id,
            GateRequest.type == OUT_OF_HOSTEL_REQUEST_TYPE,
            GateRequest.status == PENDING,
        ).with_for_update().first()

        if pending_request is None:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='No pending OOHostel request found.',
            )

        apply_resolution(db, pending_request, new_request_status)
        logger.info('OOHostel request %s %sd.', request_id, action)

        return MessageResponse(message=f'OOHostel request {action}d successfully')
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error processing OOHostel request %s.', request_id)
        raise server_error() from exc

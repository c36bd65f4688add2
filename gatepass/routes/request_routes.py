import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatepass.core.transitions import InvalidTransitionError, next_status
from gatepass.database import acquire_advisory_lock
from gatepass.dependencies import ensure_database_ready, get_db, server_error, validate_action
from gatepass.models.gate_request import (
    APPROVED,
    GATE_REQUEST_TYPES,
    PENDING,
    GateRequest,
    category_types,
)
from gatepass.models.user import User

router = APIRouter(tags=['requests'])

logger = logging.getLogger(__name__)


class CreateRequestRequest(BaseModel):
    username: str
    request_type: str = Field(alias='requestType')
    purpose: str
    role: str | None = None
    image: str | None = None

    class Config:
        populate_by_name = True


class GateRequestResponse(BaseModel):
    id: int
    username: str
    type: str
    image: str | None = None
    purpose: str
    role: str | None = None
    status: str
    requested_at: datetime | None = None

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    message: str


def apply_resolution(db: Session, pending_request: GateRequest, new_request_status: str) -> None:
    """Mark ``pending_request`` resolved and, on approval, move its user to the next status.

    Nothing is committed if the user is missing or the transition is undefined,
    so the request stays Pending in both cases.
    """
    if new_request_status == APPROVED:
        user = db.query(User).filter(
            User.username == pending_request.username,
        ).with_for_update().first()

        if user is None:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='User not found.',
            )

        try:
            user.status = next_status(user.status, pending_request.type)
        except InvalidTransitionError as exc:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=str(exc),
            ) from exc

    pending_request.status = new_request_status
    db.commit()


def find_latest_pending_gate_request(username: str, db: Session) -> GateRequest | None:
    return db.query(GateRequest).filter(
        GateRequest.username == username,
        GateRequest.status == PENDING,
        GateRequest.type.in_(GATE_REQUEST_TYPES),
    ).order_by(
        GateRequest.requested_at.desc(),
        GateRequest.id.desc(),
    ).with_for_update().first()


@router.patch('/requests/{username}/{action}', response_model=MessageResponse)
def resolve_gate_request(username: str, action: str, db: Session = Depends(get_db)):
    new_request_status = validate_action(action)

    ensure_database_ready()

    try:
        acquire_advisory_lock(db, username)

        pending_request = find_latest_pending_gate_request(username, db)
        if pending_request is None:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='No pending request found.',
            )

        request_id = pending_request.id
        apply_resolution(db, pending_request, new_request_status)
        logger.info('Gate request %s for %s %sd.', request_id, username, action)

        return MessageResponse(message=f'Request {action}d successfully')
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error processing request for %s.', username)
        raise server_error() from exc


@router.get('/requests/pending', response_model=list[GateRequestResponse])
def list_pending_gate_requests(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return db.query(GateRequest).filter(
            GateRequest.status == PENDING,
            GateRequest.type.in_(GATE_REQUEST_TYPES),
        ).order_by(GateRequest.requested_at.desc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching pending requests.')
        raise server_error() from exc


@router.get('/requests/{username}', response_model=list[GateRequestResponse])
def list_pending_requests_for_user(username: str, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return db.query(GateRequest).filter(
            GateRequest.username == username,
            GateRequest.status == PENDING,
        ).order_by(GateRequest.requested_at.desc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching pending requests for %s.', username)
        raise server_error() from exc


@router.post('/requests', response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def submit_request(data: CreateRequestRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        acquire_advisory_lock(db, data.username)

        existing = db.query(GateRequest).filter(
            GateRequest.username == data.username,
            GateRequest.status == PENDING,
            GateRequest.type.in_(category_types(data.request_type)),
        ).with_for_update().first()

        if existing:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='Request already pending',
            )

        gate_request = GateRequest(
            username=data.username,
            role=data.role or 'Student',
            type=data.request_type,
            purpose=data.purpose,
            image=data.image,
            status=PENDING,
            requested_at=datetime.now(),
        )
        db.add(gate_request)
        db.flush()
        request_id = gate_request.id
        db.commit()
        logger.info('Request %s (%s) submitted by %s.', request_id, data.request_type, data.username)

        return MessageResponse(message='Request submitted successfully')
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error inserting request for %s.', data.username)
        raise server_error() from exc

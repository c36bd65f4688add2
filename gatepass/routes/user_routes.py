import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatepass.database import acquire_advisory_lock
from gatepass.dependencies import ensure_database_ready, get_db, server_error
from gatepass.models.gate_request import GateRequest
from gatepass.models.user import User

router = APIRouter(tags=['users'])

logger = logging.getLogger(__name__)


class CreateUserRequest(BaseModel):
    username: str
    password: str
    name: str
    role: str | None = None
    status: str | None = None
    phone: str | None = None
    image: str | None = None


class UserResponse(BaseModel):
    id: int
    username: str
    name: str
    image: str | None = None
    phone: str | None = None
    role: str | None = None
    status: str | None = None
    offences: int = 0
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class DeleteUserResponse(BaseModel):
    message: str
    user: UserResponse


@router.post('/users', response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(data: CreateUserRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        user = User(
            username=data.username,
            password=data.password,
            name=data.name,
            role=data.role or 'Student',
            status=data.status or 'in',
            phone=data.phone,
            image=data.image,
            offences=0,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info('User %s created with role %s.', user.username, user.role)

        return user
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error creating user %s.', data.username)
        raise server_error() from exc


@router.get('/users', response_model=list[UserResponse])
def list_users(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return db.query(User).order_by(User.id.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching users.')
        raise server_error('Failed to fetch users.') from exc


@router.get('/users/{username}', response_model=UserResponse)
def get_user(username: str, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        user = db.query(User).filter(User.username == username).first()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching user %s.', username)
        raise server_error() from exc

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='User not found.',
        )
    return user


@router.get('/usersearch', response_model=list[UserResponse])
def search_users(query: str = Query(default=''), db: Session = Depends(get_db)):
    ensure_database_ready()

    pattern = f'%{query}%'
    try:
        return db.query(User).filter(
            or_(
                User.username.ilike(pattern),
                User.role.ilike(pattern),
                User.status.ilike(pattern),
                User.name.ilike(pattern),
                User.phone.ilike(pattern),
            )
        ).order_by(User.id.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Error searching users.')
        raise server_error('Failed to search users.') from exc


@router.delete('/users/{username}', response_model=DeleteUserResponse)
def delete_user(username: str, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        acquire_advisory_lock(db, username)

        user_requests = db.query(GateRequest).filter(
            GateRequest.username == username,
        ).with_for_update().all()
        user = db.query(User).filter(User.username == username).with_for_update().first()

        if user is None:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='User not found.',
            )

        deleted_user = UserResponse.model_validate(user)
        for user_request in user_requests:
            db.delete(user_request)
        db.delete(user)
        db.commit()
        logger.info('User %s deleted along with %s request(s).', username, len(user_requests))

        return DeleteUserResponse(message='User deleted successfully', user=deleted_user)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error deleting user %s.', username)
        raise server_error('Server error during user deletion') from exc

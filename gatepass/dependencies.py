import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from gatepass.database import SessionLocal, ensure_requests_schema, ensure_users_schema

logger = logging.getLogger(__name__)

VALID_ACTIONS = {'approve': 'Approved', 'reject': 'Rejected'}


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_database_ready() -> None:
    try:
        ensure_users_schema()
        ensure_requests_schema()
    except SQLAlchemyError as exc:
        logger.exception('Database schema check failed.')
        raise server_error() from exc


def server_error(detail: str = 'Server error') -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
    )


def validate_action(action: str) -> str:
    """Map an ``approve``/``reject`` token to the request status it sets."""
    if action not in VALID_ACTIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid action',
        )
    return VALID_ACTIONS[action]

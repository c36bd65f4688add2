import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from gatepass.database import Base  # noqa: E402
from gatepass.models.gate_request import GateRequest  # noqa: E402
from gatepass.models.user import User  # noqa: E402

ROUTE_MODULES = (
    'gatepass.routes.request_routes',
    'gatepass.routes.warden_routes',
    'gatepass.routes.user_routes',
    'gatepass.routes.student_routes',
    'gatepass.routes.alert_routes',
    'gatepass.routes.stats_routes',
)


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=[User.__table__, GateRequest.__table__])
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=[GateRequest.__table__, User.__table__])


@pytest.fixture
def gatepass_db(db_engine, monkeypatch: pytest.MonkeyPatch):
    for module in ROUTE_MODULES:
        monkeypatch.setattr(f'{module}.ensure_database_ready', lambda: None)

    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_user(gatepass_db):
    def _make_user(username: str, **overrides) -> User:
        values = {
            'name': username.title(),
            'password': 'secret',
            'role': 'Student',
            'status': 'in',
            'phone': None,
            'offences': 0,
        }
        values.update(overrides)
        user = User(username=username, **values)
        gatepass_db.add(user)
        gatepass_db.commit()
        gatepass_db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_request(gatepass_db):
    def _make_request(username: str, request_type: str, **overrides) -> GateRequest:
        values = {
            'purpose': 'errand',
            'role': 'Student',
            'status': 'Pending',
        }
        values.update(overrides)
        gate_request = GateRequest(username=username, type=request_type, **values)
        gatepass_db.add(gate_request)
        gatepass_db.commit()
        gatepass_db.refresh(gate_request)
        return gate_request

    return _make_request

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from gatepass.core import config
from gatepass.database import Base, engine, ensure_requests_schema, ensure_users_schema
from gatepass.models import gate_request, user  # noqa: F401
from gatepass.routes import (
    alert_routes,
    request_routes,
    stats_routes,
    student_routes,
    user_routes,
    warden_routes,
)

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(title='Gate Pass API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


def create_tables() -> None:
    Base.metadata.create_all(bind=engine)
    ensure_users_schema()
    ensure_requests_schema()


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        create_tables()
        logger.info('Tables created or already exist.')
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and Postgres credentials.')


@app.get(f'{config.API_PREFIX}/')
def root():
    return {'status': 'Gate Pass API Running'}


app.include_router(request_routes.router, prefix=config.API_PREFIX)
app.include_router(warden_routes.router, prefix=config.API_PREFIX)
app.include_router(user_routes.router, prefix=config.API_PREFIX)
app.include_router(student_routes.router, prefix=config.API_PREFIX)
app.include_router(alert_routes.router, prefix=config.API_PREFIX)
app.include_router(stats_routes.router, prefix=config.API_PREFIX)

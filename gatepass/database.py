from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from gatepass.core import config


def _connect_args() -> dict:
    if config.DATABASE_SSLMODE and config.DATABASE_URL.startswith("postgresql"):
        return {"sslmode": config.DATABASE_SSLMODE}
    return {}


engine = create_engine(
    config.DATABASE_URL,
    pool_pre_ping=config.DATABASE_POOL_PRE_PING,
    connect_args=_connect_args(),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_users_schema_checked = False
_requests_schema_checked = False


def ensure_users_schema() -> None:
    global _users_schema_checked

    if _users_schema_checked:
        return

    with _schema_lock:
        if _users_schema_checked:
            return

        inspector = inspect(engine)

        if 'users' not in inspector.get_table_names():
            _users_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('users')}
        migration_steps = [
            ('image', 'ALTER TABLE users ADD COLUMN image TEXT'),
            ('phone', 'ALTER TABLE users ADD COLUMN phone VARCHAR(15)'),
            ('offences', 'ALTER TABLE users ADD COLUMN offences INTEGER DEFAULT 0'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_users_role_status ON users(role, status)')
            )

        _users_schema_checked = True


def ensure_requests_schema() -> None:
    global _requests_schema_checked

    if _requests_schema_checked:
        return

    with _schema_lock:
        if _requests_schema_checked:
            return

        inspector = inspect(engine)

        if 'requests' not in inspector.get_table_names():
            _requests_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('requests')}
        migration_steps = [
            ('image', 'ALTER TABLE requests ADD COLUMN image TEXT'),
            ('role', "ALTER TABLE requests ADD COLUMN role VARCHAR(20) DEFAULT 'Student'"),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_requests_username_status ON requests(username, status)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_requests_type_status ON requests(type, status, requested_at)')
            )

        _requests_schema_checked = True


def acquire_advisory_lock(db: Session, key: str) -> None:
    """Hold a transaction-scoped lock on ``key`` until the session commits or rolls back.

    Only PostgreSQL has advisory locks; other dialects fall back to the row
    locks taken with ``with_for_update()``.
    """
    bind = db.get_bind()
    if bind.dialect.name != 'postgresql':
        return
    db.execute(text('SELECT pg_advisory_xact_lock(hashtext(:key))'), {'key': key})

import pytest
from sqlalchemy import create_engine, inspect, text

from gatepass import database, main


@pytest.fixture
def legacy_engine(tmp_path, monkeypatch: pytest.MonkeyPatch):
    engine = create_engine(f'sqlite:///{tmp_path / "legacy.db"}')
    with engine.begin() as connection:
        connection.execute(text(
            'CREATE TABLE users ('
            'id INTEGER PRIMARY KEY, username VARCHAR(50) UNIQUE NOT NULL, name VARCHAR(100) NOT NULL, '
            "password TEXT NOT NULL, role VARCHAR(50) DEFAULT 'Student', status VARCHAR(20) DEFAULT 'in', "
            'created_at TIMESTAMP)'
        ))
        connection.execute(text(
            'CREATE TABLE requests ('
            'id INTEGER PRIMARY KEY, username VARCHAR(255) NOT NULL, type VARCHAR(20) NOT NULL, '
            "purpose TEXT NOT NULL, status VARCHAR(20) DEFAULT 'Pending', requested_at TIMESTAMP)"
        ))
        connection.execute(text(
            "INSERT INTO users (username, name, password) VALUES ('alice', 'Alice', 'secret')"
        ))

    monkeypatch.setattr(database, 'engine', engine)
    monkeypatch.setattr(main, 'engine', engine)
    monkeypatch.setattr(database, '_users_schema_checked', False)
    monkeypatch.setattr(database, '_requests_schema_checked', False)
    try:
        yield engine
    finally:
        engine.dispose()


def _reset_schema_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(database, '_users_schema_checked', False)
    monkeypatch.setattr(database, '_requests_schema_checked', False)


def test_create_tables_upgrades_legacy_tables(legacy_engine) -> None:
    main.create_tables()

    inspector = inspect(legacy_engine)
    user_columns = {column['name'] for column in inspector.get_columns('users')}
    request_columns = {column['name'] for column in inspector.get_columns('requests')}
    user_indexes = {index['name'] for index in inspector.get_indexes('users')}
    request_indexes = {index['name'] for index in inspector.get_indexes('requests')}

    assert {'image', 'phone', 'offences'} <= user_columns
    assert {'image', 'role'} <= request_columns
    assert 'idx_users_role_status' in user_indexes
    assert {'idx_requests_username_status', 'idx_requests_type_status'} <= request_indexes

    with legacy_engine.connect() as connection:
        offences = connection.execute(text("SELECT offences FROM users WHERE username = 'alice'")).scalar_one()
    assert offences == 0


def test_create_tables_is_idempotent(legacy_engine, monkeypatch: pytest.MonkeyPatch) -> None:
    main.create_tables()
    _reset_schema_flags(monkeypatch)

    main.create_tables()

    user_columns = [column['name'] for column in inspect(legacy_engine).get_columns('users')]
    assert user_columns.count('offences') == 1


def test_create_tables_on_empty_database(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    engine = create_engine(f'sqlite:///{tmp_path / "fresh.db"}')
    monkeypatch.setattr(database, 'engine', engine)
    monkeypatch.setattr(main, 'engine', engine)
    _reset_schema_flags(monkeypatch)

    main.create_tables()
    _reset_schema_flags(monkeypatch)
    main.create_tables()

    assert {'users', 'requests'} <= set(inspect(engine).get_table_names())
    engine.dispose()

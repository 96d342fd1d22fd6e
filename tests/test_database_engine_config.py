def test_get_engine_kwargs_sqlite_has_check_same_thread(monkeypatch):
    # Import lazily so monkeypatch can affect env usage deterministically.
    from userdirectory.database import database as db

    kwargs = db.get_engine_kwargs("sqlite:///./userdirectory.db")
    assert kwargs["connect_args"]["check_same_thread"] is False
    # SQLite should not require pool sizing knobs.
    assert "pool_size" not in kwargs
    assert "max_overflow" not in kwargs
    assert kwargs["pool_pre_ping"] is True


def test_get_engine_kwargs_postgres_reads_pool_env(monkeypatch):
    from userdirectory.database import database as db

    monkeypatch.setenv("DB_POOL_SIZE", "7")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "3")
    monkeypatch.setenv("DB_POOL_TIMEOUT_SEC", "15")

    kwargs = db.get_engine_kwargs("postgresql+psycopg://u:p@localhost:5432/users")
    assert "connect_args" not in kwargs
    assert kwargs["pool_pre_ping"] is True
    assert kwargs["pool_size"] == 7
    assert kwargs["max_overflow"] == 3
    assert kwargs["pool_timeout"] == 15


def test_debug_env_enables_echo(monkeypatch):
    from userdirectory.database import database as db

    monkeypatch.setenv("DEBUG", "true")
    assert db.get_engine_kwargs("sqlite:///./userdirectory.db")["echo"] is True

    monkeypatch.setenv("DEBUG", "false")
    assert db.get_engine_kwargs("sqlite:///./userdirectory.db")["echo"] is False


def test_sqlite_pragmas_listener_is_guarded():
    from userdirectory.database import database as db

    assert db._is_sqlite_url("sqlite:///./userdirectory.db") is True
    assert db._is_sqlite_url("postgresql+psycopg://u:p@localhost/users") is False


def test_missing_requirements_reports_absent_users_table(tmp_path):
    from sqlalchemy import create_engine
    from userdirectory.database.migrate_runner import missing_requirements

    engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    try:
        assert missing_requirements(engine) == ["missing table: users"]
    finally:
        engine.dispose()


def test_missing_requirements_reports_absent_columns(tmp_path):
    from sqlalchemy import create_engine, text
    from userdirectory.database.migrate_runner import missing_requirements

    engine = create_engine(f"sqlite:///{tmp_path / 'legacy.db'}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE users (id INTEGER PRIMARY KEY, email VARCHAR(100))"))
    try:
        missing = missing_requirements(engine)
    finally:
        engine.dispose()

    assert "missing table: users" not in missing
    assert "missing column: users.first_name" in missing
    assert "missing column: users.updated_at" in missing
    assert "missing column: users.email" not in missing


def test_missing_requirements_empty_after_create_all(tmp_path):
    from sqlalchemy import create_engine
    from userdirectory.database.database import Base
    from userdirectory.database import models  # noqa: F401
    from userdirectory.database.migrate_runner import missing_requirements

    engine = create_engine(f"sqlite:///{tmp_path / 'current.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        assert missing_requirements(engine) == []
    finally:
        engine.dispose()

from database.db import db
from database.init import ALL_MODELS, apply_runtime_migrations, init_from_env, sqlite_database


def test_runtime_migration_adds_archive_columns(tmp_path):
    database = sqlite_database(str(tmp_path / "legacy.db"))
    with database.connection_context():
        database.execute_sql(
            "CREATE TABLE client (id INTEGER PRIMARY KEY, name VARCHAR(255) NOT NULL)"
        )
        database.execute_sql("INSERT INTO client (name) VALUES ('Acme')")

    apply_runtime_migrations(database)

    with database.connection_context():
        columns = {c.name for c in database.get_columns("client")}
        assert {"is_archived", "archived_at"} <= columns
        row = database.execute_sql("SELECT name, is_archived FROM client").fetchone()
    assert row[0] == "Acme"
    assert not row[1]


def test_runtime_migration_is_noop_without_table(tmp_path):
    database = sqlite_database(str(tmp_path / "empty.db"))
    apply_runtime_migrations(database)
    with database.connection_context():
        assert database.get_tables() == []


def test_runtime_migration_skips_current_schema(tmp_path):
    database = sqlite_database(str(tmp_path / "current.db"))
    with database.bind_ctx(ALL_MODELS):
        database.create_tables(ALL_MODELS)
        apply_runtime_migrations(database)
        with database.connection_context():
            columns = [c.name for c in database.get_columns("client")]
    assert columns.count("is_archived") == 1


def test_init_from_env_keeps_existing_database(in_memory_db):
    init_from_env("sqlite:///should-not-be-used.db")
    assert db.obj is in_memory_db


def test_migrate_main_creates_schema(tmp_path, monkeypatch):
    from database import migrate

    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setattr(migrate, "setup_logging", lambda settings: None)
    previous = getattr(db, "obj", None)
    db.initialize(None)
    try:
        assert migrate.main([f"sqlite:///{tmp_path / 'fresh.db'}"]) == 0
        with db.obj.connection_context():
            tables = set(db.obj.get_tables())
        assert {
            "client",
            "merge_lease",
            "census_upload",
            "info_request",
            "quote_status_change",
        } <= tables
    finally:
        if db.obj is not None:
            db.obj.close()
        db.initialize(previous)

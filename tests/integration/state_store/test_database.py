"""Integration tests for State Store database."""

import tempfile
from pathlib import Path

import pytest
from sqlalchemy import inspect, text

from examcell.state_store import StateStore
from examcell.state_store.database import Database


@pytest.fixture
def temp_db_path() -> str:
    """Create a temporary database path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        return f.name


@pytest.fixture
def database(temp_db_path: str):
    """Create a database instance with tables."""
    db = Database(temp_db_path)
    db.create_tables()
    yield db
    db.close()
    # Cleanup
    Path(temp_db_path).unlink(missing_ok=True)
    Path(f"{temp_db_path}-wal").unlink(missing_ok=True)
    Path(f"{temp_db_path}-shm").unlink(missing_ok=True)


@pytest.mark.integration
class TestDatabaseSetup:
    """Tests for database setup."""

    def test_database_creates_file(self, tmp_path: Path) -> None:
        """SQLite file and parent directories created at specified path."""
        path = tmp_path / "data" / "examcell.db"
        db = Database(str(path))
        db.create_tables()
        assert path.exists()
        db.close()

    def test_database_creates_tables(self, database: Database) -> None:
        tables = set(inspect(database.engine).get_table_names())
        assert {
            "users",
            "students",
            "teachers",
            "subjects",
            "marks",
            "queries",
            "bonafide_requests",
            "contact_messages",
            "revoked_tokens",
        } <= tables

    def test_database_wal_mode(self, database: Database) -> None:
        assert database.journal_mode() == "wal"

    def test_memory_database_is_not_wal(self) -> None:
        db = Database(":memory:")
        db.create_tables()
        assert db.journal_mode() == "memory"
        db.close()

    def test_foreign_keys_enforced(self, database: Database) -> None:
        with database.engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_session_scope_rolls_back(self, database: Database) -> None:
        with pytest.raises(RuntimeError), database.session_scope() as session:
            session.execute(
                text(
                    "INSERT INTO teachers (id, name, email, created_at) "
                    "VALUES ('t1', 'X', 'x@college.edu', CURRENT_TIMESTAMP)"
                )
            )
            raise RuntimeError("boom")

        with database.engine.connect() as conn:
            assert conn.execute(text("SELECT COUNT(*) FROM teachers")).scalar() == 0


@pytest.mark.integration
class TestPersistence:
    """Data written through one StateStore is visible to the next."""

    def test_reopen(self, temp_db_path: str) -> None:
        first = StateStore(temp_db_path)
        student = first.create_student("CS2021001", "Asha Rao", "asha@college.edu", 3)
        first.close()

        second = StateStore(temp_db_path)
        try:
            assert second.get_student(student.id).name == "Asha Rao"
        finally:
            second.close()

    def test_delete_student_cascades_in_database(self, temp_db_path: str) -> None:
        store = StateStore(temp_db_path)
        try:
            student = store.create_student("CS2021001", "Asha Rao", "asha@college.edu", 3)
            subject = store.create_subject(code="CS301", name="OS", semester=3, credits=4)
            store.upsert_mark(student.id, subject.id, 50, 50, 50)
            store.create_query(student.id, "OS", "Dr. X", "T", "D")
            store.create_bonafide_request(student.id, "Scholarship")

            store.delete_student(student.id)

            with store.database.engine.connect() as conn:
                for table in ("marks", "queries", "bonafide_requests"):
                    count = conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar()  # noqa: S608
                    assert count == 0, table
        finally:
            store.close()

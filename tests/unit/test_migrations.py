"""
Unit tests for the migration runner, with a mocked connection pool.
"""

from pathlib import Path
from unittest.mock import MagicMock

import psycopg
import pytest

from src.adapters.repository.postgres import MIGRATIONS_DIR, run_migrations


def mock_pool() -> tuple[MagicMock, MagicMock]:
    pool = MagicMock()
    conn = pool.connection.return_value.__enter__.return_value
    return pool, conn


class TestRunMigrations:
    def test_bundled_users_migration_exists(self) -> None:
        assert (MIGRATIONS_DIR / "001_create_users.sql").is_file()

    def test_runs_files_in_name_order(self, tmp_path: Path) -> None:
        (tmp_path / "002_b.sql").write_text("SELECT 2")
        (tmp_path / "001_a.sql").write_text("SELECT 1")
        (tmp_path / "notes.txt").write_text("ignored")
        pool, conn = mock_pool()

        run_migrations(pool, tmp_path)

        assert [c.args[0] for c in conn.execute.call_args_list] == ["SELECT 1", "SELECT 2"]

    def test_empty_directory_is_noop(self, tmp_path: Path) -> None:
        pool, conn = mock_pool()
        run_migrations(pool, tmp_path)
        conn.execute.assert_not_called()

    def test_failure_names_file(self, tmp_path: Path) -> None:
        (tmp_path / "001_bad.sql").write_text("NOT SQL")
        pool, conn = mock_pool()
        conn.execute.side_effect = psycopg.errors.SyntaxError("syntax error")

        with pytest.raises(RuntimeError, match="001_bad.sql"):
            run_migrations(pool, tmp_path)

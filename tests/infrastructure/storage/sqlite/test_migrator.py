"""Tests for the schema migrator."""

from pathlib import Path
from unittest.mock import patch

import aiosqlite
import pytest

from src.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    discover_migrations,
    get_applied_migrations,
    get_current_version,
    get_migration_status,
    initialize_database,
    main,
    verify_schema_integrity,
)

MIGRATIONS_DIR_PATH = "src.infrastructure.storage.sqlite.migrations.migrator.MIGRATIONS_DIR"

TRACKING_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    name TEXT,
    checksum TEXT,
    applied_at TEXT DEFAULT (datetime('now')),
    execution_time_ms INTEGER
);
"""


class TestMigrationInfo:
    def test_parses_version_and_name(self, tmp_path: Path):
        path = tmp_path / "v007_add_widgets.sql"
        path.write_text("SELECT 1;")

        info = MigrationInfo.from_file(path)
        assert info.version == "007"
        assert info.name == "add_widgets"
        assert len(info.checksum) == 16

    def test_checksum_tracks_content(self, tmp_path: Path):
        a = tmp_path / "v001_a.sql"
        b = tmp_path / "v002_b.sql"
        a.write_text("SELECT 1;")
        b.write_text("SELECT 2;")
        assert MigrationInfo.from_file(a).checksum != MigrationInfo.from_file(b).checksum

    @pytest.mark.parametrize("name", ["initial.sql", "v_initial.sql", "v001-initial.sql"])
    def test_invalid_filename(self, tmp_path: Path, name: str):
        path = tmp_path / name
        path.write_text("SELECT 1;")
        with pytest.raises(ValueError):
            MigrationInfo.from_file(path)


class TestDiscoverMigrations:
    def test_bundled_migrations_present(self):
        versions = [m.version for m in discover_migrations()]
        assert versions[0] == "001"
        assert versions == sorted(versions)

    def test_sorted_and_invalid_skipped(self, tmp_path: Path):
        (tmp_path / "v002_second.sql").write_text("SELECT 2;")
        (tmp_path / "v001_first.sql").write_text("SELECT 1;")
        (tmp_path / "notes.sql").write_text("SELECT 3;")

        with patch(MIGRATIONS_DIR_PATH, tmp_path):
            found = discover_migrations()
        assert [m.name for m in found] == ["first", "second"]


class TestInitializeDatabase:
    async def test_applies_initial_schema(self, temp_db_path: Path):
        results = await initialize_database(temp_db_path, create_backup_before=False)

        assert results and all(r.success for r in results)
        async with aiosqlite.connect(temp_db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
            assert set(REQUIRED_TABLES) <= tables
            assert await get_current_version(conn) == results[-1].version

    async def test_second_run_is_noop(self, temp_db_path: Path):
        await initialize_database(temp_db_path, create_backup_before=False)
        again = await initialize_database(temp_db_path, create_backup_before=False)
        assert again == []

    async def test_changed_checksum_stops(self, tmp_path: Path, temp_db_path: Path):
        (tmp_path / "v001_init.sql").write_text(TRACKING_TABLE_SQL)
        with patch(MIGRATIONS_DIR_PATH, tmp_path):
            await initialize_database(temp_db_path, create_backup_before=False)

            (tmp_path / "v001_init.sql").write_text(TRACKING_TABLE_SQL + "\n-- edited\n")
            (tmp_path / "v002_next.sql").write_text("CREATE TABLE widgets (id INTEGER);")
            results = await initialize_database(temp_db_path, create_backup_before=False)

        assert [(r.version, r.success) for r in results] == [("001", False)]
        assert "changed" in results[0].error
        async with aiosqlite.connect(temp_db_path) as conn:
            assert list((await get_applied_migrations(conn)).keys()) == ["001"]

    async def test_failed_migration_reported(self, tmp_path: Path, temp_db_path: Path):
        (tmp_path / "v001_init.sql").write_text(TRACKING_TABLE_SQL)
        (tmp_path / "v002_broken.sql").write_text("CREATE TABLE oops (;")
        (tmp_path / "v003_never.sql").write_text("CREATE TABLE never (id INTEGER);")

        with patch(MIGRATIONS_DIR_PATH, tmp_path):
            results = await initialize_database(temp_db_path, create_backup_before=False)

        assert [r.success for r in results] == [True, False]
        assert results[1].error

    async def test_failed_script_leaves_no_partial_ddl(self, tmp_path: Path, temp_db_path: Path):
        (tmp_path / "v001_init.sql").write_text(TRACKING_TABLE_SQL)
        (tmp_path / "v002_half.sql").write_text(
            "CREATE TABLE first_half (id INTEGER);\nCREATE TABLE oops (;"
        )

        with patch(MIGRATIONS_DIR_PATH, tmp_path):
            results = await initialize_database(temp_db_path, create_backup_before=False)

        assert [r.success for r in results] == [True, False]
        async with aiosqlite.connect(temp_db_path) as conn:
            cursor = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'first_half'"
            )
            assert await cursor.fetchone() is None
            assert list((await get_applied_migrations(conn)).keys()) == ["001"]

    async def test_backup_removed_after_success(self, tmp_path: Path, temp_db_path: Path):
        async with aiosqlite.connect(temp_db_path) as conn:
            await conn.execute("CREATE TABLE existing (id INTEGER)")
            await conn.commit()

        await initialize_database(temp_db_path, create_backup_before=True)
        assert list(tmp_path.glob("*.backup_*.db")) == []


class TestSchemaConstraints:
    async def test_stock_cannot_go_negative(self, migrated_db: Path):
        async with aiosqlite.connect(migrated_db) as conn:
            await conn.execute(
                "INSERT INTO products (id, sku, name, price_cents, stock_quantity) "
                "VALUES ('P1', 'S1', 'Kettle', 100, 1)"
            )
            with pytest.raises(aiosqlite.IntegrityError):
                await conn.execute("UPDATE products SET stock_quantity = -1 WHERE id = 'P1'")

    async def test_invoice_number_unique(self, migrated_db: Path):
        insert = (
            "INSERT INTO invoices (invoice_number, customer_name, subtotal_cents, "
            "tax_rate, tax_cents, total_cents, issued_at) "
            "VALUES ('INV-202610-0001', 'x', 100, '0.18', 18, 118, '2026-10-19')"
        )
        async with aiosqlite.connect(migrated_db) as conn:
            await conn.execute(insert)
            with pytest.raises(aiosqlite.IntegrityError):
                await conn.execute(insert)

    async def test_total_must_equal_subtotal_plus_tax(self, migrated_db: Path):
        async with aiosqlite.connect(migrated_db) as conn:
            with pytest.raises(aiosqlite.IntegrityError):
                await conn.execute(
                    "INSERT INTO invoices (invoice_number, customer_name, subtotal_cents, "
                    "tax_rate, tax_cents, total_cents, issued_at) "
                    "VALUES ('INV-202610-0001', 'x', 100, '0.18', 18, 119, '2026-10-19')"
                )


class TestStatusAndVerify:
    async def test_status_for_missing_database(self, tmp_path: Path):
        status = await get_migration_status(tmp_path / "absent.db")
        assert status["exists"] is False
        assert "001" in status["pending_migrations"]

    async def test_status_after_migration(self, migrated_db: Path):
        status = await get_migration_status(migrated_db)
        assert status["exists"] is True
        assert status["pending_migrations"] == []
        assert "001" in status["applied_migrations"]

    async def test_verify_passes_on_fresh_schema(self, migrated_db: Path):
        checks = await verify_schema_integrity(migrated_db)
        assert {c["check"]: c["status"] for c in checks} == {
            "foreign_keys": "PASS",
            "integrity": "PASS",
            "required_tables": "PASS",
        }


class TestCommandLine:
    def _run(self, *argv: str) -> int:
        with patch("sys.argv", ["tillbook-migrate", *argv]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        return exc_info.value.code

    def test_upgrade_exits_zero_when_current(self, temp_db_path: Path, capsys):
        assert self._run("upgrade", "--db-path", str(temp_db_path), "--no-backup") == 0
        assert self._run("upgrade", "--db-path", str(temp_db_path), "--no-backup") == 0
        assert "Schema is up to date" in capsys.readouterr().out

    def test_upgrade_exits_nonzero_on_changed_migration(
        self, tmp_path: Path, temp_db_path: Path, capsys
    ):
        (tmp_path / "v001_init.sql").write_text(TRACKING_TABLE_SQL)
        with patch(MIGRATIONS_DIR_PATH, tmp_path):
            assert self._run("--db-path", str(temp_db_path), "--no-backup") == 0
            (tmp_path / "v001_init.sql").write_text(TRACKING_TABLE_SQL + "\n-- edited\n")
            assert self._run("--db-path", str(temp_db_path), "--no-backup") == 1

        output = capsys.readouterr().out
        assert "FAILED" in output
        assert output.count("Schema is up to date") == 0

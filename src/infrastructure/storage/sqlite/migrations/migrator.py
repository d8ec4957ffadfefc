"""
Versioned SQL schema migrations.

Migration files live next to this module and are named vNNN_description.sql.
Each applied file is recorded in schema_migrations together with a checksum;
an applied file whose checksum later changes is reported as a failed
result and nothing else is applied. Before upgrading an existing database
a file copy is taken and restored if the upgrade raises.
"""

import asyncio
import hashlib
import re
import shutil
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

# Tables the application cannot run without
REQUIRED_TABLES = [
    "schema_migrations",
    "products",
    "invoices",
    "invoice_line_items",
]

_FILENAME_RE = re.compile(r"^v(?P<version>\d+)_(?P<name>\w+)\.sql$")


@dataclass(frozen=True)
class MigrationInfo:
    """One migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME_RE.match(path.name)
        if match is None:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(
            version=match["version"],
            name=match["name"],
            path=path,
            checksum=digest[:16],
        )

    def read_sql(self) -> str:
        return self.path.read_text(encoding="utf-8")


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


@dataclass
class UpgradePlan:
    """Which migrations are already in, which still need to run."""

    applied: dict[str, str] = field(default_factory=dict)
    pending: list[MigrationInfo] = field(default_factory=list)
    drifted: list[MigrationInfo] = field(default_factory=list)


def discover_migrations() -> list[MigrationInfo]:
    """All well-named migration files, lowest version first."""
    found = []
    for path in MIGRATIONS_DIR.glob("*.sql"):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError:
            logger.warning("skipping_invalid_migration", path=str(path))
    return sorted(found, key=lambda m: int(m.version))


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied version -> checksum; empty before the first migration."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        return {}
    return {version: checksum for version, checksum in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied, key=int) if applied else None


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside before touching its schema."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


class SchemaMigrator:
    """Brings one SQLite file up to the latest schema version."""

    def __init__(self, db_path: Path):
        self.db_path = db_path

    async def plan(self, conn: aiosqlite.Connection) -> UpgradePlan:
        plan = UpgradePlan(applied=await get_applied_migrations(conn))
        for migration in discover_migrations():
            recorded = plan.applied.get(migration.version)
            if recorded is None:
                plan.pending.append(migration)
            elif recorded != migration.checksum:
                plan.drifted.append(migration)
        return plan

    async def apply(
        self, conn: aiosqlite.Connection, migration: MigrationInfo
    ) -> MigrationResult:
        """
        Run one migration script and record it in a single transaction.

        executescript commits any open transaction before running, so the
        script is prefixed with BEGIN; a failing statement then leaves the
        earlier DDL of the same script rolled back.
        """
        logger.info("applying_migration", version=migration.version, name=migration.name)
        started = time.perf_counter()

        def elapsed_ms() -> int:
            return int((time.perf_counter() - started) * 1000)

        try:
            await conn.executescript("BEGIN;\n" + migration.read_sql())
            await conn.execute(
                "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms) "
                "VALUES (?, ?, ?, ?)",
                (migration.version, migration.name, migration.checksum, elapsed_ms()),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.rollback()
            logger.error("migration_failed", version=migration.version, error=str(e))
            return MigrationResult(
                migration.version, migration.name, False, elapsed_ms(), error=str(e)
            )

        logger.info(
            "migration_applied",
            version=migration.version,
            execution_time_ms=elapsed_ms(),
        )
        return MigrationResult(migration.version, migration.name, True, elapsed_ms())

    async def upgrade(self) -> list[MigrationResult]:
        """Apply pending migrations in order, stopping at the first failure."""
        results: list[MigrationResult] = []
        async with aiosqlite.connect(self.db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")

            plan = await self.plan(conn)
            if plan.drifted:
                logger.error(
                    "migration_checksum_changed",
                    versions=[m.version for m in plan.drifted],
                )
                return [
                    MigrationResult(
                        m.version,
                        m.name,
                        False,
                        0,
                        error="Applied migration file has changed since it was applied",
                    )
                    for m in plan.drifted
                ]

            for migration in plan.pending:
                result = await self.apply(conn, migration)
                results.append(result)
                if not result.success:
                    break

                cursor = await conn.execute("PRAGMA foreign_key_check")
                violations = await cursor.fetchall()
                if violations:
                    logger.error(
                        "foreign_key_violations_after_migration",
                        version=migration.version,
                        count=len(violations),
                    )
                    break
        return results


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply all pending migrations to the database.

    Args:
        db_path: Database file (default from settings)
        create_backup_before: Copy an existing file aside first

    Returns:
        One result per migration attempted
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = create_backup(db_path) if create_backup_before and db_path.exists() else None

    try:
        results = await SchemaMigrator(db_path).upgrade()
    except Exception:
        logger.exception("database_initialization_failed", db_path=str(db_path))
        if backup_path is not None:
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None and all(r.success for r in results):
        backup_path.unlink()
    return results


# Name used by the application lifespan
run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Current version plus applied and pending migration versions."""
    db_path = db_path or get_settings().storage.db_path
    known = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in known],
            "total_migrations": len(known),
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)
    return {
        "exists": True,
        "current_version": max(applied, key=int) if applied else None,
        "applied_migrations": sorted(applied, key=int),
        "pending_migrations": [m.version for m in known if m.version not in applied],
        "total_migrations": len(known),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """Foreign key, page integrity and required-table checks."""
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        fk_violations = len(await cursor.fetchall())

        cursor = await conn.execute("PRAGMA integrity_check")
        (integrity,) = await cursor.fetchone()

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {name for (name,) in await cursor.fetchall()}

    missing = [t for t in REQUIRED_TABLES if t not in tables]
    return [
        {
            "check": "foreign_keys",
            "status": "PASS" if fk_violations == 0 else "FAIL",
            "violations": fk_violations,
        },
        {
            "check": "integrity",
            "status": "PASS" if integrity == "ok" else "FAIL",
            "result": integrity,
        },
        {
            "check": "required_tables",
            "status": "PASS" if not missing else "FAIL",
            "missing": missing,
        },
    ]


def main() -> None:
    """tillbook-migrate [upgrade|status|verify] [--db-path PATH] [--no-backup]"""
    import argparse

    parser = argparse.ArgumentParser(description="Tillbook schema migrations")
    parser.add_argument(
        "command",
        nargs="?",
        default="upgrade",
        choices=["upgrade", "status", "verify"],
    )
    parser.add_argument("--db-path", type=Path, help="Database file (default from settings)")
    parser.add_argument("--no-backup", action="store_true", help="Skip the pre-upgrade copy")
    args = parser.parse_args()

    async def run() -> int:
        if args.command == "status":
            status = await get_migration_status(args.db_path)
            for key, value in status.items():
                print(f"{key}: {value}")
            return 0

        if args.command == "verify":
            checks = await verify_schema_integrity(args.db_path)
            for check in checks:
                extra = {k: v for k, v in check.items() if k not in ("check", "status")}
                print(f"[{check['status']}] {check['check']} {extra}")
            return 0 if all(c["status"] == "PASS" for c in checks) else 1

        results = await initialize_database(args.db_path, create_backup_before=not args.no_backup)
        if not results:
            print("Schema is up to date")
        for r in results:
            outcome = "OK" if r.success else f"FAILED: {r.error}"
            print(f"v{r.version} {r.name} ({r.execution_time_ms}ms) {outcome}")
        return 0 if all(r.success for r in results) else 1

    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()

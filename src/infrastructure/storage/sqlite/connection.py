"""
Pooled aiosqlite connections for the catalog and invoice stores.

Every pooled connection is opened in autocommit mode. Writes go through
ConnectionPool.transaction(), which issues BEGIN IMMEDIATE: SQLite grants
the database write lock up front, so two invoice creations touching the
same stock rows run one after the other rather than interleaving their
reads and decrements.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings

logger = get_logger(__name__)

# Applied to every new connection; busy_timeout is added per pool
CONNECTION_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


async def open_connection(db_path: Path, busy_timeout: int) -> aiosqlite.Connection:
    """Open one autocommit connection with row access by column name."""
    conn = await aiosqlite.connect(db_path, isolation_level=None)
    for pragma in CONNECTION_PRAGMAS:
        await conn.execute(pragma)
    await conn.execute(f"PRAGMA busy_timeout={int(busy_timeout)}")
    conn.row_factory = aiosqlite.Row
    return conn


class ConnectionPool:
    """Fixed-size set of connections handed out through a queue."""

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._pool: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Open pool_size connections; repeated calls are no-ops."""
        async with self._lock:
            if self._initialized:
                return
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            while len(self._connections) < self.pool_size:
                conn = await open_connection(self.db_path, self.busy_timeout)
                self._connections.append(conn)
                self._pool.put_nowait(conn)

            self._initialized = True
            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection, waiting while all of them are in use."""
        if not self._initialized:
            await self.initialize()

        conn = await self._pool.get()
        try:
            yield conn
        finally:
            self._pool.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection holding the write lock.

        The body's changes are committed when it exits normally. On any
        exception, cancellation included, they are rolled back before the
        connection goes back to the pool.
        """
        async with self.acquire() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            committed = False
            try:
                yield conn
                await conn.commit()
                committed = True
            finally:
                if not committed and conn.in_transaction:
                    await conn.rollback()

    async def close(self) -> None:
        async with self._lock:
            while self._connections:
                await self._connections.pop().close()
            self._pool = asyncio.Queue(maxsize=self.pool_size)
            self._initialized = False
        logger.info("connection_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Process-wide pool, built from storage settings on first use."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    pool, _pool = _pool, None
    if pool is not None:
        await pool.close()


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    """Autocommit connection for reads."""
    async with (await get_pool()).acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    """Connection inside BEGIN IMMEDIATE; commits or rolls back on exit."""
    async with (await get_pool()).transaction() as conn:
        yield conn

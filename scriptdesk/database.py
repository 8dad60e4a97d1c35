"""
StorageEngine: owns the scripts database file.

Usage::

    async with StorageEngine("sqlite+aiosqlite:///./movie_scripts.db") as storage:
        outcome = await storage.execute(insert(Script).values(...))
        rows = await storage.query(select(Script.id))

Every statement, read or write, is queued and run by one worker task, so
statements execute in exactly the order they were submitted. Each statement
gets its own transaction.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy import inspect, text
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from scriptdesk.errors import StorageFailure
from scriptdesk.schemas import SchemaGeneration

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def normalize_url(url: str) -> str:
    # Helper to point plain sqlite urls at the async driver
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


def _failure_message(exc: BaseException) -> str:
    # Prefer the driver's own text ("NOT NULL constraint failed: ...")
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


@dataclass(frozen=True)
class ExecuteOutcome:
    rows_affected: int
    inserted_id: Optional[int] = None


_Job = Callable[[AsyncConnection], Awaitable[Any]]


class StorageEngine:
    def __init__(self, url: str, echo: bool = False, upgrade_legacy_schema: bool = False) -> None:
        self.url = normalize_url(url)
        self.echo = echo
        self.upgrade_legacy_schema = upgrade_legacy_schema
        self.generation: Optional[SchemaGeneration] = None
        self._engine: Optional[AsyncEngine] = None
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None

    @property
    def is_open(self) -> bool:
        return self._worker is not None

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def open(self) -> SchemaGeneration:
        """Create the schema if needed and start the statement worker."""
        if self.is_open:
            raise RuntimeError("StorageEngine is already open")

        # Register the table on Base.metadata
        from scriptdesk import models  # noqa: F401

        self._engine = create_async_engine(self.url, echo=self.echo)
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
                self.generation = await conn.run_sync(self._resolve_generation)
        except (SQLAlchemyError, OSError) as exc:
            await self._engine.dispose()
            self._engine = None
            logger.error(f"Could not open database {self.url}: {exc}")
            raise StorageFailure(_failure_message(exc)) from exc

        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._drain(self._queue), name="storage-worker")
        logger.info(f"Opened database {self.url} (schema: {self.generation.value})")
        return self.generation

    async def close(self) -> None:
        """Finish every queued statement, then release the database file."""
        if not self.is_open:
            return
        # Detach first: from here on _submit refuses new statements
        queue, worker = self._queue, self._worker
        self._queue = None
        self._worker = None
        queue.put_nowait(None)
        await worker
        await self._engine.dispose()
        self._engine = None
        logger.info(f"Closed database {self.url}")

    async def __aenter__(self) -> "StorageEngine":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _resolve_generation(self, sync_conn) -> SchemaGeneration:
        columns = {column["name"] for column in inspect(sync_conn).get_columns("scripts")}
        if "title" in columns:
            return SchemaGeneration.TITLED
        if self.upgrade_legacy_schema:
            from scriptdesk.migrations import add_script_title
            add_script_title(sync_conn)
            return SchemaGeneration.TITLED
        logger.warning("scripts table has no title column; running untitled")
        return SchemaGeneration.UNTITLED

    # ── Statements ────────────────────────────────────────────────────────

    async def execute(self, statement, params: Optional[dict] = None) -> ExecuteOutcome:
        """Run a write statement; report affected rows and the new primary key."""
        statement = _as_executable(statement)

        async def job(conn: AsyncConnection) -> ExecuteOutcome:
            result = await conn.execute(statement, params)
            inserted_id = None
            if result.is_insert and result.inserted_primary_key:
                inserted_id = result.inserted_primary_key[0]
            elif _is_textual_insert(statement):
                inserted_id = result.lastrowid
            return ExecuteOutcome(rows_affected=result.rowcount, inserted_id=inserted_id)

        return await self._submit(job)

    async def query(self, statement, params: Optional[dict] = None) -> list[dict]:
        """Run a read statement; rows come back as plain dicts."""
        statement = _as_executable(statement)

        async def job(conn: AsyncConnection) -> list[dict]:
            result = await conn.execute(statement, params)
            return [dict(row) for row in result.mappings()]

        return await self._submit(job)

    async def _submit(self, job: _Job):
        if not self.is_open:
            raise StorageFailure("database is not open")
        future = asyncio.get_running_loop().create_future()
        # put_nowait: nothing can run between the caller's turn and its slot in the queue
        self._queue.put_nowait((job, future))
        return await future

    async def _drain(self, queue: asyncio.Queue) -> None:
        while True:
            item = await queue.get()
            if item is None:
                break
            job, future = item
            try:
                async with self._engine.begin() as conn:
                    result = await job(conn)
            except (SQLAlchemyError, OSError) as exc:
                logger.error(f"Statement failed: {exc}")
                if not future.done():
                    future.set_exception(StorageFailure(_failure_message(exc)))
            except Exception as exc:
                if not future.done():
                    future.set_exception(exc)
            else:
                if not future.done():
                    future.set_result(result)


def _as_executable(statement):
    if isinstance(statement, str):
        return text(statement)
    return statement


def _is_textual_insert(statement) -> bool:
    return isinstance(statement, TextClause) and statement.text.lstrip().upper().startswith(("INSERT", "REPLACE"))

"""JSON-file Unit of Work - per-file locks, load on enter, save dirty indexes on commit."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from doclib.application.ports import UnitOfWorkFactory
from doclib.application.ports.repositories import (
    LibraryIndexRepository,
    UsageIndexRepository,
)
from doclib.domain.entities import LibraryIndex, UsageIndex


class IndexLocks:
    """One asyncio.Lock per index file, owned by the composition root."""

    def __init__(self) -> None:
        self._locks: dict[Path, asyncio.Lock] = {}

    def for_path(self, path: Path) -> asyncio.Lock:
        key = Path(path).resolve()
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock


class JsonUnitOfWork:
    """Both indexes loaded under their locks; nothing is written until commit."""

    def __init__(
        self,
        library_repo: LibraryIndexRepository,
        usage_repo: UsageIndexRepository,
    ) -> None:
        self._library_repo = library_repo
        self._usage_repo = usage_repo
        self._library: LibraryIndex | None = None
        self._usage: UsageIndex | None = None

    async def __aenter__(self) -> "JsonUnitOfWork":
        self._library = await asyncio.to_thread(self._library_repo.load)
        self._usage = await asyncio.to_thread(self._usage_repo.load)
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if exc_type:
            await self.rollback()

    @property
    def library(self) -> LibraryIndex:
        return self._library

    @property
    def usage(self) -> UsageIndex:
        return self._usage

    async def commit(self) -> None:
        if self._library is not None and self._library.dirty:
            await asyncio.to_thread(self._library_repo.save, self._library)
        if self._usage is not None and self._usage.dirty:
            await asyncio.to_thread(self._usage_repo.save, self._usage)

    async def rollback(self) -> None:
        self._library = None
        self._usage = None


def create_uow_factory(
    library_repo: LibraryIndexRepository,
    usage_repo: UsageIndexRepository,
    locks: IndexLocks,
) -> UnitOfWorkFactory:
    """Create UnitOfWork factory (async context manager)."""
    library_lock = locks.for_path(library_repo.path)
    usage_lock = locks.for_path(usage_repo.path)

    @asynccontextmanager
    async def factory() -> AsyncIterator[JsonUnitOfWork]:
        # Fixed acquisition order: library, then usage.
        async with library_lock, usage_lock:
            uow = JsonUnitOfWork(library_repo, usage_repo)
            async with uow:
                try:
                    yield uow
                    await uow.commit()
                except BaseException:
                    await uow.rollback()
                    raise

    return factory

"""Unit of Work port - serialized load/mutate/save of both indexes."""

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from doclib.domain.entities import LibraryIndex, UsageIndex


class UnitOfWork(Protocol):
    """Holds both index locks; saves dirty indexes on commit."""

    @property
    def library(self) -> LibraryIndex: ...

    @property
    def usage(self) -> UsageIndex: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances."""

    def __call__(self) -> AbstractAsyncContextManager[UnitOfWork]: ...

"""Scoped transactions over an async SQLAlchemy session."""

from __future__ import annotations

from types import TracebackType

from sqlalchemy.ext.asyncio import AsyncSession


class TransactionScope:
    """One atomic unit of work.

    Writes issued inside the ``async with`` block land together when
    ``commit()`` is awaited. Leaving the block any other way (early return,
    exception) rolls the session back.
    """

    def __init__(self, session: AsyncSession):
        self._session = session
        self._committed = False

    @property
    def committed(self) -> bool:
        return self._committed

    async def commit(self) -> None:
        if self._committed:
            raise RuntimeError("Transaction already committed")
        await self._session.commit()
        self._committed = True

    async def __aenter__(self) -> TransactionScope:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if not self._committed:
            await self._session.rollback()


class UnitOfWork:
    """Hands out transaction scopes bound to a single session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def begin(self) -> TransactionScope:
        """Open a transaction scope.

        Usage:
            async with uow.begin() as tx:
                ...
                await tx.commit()
        """
        return TransactionScope(self.session)

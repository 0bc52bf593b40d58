from __future__ import annotations

from types import TracebackType

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.domain.errors import TransactionFailure

logger = structlog.get_logger()


class UnitOfWork:
    """Single transaction boundary over an ``AsyncSession``.

    Commits when the block exits cleanly and rolls back on any exception.
    Storage faults (including one raised by the final commit) surface as
    ``TransactionFailure``; domain exceptions raised inside the block propagate
    unchanged after the rollback.
    """

    def __init__(self, session: AsyncSession, *, name: str = "uow") -> None:
        self.session = session
        self.name = name

    async def __aenter__(self) -> UnitOfWork:
        logger.debug("uow_enter", uow=self.name)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is not None:
            await self.rollback()
            logger.debug("uow_exit", uow=self.name, exc_type=exc_type.__name__ if exc_type else None)
            if isinstance(exc, SQLAlchemyError):
                logger.error("uow_storage_failure", uow=self.name, error=str(exc))
                raise TransactionFailure(f"{self.name} could not be completed") from exc
            return

        try:
            await self.commit()
        except SQLAlchemyError as commit_exc:
            await self.rollback()
            logger.error("uow_commit_failed", uow=self.name, error=str(commit_exc))
            raise TransactionFailure(f"{self.name} could not be completed") from commit_exc
        logger.debug("uow_exit", uow=self.name, exc_type=None)

    async def flush(self) -> None:
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()
        logger.debug("uow_commit", uow=self.name)

    async def rollback(self) -> None:
        await self.session.rollback()
        logger.debug("uow_rollback", uow=self.name)

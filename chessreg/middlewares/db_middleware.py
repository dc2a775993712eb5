"""
Database session middleware.

Opens one AsyncSession per update and injects it into the handler data under
key "session". The player store commits its own writes, so whatever is still
pending when the handler returns belongs to a failed path and is rolled back.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chessreg.models.base import AsyncSessionFactory

logger = logging.getLogger(__name__)


class DatabaseMiddleware(BaseMiddleware):

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None) -> None:
        self._session_factory = session_factory or AsyncSessionFactory

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        async with self._session_factory() as session:
            data["session"] = session
            try:
                return await handler(event, data)
            finally:
                if session.new or session.dirty or session.deleted:
                    logger.warning("Discarding uncommitted changes left by a handler")
                if session.in_transaction():
                    await session.rollback()

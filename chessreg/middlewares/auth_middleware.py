"""
Admin session middleware.

The roster panel is gated by one shared password. Once it is entered, the
chat's FSM storage carries an "admin_authenticated" flag until /logout, so the
session lives exactly as long as the bot's FSM storage does. Attaches
`is_admin: bool` to handler data for all updates; the IsAdmin filter (below)
restricts admin routers.

This is a UI gate, not a security boundary.
"""
import secrets
from typing import Any, Awaitable, Callable, Dict, Optional

from aiogram import BaseMiddleware
from aiogram.filters import BaseFilter
from aiogram.fsm.context import FSMContext
from aiogram.types import TelegramObject

from chessreg.config import settings

ADMIN_FLAG = "admin_authenticated"
ROSTER_VIEW_KEY = "roster_view"

# Data keys that survive a flow reset (main menu, cancel, finished registration)
_SESSION_KEYS = (ADMIN_FLAG, ROSTER_VIEW_KEY)


def check_password(candidate: Optional[str]) -> bool:
    if not candidate or not settings.ADMIN_PASSWORD:
        return False
    return secrets.compare_digest(candidate.encode(), settings.ADMIN_PASSWORD.encode())


async def is_admin_session(state: Optional[FSMContext]) -> bool:
    if state is None:
        return False
    data = await state.get_data()
    return bool(data.get(ADMIN_FLAG))


async def start_admin_session(state: FSMContext) -> None:
    await state.set_state(None)
    await state.update_data({ADMIN_FLAG: True})


async def end_admin_session(state: FSMContext) -> None:
    await state.clear()


async def reset_flow(state: FSMContext) -> None:
    """Leave any FSM step and drop its answers, keeping the admin session."""
    data = await state.get_data()
    await state.set_state(None)
    await state.set_data({k: data[k] for k in _SESSION_KEYS if k in data})


class AdminMiddleware(BaseMiddleware):
    """
    Injects `is_admin` flag into data dict.
    Applied globally — individual routers restrict access via filters.
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        data["is_admin"] = await is_admin_session(data.get("state"))
        return await handler(event, data)


# ── Reusable filter ──────────────────────────────────────────────────────────

class IsAdmin(BaseFilter):
    """
    Use on admin routers/handlers to restrict access to a signed-in session.
    Rejected admin buttons fall through to the fallback router, which tells
    the user the session has expired.
    """

    async def __call__(self, event: TelegramObject, is_admin: bool = False) -> bool:
        return is_admin

"""
NCC Chess Tournament — registration bot.

Entry point: wires the dispatcher (middlewares, routers, error handler),
publishes the command menu and polls until SIGINT / SIGTERM.
"""
import asyncio
import logging
import signal
import sys
from contextlib import suppress

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError
from aiogram.fsm.storage.memory import MemoryStorage, SimpleEventIsolation
from aiogram.types import BotCommand, ErrorEvent
from sqlalchemy.exc import SQLAlchemyError

from chessreg.config import settings
from chessreg.middlewares import AdminMiddleware, DatabaseMiddleware, RateLimitMiddleware
from chessreg.models.base import Base, engine

# ── Handlers ──────────────────────────────────────────────────────────────────
from chessreg.handlers.common import router as common_router
from chessreg.handlers.registration import router as registration_router
from chessreg.handlers.admin.auth import router as admin_auth_router
from chessreg.handlers.admin.roster import router as admin_roster_router
from chessreg.handlers.admin.export import router as admin_export_router
from chessreg.handlers.fallback import router as fallback_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

BOT_COMMANDS = [
    BotCommand(command="start",    description="Tournament information"),
    BotCommand(command="register", description="Register a player"),
    BotCommand(command="admin",    description="Organiser roster"),
    BotCommand(command="logout",   description="Leave the organiser roster"),
    BotCommand(command="help",     description="List commands"),
]


def _public_db_url() -> str:
    """DATABASE_URL without the credentials part."""
    return settings.DATABASE_URL.split("@")[-1]


async def create_tables() -> None:
    """Create the registrations table if it does not exist yet."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except (SQLAlchemyError, OSError) as e:
        logger.critical("❌ Cannot connect to database %s: %s", _public_db_url(), e)
        logger.critical("   → Locally: DATABASE_URL=sqlite+aiosqlite:///./chessreg.db")
        sys.exit(1)
    logger.info("Database ready at %s", _public_db_url())


async def on_error(event: ErrorEvent) -> None:
    """Log every unhandled error and make sure no button spinner is left hanging."""
    logger.exception("Unhandled error: %s", event.exception)
    query = event.update.callback_query
    if query is None:
        return
    try:
        await query.answer("⚠️ Something went wrong. Please try again.", show_alert=True)
    except TelegramAPIError:
        logger.debug("Callback already answered or expired")


def build_dispatcher() -> Dispatcher:
    # Updates from one chat are handled one at a time
    dp = Dispatcher(storage=MemoryStorage(), events_isolation=SimpleEventIsolation())
    dp.errors.register(on_error)

    # ── Global middlewares (outermost first) ─────────────────────────────────
    dp.update.middleware(RateLimitMiddleware(settings.RATE_LIMIT, settings.RATE_PERIOD))
    dp.update.middleware(DatabaseMiddleware())
    dp.update.middleware(AdminMiddleware())

    # ── Routers: order is handler priority ──────────────────────────────────
    dp.include_routers(
        common_router,
        admin_auth_router,        # /admin and /logout win over registration steps
        registration_router,
        admin_roster_router,
        admin_export_router,
        fallback_router,          # !! last — the "page not found" catch-all !!
    )
    return dp


async def main() -> None:
    logger.info("Starting %s registration bot…", settings.TOURNAMENT_NAME)
    await create_tables()

    bot = Bot(
        token=settings.BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.MARKDOWN),
    )
    dp = build_dispatcher()

    try:
        await bot.set_my_commands(BOT_COMMANDS)
    except TelegramAPIError as exc:
        logger.warning("Could not publish the command menu: %s", exc)

    polling = asyncio.create_task(
        dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types(), handle_signals=False)
    )

    # SIGTERM from Docker / PaaS stops polling the same way Ctrl+C does
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        with suppress(NotImplementedError):     # Windows
            loop.add_signal_handler(sig, polling.cancel)

    logger.info("Bot is running. Press Ctrl+C to stop.")
    try:
        await polling
    except asyncio.CancelledError:
        logger.info("Received shutdown signal, stopping…")
    finally:
        await bot.session.close()
        await engine.dispose()
        logger.info("Shutdown complete.")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

# src/taskpad/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def _greeting(state: AppState) -> str:
    app_name = str(getattr(state.settings, "app_name", "taskpad"))
    settings = await state.app_settings.get()
    if settings is not None and settings.first_launch:
        await state.app_settings.set_launched()
        return f"Welcome to {app_name}! Add your first task with /add <title>."

    stats = await state.tasks.stats()
    if stats is None:
        return f"{app_name}: task storage could not be read."
    return f"{app_name}: {stats.today} due today, {stats.overdue} overdue, {stats.pending} pending."


async def run_console_loop(state: AppState) -> None:
    """
    Read lines from stdin and route them through the command registry.

    Plain text (no leading slash) is treated as /add <text>.
    """
    logger.info("Console connector started.")
    _print_ts(await _greeting(state))
    _print_ts("Type /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        line = user_input if user_input.startswith("/") else f"/add {user_input}"
        try:
            response = await command_registry.handle(state, line)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            _print_ts(response)

    logger.info("Console connector finished.")

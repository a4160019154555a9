"""Session wiring for the CLI.

Centralizes creation of the key-value store and chat session from settings.
Hides configuration details from command implementations.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from rich.console import Console

from ..chat import ChatSession, Notification
from ..settings import Settings
from ..storage import ConversationStore, create_key_value_store

# Default console for output
_console = Console()

_LEVEL_STYLES = {"error": "red", "success": "green", "info": "dim"}


def print_notification(notification: Notification, console: Console | None = None) -> None:
    """Render a session notification on the console."""
    con = console or _console
    style = _LEVEL_STYLES.get(notification.level, "yellow")
    con.print(f"[{style}]{notification.message}[/{style}]")


def get_store(settings: Settings) -> ConversationStore:
    """Create the conversation store for the configured backend.

    Returns:
        ConversationStore over an unconnected key-value backend
    """
    if settings.store_backend == "sqlite":
        kv = create_key_value_store("sqlite", path=settings.db_path)
    else:
        kv = create_key_value_store(settings.store_backend)
    return ConversationStore(kv)


@asynccontextmanager
async def open_session(
    settings: Settings,
    console: Console | None = None,
    **session_kwargs,
) -> AsyncIterator[ChatSession]:
    """Connect storage, load a session and clean both up afterwards."""
    con = console or _console
    store = get_store(settings)
    await store.kv.connect()
    session_kwargs.setdefault("on_notify", lambda n: print_notification(n, con))
    session = ChatSession(store, system_prompt=settings.system_prompt, **session_kwargs)
    try:
        await session.load()
        yield session
    finally:
        await session.close()
        await store.kv.disconnect()

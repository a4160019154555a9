"""Main CLI application using Typer."""
import asyncio
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..chat import ChatSession, transcript
from ..llm import PROVIDERS, BaseProviderConfig, default_config, is_valid_config
from ..logging import configure_logging
from ..settings import Settings, load_settings
from ..storage import Conversation, export_filename
from .providers import open_session

# Create Typer app
app = typer.Typer(
    name="polychat",
    help="Chat with Azure OpenAI, OpenAI, Claude, Gemini and Groq from the terminal",
    no_args_is_help=True,
    add_completion=True,
)
config_app = typer.Typer(help="Show or change the provider configuration", no_args_is_help=True)
app.add_typer(config_app, name="config")

# Console for rich output
console = Console()


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj


def _run(coro: Any) -> Any:
    return asyncio.run(coro)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Load settings and configure logging for every command."""
    settings = load_settings()
    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = settings


class StreamView:
    """Renders the assistant reply of each published snapshot.

    Every snapshot replaces what is on screen; chunks are never appended.
    """

    def __init__(self) -> None:
        self.live: Live | None = None

    def __call__(self, conversation: Conversation) -> None:
        if self.live is None:
            return
        last = conversation.messages[-1] if conversation.messages else None
        if last is not None and last.role == "assistant":
            self.live.update(Markdown(last.content or "..."))
        else:
            self.live.update(Text(""))


async def _send_turn(session: ChatSession, view: StreamView, text: str) -> bool:
    with Live(Text(""), console=console, refresh_per_second=12, transient=False) as live:
        view.live = live
        try:
            result = await session.send_message(text)
        finally:
            view.live = None
    return result is not None


def _mask(value: str) -> str:
    if not value:
        return "[dim]<not set>[/dim]"
    return f"{'*' * 8}{value[-4:]}" if len(value) > 4 else "*" * len(value)


def _config_table(config: BaseProviderConfig) -> Table:
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold cyan", width=18)
    table.add_column("Value")
    for key, value in config.to_wire().items():
        if key == "apiKey":
            table.add_row(key, _mask(value))
        else:
            table.add_row(key, str(value))
    valid = is_valid_config(config)
    table.add_row("status", "[green]ready[/green]" if valid else "[yellow]incomplete[/yellow]")
    return table


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Show the current provider configuration."""
    async def _show():
        async with open_session(_settings(ctx), console) as session:
            console.print(_config_table(session.config))

    _run(_show())


@config_app.command("set")
def config_set(
    ctx: typer.Context,
    provider: str | None = typer.Option(None, "--provider", "-p", help=f"One of: {', '.join(PROVIDERS)}"),
    api_key: str | None = typer.Option(None, "--api-key", help="Provider API key"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model name"),
    endpoint: str | None = typer.Option(None, "--endpoint", help="Azure resource endpoint"),
    deployment_name: str | None = typer.Option(None, "--deployment", help="Azure deployment name"),
    api_version: str | None = typer.Option(None, "--api-version", help="Azure API version"),
    temperature: float | None = typer.Option(None, "--temperature", "-t", min=0.0, max=2.0),
    max_tokens: int | None = typer.Option(None, "--max-tokens", min=1),
    top_p: float | None = typer.Option(None, "--top-p"),
    top_k: int | None = typer.Option(None, "--top-k"),
    frequency_penalty: float | None = typer.Option(None, "--frequency-penalty"),
    presence_penalty: float | None = typer.Option(None, "--presence-penalty"),
    stop: list[str] | None = typer.Option(None, "--stop", help="Stop sequence (repeatable, Groq)"),
):
    """Update the provider configuration.

    Switching provider starts from that provider's defaults, keeping the API
    key, temperature and max tokens.
    """
    updates = {
        "api_key": api_key,
        "model": model,
        "endpoint": endpoint,
        "deployment_name": deployment_name,
        "api_version": api_version,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "top_p": top_p,
        "top_k": top_k,
        "frequency_penalty": frequency_penalty,
        "presence_penalty": presence_penalty,
        "stop": stop or None,
    }
    updates = {key: value for key, value in updates.items() if value is not None}

    async def _set():
        async with open_session(_settings(ctx), console) as session:
            current = session.config
            if provider and provider != current.provider:
                if provider not in PROVIDERS:
                    console.print(f"[red]Error: Unknown provider: {provider}[/red]")
                    raise typer.Exit(code=1)
                current = default_config(provider, carry=current)

            fields = type(current).model_fields
            ignored = sorted(key for key in updates if key not in fields)
            if ignored:
                console.print(
                    f"[yellow]Ignoring options not used by {current.provider}: "
                    f"{', '.join(ignored)}[/yellow]"
                )
            applied = {key: value for key, value in updates.items() if key in fields}
            new_config = type(current).model_validate({**current.model_dump(), **applied})

            await session.save_config(new_config)
            console.print("[green]Configuration saved[/green]")
            console.print(_config_table(new_config))

    _run(_set())


@app.command("new")
def new_conversation(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Conversation name"),
):
    """Create a conversation and make it active."""
    async def _new():
        async with open_session(_settings(ctx), console) as session:
            conversation = await session.new_conversation(name)
            console.print(f"[green]Created[/green] {conversation.name} [dim]({conversation.id})[/dim]")

    _run(_new())


@app.command("list")
def list_conversations(ctx: typer.Context):
    """List conversations."""
    async def _list():
        async with open_session(_settings(ctx), console) as session:
            if not session.conversations:
                console.print("[yellow]No conversations yet. Create one with: polychat new[/yellow]")
                return

            table = Table(show_header=True, header_style="bold cyan")
            table.add_column("", width=1)
            table.add_column("ID", style="dim")
            table.add_column("Name")
            table.add_column("Provider", style="yellow")
            table.add_column("Messages", justify="right")
            table.add_column("Updated", style="dim")

            for conversation in session.conversations:
                marker = "*" if conversation.id == session.active_conversation_id else ""
                table.add_row(
                    marker,
                    conversation.id,
                    conversation.name,
                    conversation.provider or "",
                    str(len(conversation.visible_messages())),
                    conversation.updated_at.strftime("%Y-%m-%d %H:%M"),
                )
            console.print(table)

    _run(_list())


@app.command("select")
def select_conversation(
    ctx: typer.Context,
    conversation_id: str = typer.Argument(..., help="Conversation ID"),
):
    """Make a conversation active."""
    async def _select():
        async with open_session(_settings(ctx), console) as session:
            conversation = await session.select_conversation(conversation_id)
            if conversation is None:
                raise typer.Exit(code=1)
            console.print(f"[green]Active:[/green] {conversation.name}")

    _run(_select())


@app.command("rename")
def rename_conversation(
    ctx: typer.Context,
    conversation_id: str = typer.Argument(..., help="Conversation ID"),
    name: str = typer.Argument(..., help="New name"),
):
    """Rename a conversation."""
    async def _rename():
        async with open_session(_settings(ctx), console) as session:
            if await session.rename_conversation(conversation_id, name) is None:
                raise typer.Exit(code=1)
            console.print(f"[green]Renamed to[/green] {name}")

    _run(_rename())


@app.command("delete")
def delete_conversation(
    ctx: typer.Context,
    conversation_id: str = typer.Argument(..., help="Conversation ID"),
):
    """Delete a conversation."""
    async def _delete():
        async with open_session(_settings(ctx), console) as session:
            if not await session.delete_conversation(conversation_id):
                raise typer.Exit(code=1)
            console.print("[green]Conversation deleted[/green]")

    _run(_delete())


@app.command("clear")
def clear_conversation(ctx: typer.Context):
    """Remove all messages from the active conversation."""
    async def _clear():
        async with open_session(_settings(ctx), console) as session:
            if await session.clear_conversation() is None:
                console.print("[yellow]No active conversation[/yellow]")

    _run(_clear())


@app.command("show")
def show_conversation(ctx: typer.Context):
    """Print the active conversation."""
    async def _show():
        async with open_session(_settings(ctx), console) as session:
            conversation = session.active_conversation
            if conversation is None:
                console.print("[yellow]No active conversation[/yellow]")
                return
            console.print(f"[bold]{conversation.name}[/bold] [dim]{conversation.provider or ''}[/dim]\n")
            for message in conversation.visible_messages():
                if message.role == "user":
                    console.print(Panel(message.content, title="You", border_style="cyan"))
                else:
                    console.print(Panel(Markdown(message.content), title="Assistant", border_style="green"))

    _run(_show())


@app.command("copy")
def copy_conversation(ctx: typer.Context):
    """Write the active conversation as plain text to stdout."""
    async def _copy():
        async with open_session(_settings(ctx), console) as session:
            conversation = session.active_conversation
            if conversation is None:
                console.print("[yellow]No active conversation[/yellow]")
                raise typer.Exit(code=1)
            typer.echo(transcript(conversation))

    _run(_copy())


@app.command("send")
def send(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Message to send"),
):
    """Send one message to the active conversation and stream the reply."""
    async def _send():
        view = StreamView()
        async with open_session(_settings(ctx), console, on_update=view) as session:
            if session.active_conversation is None:
                await session.new_conversation()
            if not await _send_turn(session, view, text):
                raise typer.Exit(code=1)

    _run(_send())


@app.command("chat")
def chat(ctx: typer.Context):
    """Start an interactive chat in the active conversation.

    Type /exit to quit, /clear to clear the conversation, /new for a new one.
    """
    async def _chat():
        view = StreamView()
        async with open_session(_settings(ctx), console, on_update=view) as session:
            if session.active_conversation is None:
                await session.new_conversation()

            conversation = session.active_conversation
            console.print(Panel(
                f"{conversation.name} via {session.service.provider_name if session.service else '?'}\n"
                "[dim]/exit to quit, /clear to clear, /new for a new conversation[/dim]",
                border_style="cyan",
            ))

            while True:
                try:
                    text = await asyncio.to_thread(console.input, "[bold cyan]You:[/bold cyan] ")
                except (EOFError, KeyboardInterrupt):
                    break

                command = text.strip()
                if command in ("/exit", "/quit"):
                    break
                if command == "/clear":
                    await session.clear_conversation()
                    continue
                if command == "/new":
                    created = await session.new_conversation()
                    console.print(f"[green]Started[/green] {created.name}")
                    continue

                await _send_turn(session, view, text)

    _run(_chat())


@app.command("export")
def export_data(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="Output file (default: polychat-export-<date>.json)"),
):
    """Export config and conversations to a JSON file."""
    async def _export():
        async with open_session(_settings(ctx), console) as session:
            target = path or Path(export_filename())
            target.write_text(await session.export_data(), encoding="utf-8")
            console.print(f"[green]Exported to[/green] {target}")

    _run(_export())


@app.command("import")
def import_data(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Export file to import"),
):
    """Import config and conversations, replacing the stored conversations."""
    async def _import():
        async with open_session(_settings(ctx), console) as session:
            if not await session.import_data(path.read_text(encoding="utf-8")):
                raise typer.Exit(code=1)

    _run(_import())


if __name__ == "__main__":
    app()

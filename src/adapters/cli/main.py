"""
adapters.cli.main - Terminal client for the trainer marketplace.

Talks to a running API (``API_BASE_URL``) through ApiClient, exactly like
any other client would, so the server stays the only place holding state.

Commands
--------
  register   Create a new client or trainer account
  login      Sign in and save credentials locally (~/.trainer-marketplace/session.json)
  logout     Clear stored credentials
  whoami     Show the currently logged-in user
  trainers   Browse trainers (search / specialty / location filters)
  hire       Send a hire request to a trainer            (clients)
  requests   List pending hire requests                  (trainers)
  respond    Accept or reject a hire request             (trainers)
  history    Print the conversation with another user
  send       Send one message
  chat       Interactive chat (live channel + polling)

Usage
-----
  python run_cli.py login
  python run_cli.py trainers --specialty yoga
  python run_cli.py chat <user-id>
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Callable, TypeVar

# ── Ensure src/ is on the path ──
_SRC = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(_SRC))

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from adapters.cli.session import Session, clear_session, load_session, save_session
from adapters.client.api_client import ApiClient
from adapters.client.chat_sync import ChatSession
from domain.entities import ChatMessage
from domain.exceptions import DomainError
from infrastructure.config import Settings

__version__ = "0.1.0"

T = TypeVar("T")

console = Console()
app = typer.Typer(
    help="Trainer Marketplace CLI",
    add_completion=False,
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _require_session() -> Session:
    """Return the stored session or exit with a user-friendly error."""
    session = load_session()
    if session is None:
        console.print(
            "[bold red]Not logged in.[/bold red] "
            "Run [bold]login[/bold] (or [bold]register[/bold]) first."
        )
        raise typer.Exit(code=1)
    return session


def _make_client(session: Session | None = None) -> ApiClient:
    config = Settings.from_env()
    return ApiClient(config.api_base_url, token=session.access_token if session else None)


def _call(fn: Callable[..., T], *args, **kwargs) -> T:
    """Run an API call, turning domain errors into a red message + exit 1."""
    try:
        return fn(*args, **kwargs)
    except DomainError as exc:
        console.print(f"[bold red]{type(exc).__name__}:[/bold red] {exc}")
        raise typer.Exit(code=1)


def _remember(result: dict) -> Session:
    user = result["user"]
    session = Session(
        user_id=user["id"],
        access_token=result["accessToken"],
        email=user["email"],
        role=user["role"],
    )
    save_session(session)
    return session


def _print_message(message: ChatMessage, me: str) -> None:
    who = "[bold cyan]You[/bold cyan]" if message.sender_id == me else "[bold green]Them[/bold green]"
    console.print(f"[dim]{message.timestamp[:19]}[/dim] {who}: {message.text}")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"trainer-marketplace v{__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Commands: Auth
# ---------------------------------------------------------------------------

@app.command()
def register() -> None:
    """Create a new account."""
    console.print(Panel("[bold]Create Account[/bold]", border_style="blue"))

    email    = Prompt.ask("[bold]E-mail[/bold]")
    password = Prompt.ask("[bold]Password[/bold]  (min 6 chars)", password=True)
    name     = Prompt.ask("[bold]Name[/bold]", default="")
    role     = Prompt.ask("[bold]Role[/bold]", choices=["client", "trainer"], default="client")

    client = _make_client()
    result = _call(client.register, email, password, name, role)
    _remember(result)
    console.print(Panel(
        f"[bold green]Account created and logged in![/bold green]\n"
        f"Welcome, [bold]{result['user']['name']}[/bold] ({role}).\n"
        "Run [bold]trainers[/bold] to browse or [bold]requests[/bold] to see hire requests.",
        border_style="green",
    ))


@app.command()
def login() -> None:
    """Sign in to your account."""
    email    = Prompt.ask("[bold]E-mail[/bold]")
    password = Prompt.ask("[bold]Password[/bold]", password=True)

    client = _make_client()
    result = _call(client.login, email, password)
    _remember(result)
    console.print(Panel(
        f"[bold green]Logged in![/bold green] "
        f"Welcome back, [bold]{result['user']['name']}[/bold].",
        border_style="green",
    ))


@app.command()
def logout() -> None:
    """Sign out and clear stored credentials."""
    session = load_session()
    if session is None:
        console.print("[dim]Not currently logged in.[/dim]")
        return
    if Confirm.ask(f"Sign out [bold]{session.email or session.user_id}[/bold]?"):
        clear_session()
        console.print("[green]Logged out.[/green]")


@app.command()
def whoami() -> None:
    """Show the currently logged-in user and their trainer status."""
    session = _require_session()
    user = _call(_make_client(session).me)

    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Field", style="bold")
    t.add_column("Value")
    t.add_row("Name", user["name"])
    t.add_row("E-mail", user["email"])
    t.add_row("Role", user["role"])
    t.add_row("User id", user["id"])
    if user["role"] == "client":
        t.add_row("Trainer", user.get("trainerId") or "[dim]none[/dim]")
        t.add_row("Status", user["trainerStatus"])
    console.print(Panel(t, title="You", border_style="blue"))


# ---------------------------------------------------------------------------
# Commands: Trainers & hiring
# ---------------------------------------------------------------------------

@app.command()
def trainers(
    search: str = typer.Option("", "--search", "-s", help="Name, bio or specialty."),
    specialty: str = typer.Option("", "--specialty", help="Exact specialty."),
    location: str = typer.Option("", "--location", "-l", help="Part of the location."),
) -> None:
    """Browse trainers."""
    found = _call(_make_client().list_trainers, search, specialty, location)
    if not found:
        console.print("[yellow]No trainers match.[/yellow]")
        return

    t = Table(box=box.SIMPLE_HEAD)
    t.add_column("Id", style="dim")
    t.add_column("Name", style="bold")
    t.add_column("Specialties")
    t.add_column("Location")
    for trainer in found:
        t.add_row(
            trainer["id"],
            trainer["name"],
            ", ".join(trainer["specialties"]),
            trainer["location"],
        )
    console.print(t)


@app.command()
def hire(trainer_id: str = typer.Argument(..., help="Id of the trainer to hire.")) -> None:
    """Send a hire request to a trainer."""
    session = _require_session()
    result = _call(_make_client(session).request_hire, session.user_id, trainer_id)
    console.print(
        f"[green]Request sent.[/green] Status: [bold]{result['user']['trainerStatus']}[/bold]"
    )


@app.command()
def requests() -> None:
    """List the hire requests waiting for your answer."""
    session = _require_session()
    pending = _call(_make_client(session).list_requests, session.user_id)
    if not pending:
        console.print("[dim]No pending requests.[/dim]")
        return

    t = Table(box=box.SIMPLE_HEAD)
    t.add_column("Request", style="dim")
    t.add_column("Client", style="bold")
    t.add_column("E-mail")
    t.add_column("Sent")
    for item in pending:
        client = item.get("client") or {}
        t.add_row(
            item["requestId"],
            client.get("name", "[dim]deleted[/dim]"),
            client.get("email", ""),
            item["createdAt"][:19],
        )
    console.print(t)


@app.command()
def respond(
    request_id: str = typer.Argument(...),
    status: str = typer.Argument(..., help="accepted or rejected"),
) -> None:
    """Accept or reject a hire request."""
    session = _require_session()
    result = _call(_make_client(session).respond, request_id, status)
    console.print(f"[green]{result['message']}.[/green]")


# ---------------------------------------------------------------------------
# Commands: Chat
# ---------------------------------------------------------------------------

@app.command()
def history(other_id: str = typer.Argument(..., help="Id of the other user.")) -> None:
    """Print the whole conversation with another user."""
    session = _require_session()
    messages = _call(_make_client(session).history, session.user_id, other_id)
    if not messages:
        console.print("[dim]No messages yet.[/dim]")
    for message in messages:
        _print_message(message, session.user_id)


@app.command()
def send(
    other_id: str = typer.Argument(...),
    text: str = typer.Argument(...),
) -> None:
    """Send one message."""
    session = _require_session()
    message = _call(_make_client(session).send, session.user_id, other_id, text)
    _print_message(message, session.user_id)


@app.command()
def chat(other_id: str = typer.Argument(..., help="Id of the other user.")) -> None:
    """Interactive chat. New messages arrive live and through polling."""
    session = _require_session()
    config = Settings.from_env()
    client = ApiClient(config.api_base_url, token=session.access_token)

    async def _run() -> None:
        chat_session = ChatSession(
            client,
            session.user_id,
            other_id,
            ws_url=config.ws_url,
            poll_interval=config.chat_poll_interval,
            on_message=lambda m: _print_message(m, session.user_id),
        )
        try:
            await chat_session.refresh()
        except DomainError as exc:
            console.print(f"[bold red]{type(exc).__name__}:[/bold red] {exc}")
            raise typer.Exit(code=1)

        console.print(Panel(
            "[bold]Chat[/bold]\n"
            "Type a message, or [bold]exit[/bold] / [bold]quit[/bold] to stop.",
            border_style="cyan",
        ))
        tasks = [
            asyncio.create_task(chat_session.poll_forever()),
            asyncio.create_task(chat_session.subscribe()),
        ]
        loop = asyncio.get_running_loop()
        try:
            while True:
                try:
                    text = await loop.run_in_executor(None, input)
                except (KeyboardInterrupt, EOFError):
                    break
                if text.strip().lower() in ("exit", "quit", "q"):
                    break
                if not text.strip():
                    continue
                try:
                    await chat_session.send(text)
                except DomainError as exc:
                    console.print(
                        f"[bold red]Not sent ({exc}).[/bold red] "
                        f"Draft kept: [italic]{chat_session.draft}[/italic]"
                    )
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        console.print("[dim]Goodbye![/dim]")

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Global version option
# ---------------------------------------------------------------------------

@app.callback()
def _callback(
    version: bool = typer.Option(
        False, "--version", "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Trainer Marketplace CLI"""


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()

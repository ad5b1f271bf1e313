"""Main CLI application using Typer."""
import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..chat.models import AgentProfile, MessageRole
from ..config import ChatSettings, configure_logging
from ..conversation import ConversationSession
from .providers import get_store, get_transport

# Create Typer app
app = typer.Typer(
    name="simchat",
    help="Chat with configurable AI personas (Sims) from the terminal",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


def _load_settings() -> ChatSettings:
    try:
        settings = ChatSettings.from_env()
    except ValueError as e:
        console.print(f"[red]Error: invalid configuration: {e}[/red]")
        raise typer.Exit(code=1)
    configure_logging(settings.log_level)
    return settings


def _agent(name: str, prompt: str | None, agent_id: str | None) -> AgentProfile:
    return AgentProfile(id=agent_id, name=name, prompt=prompt)


def _print_reply(name: str, content: str) -> None:
    console.print(f"[bold green]{name}:[/bold green] {content}\n")


NAME_OPTION = typer.Option(..., "--name", "-n", help="Persona name")
PROMPT_OPTION = typer.Option(None, "--prompt", "-p", help="Persona instructions")
AGENT_ID_OPTION = typer.Option(None, "--agent-id", help="Persona id (required by the advisor transport)")


@app.command()
def ask(
    message: str = typer.Argument(..., help="Message to send"),
    name: str = NAME_OPTION,
    prompt: str | None = PROMPT_OPTION,
    agent_id: str | None = AGENT_ID_OPTION,
):
    """Send a single message and print the reply."""
    settings = _load_settings()
    agent = _agent(name, prompt, agent_id)

    async def _ask():
        session = ConversationSession(get_transport(settings, console), agent)
        async with session:
            reply = await session.send_message(message)
        if reply is None:
            console.print("[yellow]No reply received[/yellow]")
            raise typer.Exit(code=1)
        _print_reply(agent.name, reply.content)

    asyncio.run(_ask())


@app.command()
def chat(
    name: str = NAME_OPTION,
    prompt: str | None = PROMPT_OPTION,
    agent_id: str | None = AGENT_ID_OPTION,
    owner: bool = typer.Option(False, "--owner", help="Chat as the persona's owner"),
    persist: bool = typer.Option(
        False,
        "--persist",
        help="Store the conversation using SIMCHAT_MEMORY_BACKEND",
    ),
    conversation_id: str | None = typer.Option(
        None,
        "--conversation-id",
        help="Resume or name a specific conversation",
    ),
):
    """Start an interactive chat with a persona."""
    settings = _load_settings()
    agent = _agent(name, prompt, agent_id)

    async def _chat():
        transport = get_transport(settings, console)
        store = get_store(settings) if persist else None
        if store is not None:
            await store.connect()

        session = ConversationSession(
            transport,
            agent,
            store=store,
            conversation_id=conversation_id,
            is_owner=owner,
            shape_history=settings.transport == "advisor",
        )

        try:
            await session.connect()

            console.print(f"[bold cyan]Chatting with {agent.name}[/bold cyan]")
            console.print("[dim]Type /reset to clear the conversation, /quit to leave[/dim]\n")
            for message in session.messages:
                label = "You" if message.role == MessageRole.USER else agent.name
                console.print(f"[dim]{label}: {message.content}[/dim]")

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                command = user_input.strip().lower()
                if not command:
                    continue
                if command in ("/quit", "exit", "quit", "q"):
                    console.print("[dim]Goodbye![/dim]")
                    break
                if command == "/reset":
                    session.reset()
                    console.print("[dim]Conversation cleared.[/dim]\n")
                    continue

                with console.status(f"[dim]{agent.name} is thinking...[/dim]"):
                    reply = await session.send_message(user_input)
                if reply is not None:
                    _print_reply(agent.name, reply.content)
        finally:
            await session.close()
            if store is not None:
                await store.disconnect()

    asyncio.run(_chat())


@app.command()
def history(
    agent_id: str = typer.Argument(..., help="Persona id or name the conversation is stored under"),
):
    """Show the stored conversation for a persona."""
    settings = _load_settings()

    async def _history():
        store = get_store(settings)
        try:
            await store.connect()
            conversation_id = await store.find_conversation(agent_id)
            messages = [] if conversation_id is None else await store.get_messages(conversation_id)

            if not messages:
                console.print("[yellow]No stored messages[/yellow]")
                return

            table = Table(title=f"Conversation {conversation_id}")
            table.add_column("Time", style="dim")
            table.add_column("Role", style="cyan")
            table.add_column("Content")
            for message in messages:
                table.add_row(
                    message.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                    message.role.value,
                    message.content,
                )
            console.print(table)
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

    asyncio.run(_history())


@app.command(name="config")
def show_config():
    """Show resolved settings (secrets masked)."""
    settings = _load_settings()

    def _mask(value: str | None) -> str:
        if not value:
            return "[yellow]NOT SET[/yellow]"
        return value[:4] + "..." if len(value) > 8 else "***"

    table = Table(show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Transport", settings.transport)
    table.add_row("Endpoint URL", settings.endpoint_url or "[yellow]NOT SET[/yellow]")
    table.add_row("Endpoint key", _mask(settings.api_key))
    table.add_row("OpenAI key", _mask(settings.openai_api_key))
    table.add_row("Model", settings.model)
    table.add_row("Timeout", f"{settings.timeout}s" if settings.timeout else "none")
    table.add_row("Memory backend", settings.memory_backend)
    table.add_row("Memory path", str(settings.memory_path))
    table.add_row("Log level", settings.log_level)
    console.print(Panel(table, title="simchat configuration"))


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

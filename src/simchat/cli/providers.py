"""Provider factory functions for CLI.

Centralizes creation of transports and stores from ChatSettings.
Hides configuration details from command implementations.
"""

from rich.console import Console

from ..config import ChatSettings
from ..memory import ConversationStore, create_conversation_store
from ..transport import ChatTransport, create_chat_transport

# Default console for output
_console = Console()


def get_transport(settings: ChatSettings, console: Console | None = None) -> ChatTransport:
    """Create the configured chat transport.

    Raises:
        SystemExit: If the transport is unknown or its URL/key is missing
    """
    import typer

    con = console or _console
    kind = settings.transport

    try:
        if kind == "openai":
            return create_chat_transport(
                "openai",
                api_key=settings.openai_api_key,
                model=settings.model,
                timeout=settings.timeout,
            )
        return create_chat_transport(
            kind,
            url=settings.endpoint_url,
            api_key=settings.api_key,
            timeout=settings.timeout,
        )
    except TypeError:
        missing = "OPENAI_API_KEY" if kind == "openai" else "SIMCHAT_ENDPOINT_URL"
        con.print(f"[red]Error: {missing} not set in environment[/red]")
        raise typer.Exit(code=1)
    except ValueError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def get_store(settings: ChatSettings) -> ConversationStore:
    """Create the configured conversation store."""
    if settings.memory_backend == "sqlite":
        return create_conversation_store("sqlite", path=settings.memory_path)
    return create_conversation_store(settings.memory_backend)

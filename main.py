"""Command-line entry point: ask an LLM about the project in the current directory."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import sys

import click
from rich.console import Console

from clients.llm_client import LLMClient, LLMClientError, friendly_error_message
from config import Settings, get_settings
from services.chat_session import ChatSession, Command, classify_command

logger = logging.getLogger(__name__)
console = Console()

FILES_PER_DIRECTORY = 10


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )


def _build_session(settings: Settings, path: str) -> ChatSession:
    return ChatSession(LLMClient(settings), settings, project_root=path)


def _format_size(size: int) -> str:
    return f"{size}B" if size < 1024 else f"{round(size / 1024)}KB"


def show_project_files(session: ChatSession) -> None:
    grouped = session.index.files_by_directory()
    if not grouped:
        console.print("\n[yellow]No relevant files found in the project directory[/yellow]")
        return

    total = sum(len(files) for files in grouped.values())
    console.print(f"\n[green]Found {total} project files:[/green]")
    for directory, files in grouped.items():
        console.print(f"\n  [blue]{directory}/[/blue]", highlight=False)
        for f in files[:FILES_PER_DIRECTORY]:
            console.print(f"    [dim]{f.name} ({_format_size(f.size)})[/dim]", highlight=False)
        if len(files) > FILES_PER_DIRECTORY:
            console.print(f"    [dim]... and {len(files) - FILES_PER_DIRECTORY} more[/dim]")
    console.print()


def show_current_context(session: ChatSession) -> None:
    paths = session.assembler.current_context()
    if not paths:
        console.print("\n[yellow]No files in the current context[/yellow]\n")
        return
    console.print(f"\n[green]{len(paths)} files in the current context:[/green]")
    for path in paths:
        console.print(f"  [dim]{path}[/dim]", highlight=False)
    console.print()


def display_response(reply: str) -> None:
    console.print("\n[blue]AI:[/blue]")
    console.print(reply, markup=False, highlight=False)
    console.print("\n" + "─" * 50)


def run_turn(session: ChatSession, message: str) -> bool:
    """Send one message and print the reply. Returns False if the request failed."""
    # Same selection ask() is about to make; shown while the request runs.
    file_count = len(session.assembler.select(message, session.history))
    label = "[yellow]Thinking...[/yellow]"
    if file_count:
        label += f" [dim]\\[{file_count} files in context][/dim]"
        console.print(f"[dim]\\[{file_count} files in context][/dim]")
    try:
        with console.status(label):
            result = asyncio.run(session.ask(message))
    except LLMClientError as exc:
        logger.error("LLM error: %s", exc)
        console.print(f"\n[red]Error getting response:[/red] {friendly_error_message(exc)}")
        return False

    display_response(result.reply)
    return True


def handle_command(session: ChatSession, command: Command) -> None:
    if command is Command.FILES:
        show_project_files(session)
    elif command is Command.CONTEXT:
        show_current_context(session)
    elif command is Command.OVERVIEW:
        console.print(session.index.overview(), markup=False, highlight=False)
    elif command is Command.CLEAR:
        session.clear()
        console.print("[green]Conversation cleared[/green]")


def chat_loop(session: ChatSession) -> None:
    console.print("\n[green]Starting chat session[/green]")
    console.print(f"[dim]Model: {session.model}[/dim]")
    console.print('[dim]Type your questions, "files" to list project files, or "quit" to exit[/dim]\n')

    while True:
        try:
            message = console.input("[cyan]You> [/cyan]").strip()
        except (EOFError, KeyboardInterrupt):
            console.print("\n\nChat ended. Goodbye!")
            break

        if not message:
            continue
        command = classify_command(message)
        if command is Command.EXIT:
            break
        if command is not None:
            handle_command(session, command)
            continue
        run_turn(session, message)

    count = len(session.history)
    if count:
        console.print(f"\n[green]Session ended - {count} messages exchanged[/green]")


def _check_api_key(settings: Settings) -> None:
    if not settings.llm_api_key:
        console.print("\n[red]OpenRouter API key not found![/red]")
        console.print("\nPlease set your API key using one of these methods:")
        console.print('1. Environment variable: export OPENROUTER_API_KEY="your_key_here"')
        console.print('2. Create .env file: echo "OPENROUTER_API_KEY=your_key_here" > .env')
        console.print("\nGet your API key from: https://openrouter.ai/keys")
        sys.exit(1)
    if not settings.is_valid_api_key:
        console.print('[red]API key format looks invalid (should start with "sk-")[/red]')
        sys.exit(1)


@click.command("open-cli")
@click.version_option("0.1.0", prog_name="open-cli")
@click.option("--model", "-m", required=True, help="AI model to use (e.g., openai/gpt-oss-20b)")
@click.option(
    "--question", "-q", "single",
    is_flag=True,
    help="Ask the question given as trailing words and exit",
)
@click.option("--chat", "-c", is_flag=True, help="Start interactive chat mode (default if no question provided)")
@click.option(
    "--path", "-p",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Project directory to scan for context",
)
@click.option("--check", is_flag=True, help="Test the API connection and exit")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.argument("question", nargs=-1)
def cli(
    model: str,
    single: bool,
    chat: bool,
    path: str,
    check: bool,
    debug: bool,
    question: tuple[str, ...],
) -> None:
    """CLI for OpenRouter AI models with project context.

    Example: open-cli -m openai/gpt-oss-20b -q explain main.py
    """
    if single and not question:
        raise click.UsageError("-q/--question needs the question text")
    settings = dataclasses.replace(get_settings(), llm_model=model)
    _configure_logging("DEBUG" if debug else settings.log_level)

    console.print("[bold]Open CLI - OpenRouter AI Assistant[/bold]")
    console.print(f"Using model: {model}", highlight=False)
    _check_api_key(settings)

    try:
        if check:
            ok = asyncio.run(LLMClient(settings).test_connection())
            if ok:
                console.print("[green]Connection successful[/green]")
            else:
                console.print("[red]Connection failed[/red]")
            sys.exit(0 if ok else 1)

        session = _build_session(settings, path)
        if question:
            text = " ".join(question)
            console.print("\n" + "=" * 50)
            console.print(f"Question: {text}", markup=False, highlight=False)
            ok = run_turn(session, text)
            sys.exit(0 if ok else 1)

        chat_loop(session)
    except Exception:
        logger.exception("Unexpected error")
        console.print("[red]Unexpected error, run with --debug for details[/red]")
        sys.exit(1)


if __name__ == "__main__":
    cli()

"""CineFind CLI - Main command-line interface."""

import asyncio
import logging
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from cinefind import __version__
from cinefind.config import Config, get_config, save_config
from cinefind.context import AppContext, build_context
from cinefind.errors import ConfigError
from cinefind.models import SearchResultItem
from cinefind.providers import get_provider, get_provider_names
from cinefind.session import LookupSession, SearchState
from cinefind.views import ConsoleBanner, ConsoleDetailView, ConsoleResults

console = Console()
logger = logging.getLogger(__name__)


# ===== SETUP HELPERS =====

def setup_logging(verbose: bool = False) -> None:
    """Route log records through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


def build_session(context: AppContext, provider_name: str | None = None) -> LookupSession:
    """Wire a lookup session to the console."""
    name = provider_name or context.config.default_provider
    provider = get_provider(name, context)
    if provider is None:
        raise click.BadParameter(
            f"Unknown provider '{name}'. Available: {', '.join(get_provider_names())}",
            param_hint="--provider",
        )
    return LookupSession(
        context,
        provider,
        results=ConsoleResults(context.console),
        banner=ConsoleBanner(context.console),
        detail_view=ConsoleDetailView(context.console),
    )


def run_async(coro):
    """Run an async function."""
    return asyncio.run(coro)


# ===== DISPLAY HELPERS =====

def display_banner():
    """Display the CineFind banner."""
    console.print(Panel(
        Text("Search movies, series and episodes on OMDb", style="bold cyan"),
        title="[bold white]🎬 CineFind[/]",
        subtitle=f"v{__version__}"
    ))


def display_config(config: Config, context: AppContext | None = None):
    """Display the current configuration."""
    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("API URL", config.api_url)
    table.add_row("Plot", config.plot)
    table.add_row("Pacing (ms)", str(config.pacing_ms))
    table.add_row("Message duration (s)", str(config.message_seconds))
    table.add_row("Timeout (s)", str(config.timeout))
    table.add_row("Env file", config.env_file)
    table.add_row("Provider", config.default_provider)
    if context is not None:
        table.add_row("API key", "configured" if context.has_credential else "[red]missing[/]")

    console.print(table)


def display_result_index(items: tuple[SearchResultItem, ...]):
    """Display the numbered result list used by 'open <n>'."""
    table = Table(show_header=True, header_style="bold magenta", box=None)
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="cyan")
    table.add_column("Year", style="green", width=10)
    table.add_column("ID", style="dim", width=12)

    for i, item in enumerate(items, 1):
        table.add_row(str(i), item.title, item.year, item.id)

    console.print(table)


# ===== CLI COMMANDS =====

@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, version, verbose):
    """CineFind - Look up movies from your terminal."""
    if version:
        console.print(f"CineFind v{__version__}")
        return

    setup_logging(verbose)

    if ctx.invoked_subcommand is None:
        # Interactive mode
        interactive_mode(build_context(console=console))


@main.command()
@click.argument("query")
@click.option("--provider", "-p", default=None, help="Provider to search")
@click.option("--select/--no-select", default=False, help="Pick a result to show its details")
def search(query: str, provider: Optional[str], select: bool):
    """Search for movies and list them as cards."""
    import questionary

    context = build_context(console=console)
    session = build_session(context, provider)

    async def do_search():
        try:
            await session.submit_query(query)
            if not (select and session.items):
                return

            choices = [
                questionary.Choice(title=f"{item.title} ({item.year}) [{item.kind}]", value=item)
                for item in session.items
            ]
            choices.append(questionary.Choice(title="[Cancel]", value=None))

            selected = await questionary.select(
                "Select a title (↑↓ arrows):",
                choices=choices,
            ).ask_async()

            if selected:
                await session.request_detail(selected.id)
        finally:
            await session.aclose()

    run_async(do_search())

    if session.state is SearchState.IDLE and session.items:
        console.print(f"\n[dim]{len(session.items)} result(s). Use 'cinefind details <id>' for more.[/]")


@main.command()
@click.argument("item_id")
@click.option("--provider", "-p", default=None, help="Provider to query")
def details(item_id: str, provider: Optional[str]):
    """Show full details for an IMDb id (e.g. tt0096895)."""
    context = build_context(console=console)
    session = build_session(context, provider)

    async def do_fetch():
        try:
            await session.request_detail(item_id)
        finally:
            await session.aclose()

    run_async(do_fetch())


@main.command()
@click.option("--show", is_flag=True, help="Show current configuration")
@click.option("--api-url", help="Set the OMDb API URL")
@click.option("--plot", type=click.Choice(["short", "full"]), help="Set plot length for details")
@click.option("--pacing-ms", type=click.IntRange(min=0), help="Set delay between result cards")
@click.option("--message-seconds", type=click.FloatRange(min=0), help="Set how long messages stay")
@click.option("--timeout", type=click.FloatRange(min=0), help="Set request timeout in seconds")
@click.option("--env-file", type=click.Path(dir_okay=False), help="Set the .env file holding OMDB_API_KEY")
def config(
    show: bool,
    api_url: Optional[str],
    plot: Optional[str],
    pacing_ms: Optional[int],
    message_seconds: Optional[float],
    timeout: Optional[float],
    env_file: Optional[str],
):
    """View or edit configuration."""
    config = get_config()
    changes = {
        "api_url": api_url,
        "plot": plot,
        "pacing_ms": pacing_ms,
        "message_seconds": message_seconds,
        "timeout": timeout,
        "env_file": env_file,
    }
    changes = {k: v for k, v in changes.items() if v is not None}

    if show or not changes:
        display_config(config, build_context(config, console=console))
        return

    for key, value in changes.items():
        setattr(config, key, value)

    try:
        save_config(config)
    except ConfigError as e:
        console.print(f"[red]✗ {escape(e.message)}[/]")
        raise click.exceptions.Exit(1)
    console.print("[green]✓ Configuration saved[/]")


# ===== INTERACTIVE MODE =====

HELP_TEXT = """
[bold]Commands:[/]
  [cyan]search <query>[/]    - Search for movies
  [cyan]open <n>[/]          - Show details of result n
  [cyan]details <id>[/]      - Show details for an IMDb id
  [cyan]close[/]             - Close the details view
  [cyan]list[/]              - List the last results again
  [cyan]config[/]            - Show configuration
  [cyan]quit[/]              - Exit
"""


def interactive_mode(context: AppContext):
    """Run interactive mode."""
    display_banner()
    session = build_session(context)

    if not context.has_credential:
        console.print("[yellow]No OMDB_API_KEY configured - searches are disabled.[/]")

    console.print("[dim]Type 'help' for commands, 'quit' to exit[/]\n")

    # one loop for the whole session so message timers survive between commands
    with asyncio.Runner() as runner:
        while True:
            try:
                cmd = Prompt.ask("[bold cyan]cinefind[/]").strip()

                if not cmd:
                    continue

                parts = cmd.split(maxsplit=1)
                action = parts[0].lower()
                args = parts[1] if len(parts) > 1 else ""

                if action in ("quit", "exit", "q"):
                    console.print("[dim]Goodbye! 🎬[/]")
                    break

                elif action == "help":
                    console.print(HELP_TEXT)

                elif action == "search":
                    runner.run(session.submit_query(args))

                elif action == "open" and args:
                    if not args.isdigit() or not 1 <= int(args) <= len(session.items):
                        console.print(f"[yellow]Pick a number between 1 and {len(session.items)}[/]")
                        continue
                    item = session.items[int(args) - 1]
                    runner.run(session.request_detail(item.id))

                elif action == "details" and args:
                    runner.run(session.request_detail(args))

                elif action == "close":
                    session.close_detail()

                elif action == "list":
                    if session.items:
                        display_result_index(session.items)
                    else:
                        console.print("[yellow]No results yet[/]")

                elif action == "config":
                    display_config(context.config, context)

                else:
                    console.print("[red]Unknown command. Type 'help' for options.[/]")

            except KeyboardInterrupt:
                console.print("\n[dim]Use 'quit' to exit[/]")
            except Exception as e:
                logger.debug("Command failed", exc_info=True)
                console.print(f"[red]Error: {e}[/]")

        runner.run(session.aclose())


if __name__ == "__main__":
    main()

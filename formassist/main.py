"""
FormAssist CLI Entry Point

Command-line interface for asking questions about form platform tables.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from formassist import __version__
from formassist.config import Settings, get_settings, load_settings
from formassist.errors import FormAssistError
from formassist.gateway import TableGateway
from formassist.models import AuthSession, PipelineOk, TableReference
from formassist.pipeline import QueryPipeline
from formassist.resolver import parse_table_references
from formassist.utils.logger import setup_logging

app = typer.Typer(
    name="formassist",
    help="FormAssist - Ask questions about form platform data tables",
    add_completion=False,
)
console = Console()


def _load(env_file: Optional[Path], verbose: bool = False) -> Settings:
    settings = load_settings(env_file) if env_file else get_settings()
    level = "DEBUG" if verbose else settings.log_level
    setup_logging(level=level, log_file=settings.log_file)
    return settings


def _session(settings: Settings, token: Optional[str]) -> AuthSession:
    if not settings.table_api.is_configured():
        console.print("[red]Error: TABLE_API_BASE_URL is not configured![/red]")
        raise typer.Exit(1)
    return AuthSession(
        base_url=settings.table_api.base_url,
        token=token or settings.table_api.token,
    )


def _parse_table_option(values: List[str]) -> List[TableReference]:
    """Parse ``NAME`` or ``NAME:ALIAS`` options."""
    refs = []
    for value in values:
        name, _, alias = value.partition(":")
        refs.append(TableReference(table_name=name, alias=alias or None))
    return refs


def _mask(value: Optional[str]) -> str:
    if not value:
        return "[dim]not set[/dim]"
    return value[:4] + "****" if len(value) > 8 else "****"


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question about the table data"),
    tables: List[str] = typer.Option(
        [], "--table", "-t", help="Table to load, as NAME or NAME:ALIAS (repeatable)"
    ),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Completion model"),
    token: Optional[str] = typer.Option(None, "--token", help="Table API bearer token"),
    env_file: Optional[Path] = typer.Option(None, "--env", "-e", help="Path to .env file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """
    Ask a question about the configured tables.

    Examples:
        formassist ask "what is the total amount?" -t Orders
        formassist ask "who ordered most?" -t Orders:o -t Customers:c
        formassist ask "how many rows are there?"      # uses every table
    """
    settings = _load(env_file, verbose)
    session = _session(settings, token)

    try:
        refs = _parse_table_option(tables) or parse_table_references(
            settings.default_table_references
        )
    except (FormAssistError, ValueError) as e:
        console.print(f"[red]Invalid table references: {e}[/red]")
        raise typer.Exit(1)

    chosen_model = settings.llm.resolve_model(model)

    async def _run():
        async with QueryPipeline.from_settings(settings) as pipeline:
            return await pipeline.run(
                question, refs, session, settings.llm.api_key or "", chosen_model
            )

    result = asyncio.run(_run())

    if isinstance(result, PipelineOk):
        console.print(result.answer, markup=False)
        if verbose and result.usage:
            console.print(
                f"[dim]tokens: prompt={result.usage.prompt_tokens} "
                f"completion={result.usage.completion_tokens}[/dim]"
            )
        return

    console.print(result.display_text(), style="red", markup=False)
    raise typer.Exit(1)


@app.command("tables")
def list_tables(
    token: Optional[str] = typer.Option(None, "--token", help="Table API bearer token"),
    env_file: Optional[Path] = typer.Option(None, "--env", "-e", help="Path to .env file"),
):
    """
    List the tables visible to the configured credentials.
    """
    settings = _load(env_file)
    session = _session(settings, token)

    async def _list():
        async with TableGateway(timeout=settings.table_api.timeout) as gateway:
            return await gateway.list_tables(session)

    try:
        summaries = asyncio.run(_list())
    except FormAssistError as e:
        console.print(f"[red]Failed to list tables: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Data Tables")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Display Name", style="yellow")
    table.add_column("Columns", justify="right", style="magenta")

    for summary in summaries:
        table.add_row(str(summary.id), summary.name, summary.display_name, str(len(summary.columns)))

    console.print(table)


@app.command()
def config(
    env_file: Optional[Path] = typer.Option(None, "--env", "-e", help="Path to .env file"),
):
    """
    Show current configuration.
    """
    settings = _load(env_file)

    console.print("\n[bold blue]FormAssist Configuration[/bold blue]")
    console.print("-" * 40)

    table = Table(show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Table API URL", settings.table_api.base_url or "[dim]not set[/dim]")
    table.add_row("Table API token", _mask(settings.table_api.token))
    table.add_row("LLM API base", settings.llm.api_base)
    table.add_row("LLM API key", _mask(settings.llm.api_key))
    table.add_row("Default model", settings.llm.default_model)
    table.add_row("Supported models", ", ".join(settings.llm.models))
    table.add_row("Default tables", settings.default_table_references)
    table.add_row("Log level", settings.log_level)

    console.print(table)


@app.command()
def version():
    """
    Show version information.
    """
    console.print(f"FormAssist version: {__version__}")


def main():
    app()


if __name__ == "__main__":
    main()

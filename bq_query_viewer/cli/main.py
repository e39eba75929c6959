"""CLI entry point for bq-query-viewer."""

import asyncio
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bq_query_viewer.config import ConfigurationError, get_settings, validate_config
from bq_query_viewer.exceptions import QueryViewerError
from bq_query_viewer.logging_config import configure_logging, get_logger

app = typer.Typer(
    name="bq-query-viewer",
    help="Rebuild runnable SQL from executed BigQuery query jobs",
    add_completion=False,
)

# stdout carries the SQL; everything else goes to stderr
console = Console(stderr=True)


def run_async(coro):
    """Helper to run async code from sync CLI."""
    return asyncio.run(coro)


def _fail(message: str) -> NoReturn:
    console.print(f"[red]✗ {escape(message)}[/red]")
    raise typer.Exit(1)


def _display_check_result(check) -> None:
    """Helper to display sqlglot check results."""
    if not check.is_valid:
        for error in check.errors:
            console.print(f"[yellow]⚠ {escape(error)}[/yellow]")
        return

    table = Table(title="Referenced Tables")
    table.add_column("Table", style="cyan")
    table.add_column("Qualified", justify="center")
    for reference in check.tables:
        table.add_row(
            reference.qualified_name,
            "[green]yes[/green]" if reference.is_qualified else "[yellow]no[/yellow]",
        )
    console.print(table)

    if check.unqualified_tables:
        names = ", ".join(t.table for t in check.unqualified_tables)
        console.print(f"[yellow]⚠ Tables without a dataset: {names}[/yellow]")
    else:
        console.print(f"[green]✓ Parsed {check.statement_count} statement(s)[/green]")


@app.command("print-sql")
def print_sql(
    job_id: Optional[str] = typer.Argument(
        None,
        help="Job ID, e.g. 'project.location.job_id' or 'project:location.job_id'",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Write the SQL document to this file instead of stdout",
        dir_okay=False,
    ),
    edit: bool = typer.Option(
        False,
        "--edit", "-e",
        help="Open the SQL document in $EDITOR",
    ),
    check: bool = typer.Option(
        False,
        "--check",
        help="Parse the rebuilt SQL and report tables still missing a dataset",
    ),
):
    """Print the SQL of a query job with parameters and table names filled in."""
    from bq_query_viewer.rewriters.sql_check import check_sql
    from bq_query_viewer.services.reconstruction import (
        LOCATOR_EXAMPLE,
        QueryReconstructionService,
    )

    settings = get_settings()
    configure_logging(settings)
    try:
        validate_config(settings, strict=True)
    except ConfigurationError as e:
        _fail(str(e))

    if job_id is None:
        # Ctrl-C here aborts before anything reaches BigQuery
        job_id = typer.prompt(
            f"Job ID (e.g. '{LOCATOR_EXAMPLE}')",
            default="",
            show_default=False,
            err=True,
        )

    service = QueryReconstructionService(settings=settings)

    async def _reconstruct():
        with console.status("Fetching job..."):
            return await service.reconstruct(job_id)

    try:
        result = run_async(_reconstruct())
    except QueryViewerError as e:
        _fail(e.message)

    get_logger(__name__).info(
        "query_reconstructed",
        job=str(result.locator),
        parameters=len(result.metadata.parameters),
        child_jobs=result.child_job_count,
        qualified_tables=len(result.qualified_tables),
        warnings=len(result.warnings),
    )

    for warning in result.warnings:
        console.print(f"[yellow]⚠ {escape(warning)}[/yellow]")

    if check:
        _display_check_result(check_sql(result.query, dialect=settings.sql_check_dialect))

    document = result.document
    if edit:
        edited = typer.edit(document, extension=".sql", require_save=False)
        if edited is not None:
            document = edited

    if output:
        output.write_text(document + "\n")
        console.print(f"[green]✓ Wrote {output}[/green]")
    elif not edit:
        typer.echo(document)


@app.command("parse-locator")
def parse_locator(
    job_id: str = typer.Argument(..., help="Job ID to parse"),
):
    """Show how a job id is split into project, location and job."""
    from bq_query_viewer.services.reconstruction import parse_job_locator

    try:
        locator = parse_job_locator(job_id)
    except QueryViewerError as e:
        _fail(e.message)

    table = Table(title="Job Locator")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Project", locator.project_id)
    table.add_row("Location", locator.location)
    table.add_row("Job", locator.job_id)
    console.print(table)


if __name__ == "__main__":
    app()

"""CLI command for converting datasets between formats.

Usage:
    graphsync sync --from jsonld --to excel --input graph.jsonld --output graph.xlsx
    graphsync sync --from excel --to jsonld --input graph.xlsx --output graph.jsonld \\
        --context context.json
    graphsync sync --from jsonld --to rdf --input graph.jsonld --output graph.out \\
        --rdf-format nquads
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import typer

from graphsync.sync import DataFormat

app = typer.Typer(help="Convert a dataset between JSON-LD, workbook and RDF files")


class RdfFormatName(str, Enum):
    TURTLE = "turtle"
    NTRIPLES = "ntriples"
    NQUADS = "nquads"
    TRIG = "trig"
    JSONLD = "jsonld"


@app.callback(invoke_without_command=True)
def sync(
    source: DataFormat = typer.Option(
        ...,
        "--from",
        help="Input format",
    ),
    target: DataFormat = typer.Option(
        ...,
        "--to",
        help="Output format",
    ),
    input_path: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help="Input file",
    ),
    output_path: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Output file (replaced atomically)",
    ),
    context_path: Path | None = typer.Option(
        None,
        "--context",
        "-c",
        help="JSON-LD context used to compact JSON-LD output",
    ),
    rdf_format: RdfFormatName | None = typer.Option(
        None,
        "--rdf-format",
        help="RDF format (default: from the file extension, else the configured default)",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    ),
    log_json: bool | None = typer.Option(
        None,
        "--log-json/--no-log-json",
        help="Emit logs as JSON",
    ),
) -> None:
    """Convert INPUT in one format into OUTPUT in another.

    Supported pairs: jsonld↔excel, jsonld↔rdf and excel↔rdf.
    """
    from rich.console import Console
    from rich.markup import escape

    from graphsync.adapters.rdf import RdfFormat
    from graphsync.config import settings
    from graphsync.errors import GraphSyncError
    from graphsync.observability.logging import configure_logging
    from graphsync.sync import SyncRequest, run_sync

    console = Console(stderr=True)

    configure_logging(
        json_format=settings.log_json if log_json is None else log_json,
        level=log_level or settings.log_level,
    )

    try:
        request = SyncRequest(
            source=source,
            target=target,
            input_path=input_path,
            output_path=output_path,
            context_path=context_path,
            rdf_format=RdfFormat.from_name(rdf_format.value) if rdf_format else None,
            json_indent=settings.json_indent,
            default_rdf_format=RdfFormat.from_name(settings.default_rdf_format),
        )
        nodes = run_sync(request)
    except (GraphSyncError, OSError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    console.print(
        f"[green]✓[/green] Converted {len(nodes)} nodes from {source.value} to {target.value}: "
        f"{escape(str(output_path))}"
    )

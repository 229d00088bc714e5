"""CLI commands for graphsync.

Provides command-line interface using Typer:
- graphsync sync: Convert a dataset between JSON-LD, workbook and RDF files

Usage:
    graphsync --help
    graphsync sync --from jsonld --to excel --input graph.jsonld --output graph.xlsx
    graphsync sync --from excel --to rdf --input graph.xlsx --output graph.nq
"""

import typer

from graphsync.cli.sync_cmd import app as sync_app

# Main CLI application
app = typer.Typer(
    name="graphsync",
    help="graphsync: convert property graphs between JSON-LD, spreadsheets and RDF",
    no_args_is_help=True,
)

# Add subcommands
app.add_typer(sync_app, name="sync")


@app.callback()
def callback() -> None:
    """graphsync: convert property graphs between JSON-LD, spreadsheets and RDF."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

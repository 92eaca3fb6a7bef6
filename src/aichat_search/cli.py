"""CLI entry point for aichat-search."""

import json
import logging
from pathlib import Path

import click
import uvicorn

from .core import Scope
from .errors import MissingQueryError
from .search import search as run_search


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Search AI chat history across Cursor's conversation stores."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--port", default=8080, help="Port to serve on.")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
def serve(port: int, host: str):
    """Start the search API."""
    click.echo(f"Starting aichat-search on http://{host}:{port}")
    uvicorn.run("aichat_search.server:app", host=host, port=port, reload=False)


@main.command()
@click.argument("query")
@click.option(
    "--type", "scope",
    type=click.Choice([s.value for s in Scope]),
    default=Scope.ALL.value,
    help="Conversation kinds to search.",
)
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="workspaceStorage directory (defaults to the platform location).",
)
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON.")
def search(query: str, scope: str, root: Path | None, as_json: bool):
    """Search conversations for QUERY."""
    try:
        results = run_search(query, scope, root)
    except MissingQueryError as e:
        raise click.UsageError(str(e))

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))
        return

    if not results:
        click.echo("No matches.")
        return
    for r in results:
        where = r.workspace_folder or r.workspace_id
        click.echo(f"[{r.kind}] {r.chat_title}  ({where})")
        click.echo(f"    {r.matching_text}")

"""
Command line entry point for the Pinecone SDK.

Small operator tool on top of the client: inspect indexes, fetch and query
vectors, and diagnose configuration.
"""

import json
import sys
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from pinecone_sdk.cli_commands.doctor import doctor
from pinecone_sdk.core.exceptions import ConfigurationError, PineconeApiError, PineconeSDKError
from pinecone_sdk.core.logging import set_correlation_id, setup_logging
from pinecone_sdk.data.control_client import PineconeClient

console = Console()


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--correlation-id", help="Set correlation ID for request tracing")
@click.pass_context
def main(ctx, debug: bool, correlation_id: Optional[str]):
    """Inspect and query Pinecone indexes."""
    ctx.ensure_object(dict)

    setup_logging(debug=debug, rich_output=True)

    if correlation_id:
        set_correlation_id(correlation_id)

    ctx.obj["debug"] = debug
    ctx.obj["correlation_id"] = correlation_id


main.add_command(doctor)


def _fail(ctx, error: Exception) -> None:
    if isinstance(error, ConfigurationError):
        console.print(f"[red]Configuration Error:[/red] {error}")
    elif isinstance(error, PineconeApiError):
        console.print(f"[red]API Error ({error.status_code}):[/red] {error.message or error.body}")
    elif isinstance(error, PineconeSDKError):
        console.print(f"[red]Error:[/red] {error}")
    else:
        console.print(f"[red]Unexpected Error:[/red] {error}")
        if ctx.obj and ctx.obj.get("debug"):
            import traceback

            console.print(traceback.format_exc())
    sys.exit(1)


@main.command("list-indexes")
@click.pass_context
def list_indexes(ctx):
    """List indexes in the project."""
    try:
        with PineconeClient() as client:
            indexes = client.list_indexes()

        table = Table(title="Indexes")
        table.add_column("Name", style="cyan")
        table.add_column("Kind", style="white")
        table.add_column("Dimension", style="white")
        table.add_column("Metric", style="white")
        table.add_column("Status", style="white")
        table.add_column("Host", style="dim")

        for idx in indexes:
            state = idx.status.state if idx.status and idx.status.state else "unknown"
            status_text = "[green]Ready[/green]" if idx.ready else f"[yellow]{state}[/yellow]"
            table.add_row(
                idx.name,
                idx.spec.kind if idx.spec else "unknown",
                str(idx.dimension) if idx.dimension else "-",
                getattr(idx.metric, "value", idx.metric),
                status_text,
                idx.host,
            )

        console.print(table)
    except Exception as e:
        _fail(ctx, e)


@main.command("describe-index")
@click.argument("name")
@click.pass_context
def describe_index(ctx, name: str):
    """Show one index as JSON."""
    try:
        with PineconeClient() as client:
            idx = client.describe_index(name)
        console.print_json(json.dumps(idx.to_wire()))
    except Exception as e:
        _fail(ctx, e)


@main.command("index-stats")
@click.option("--host", required=True, help="Index host")
@click.pass_context
def index_stats(ctx, host: str):
    """Show vector counts per namespace."""
    try:
        with PineconeClient() as client:
            stats = client.index(host).describe_index_stats()

        table = Table(title=f"Index Stats (dimension {stats.dimension}, fullness {stats.index_fullness:.2%})")
        table.add_column("Namespace", style="cyan")
        table.add_column("Vectors", style="white")
        for ns, summary in sorted(stats.namespaces.items()):
            table.add_row(ns or "(default)", str(summary.vector_count))
        table.add_row("[bold]Total[/bold]", f"[bold]{stats.total_vector_count}[/bold]")

        console.print(table)
    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.option("--host", required=True, help="Index host")
@click.option("--namespace", default="", help="Namespace (default: __default__)")
@click.argument("ids", nargs=-1, required=True)
@click.pass_context
def fetch(ctx, host: str, namespace: str, ids: Tuple[str, ...]):
    """Fetch vectors by id."""
    try:
        with PineconeClient() as client:
            res = client.index(host, namespace=namespace).fetch_vectors(list(ids))

        missing = [i for i in ids if i not in res.vectors]
        console.print_json(json.dumps({k: v.to_wire() for k, v in res.vectors.items()}))
        if missing:
            console.print(f"[yellow]Not found:[/yellow] {', '.join(missing)}")
    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.option("--host", required=True, help="Index host")
@click.option("--namespace", default="", help="Namespace (default: __default__)")
@click.option("--top-k", type=int, default=10, help="Number of matches (default: 10)")
@click.option("--id", "vector_id", help="Query by the stored vector with this id")
@click.option("--vector", help="Query vector as a JSON list of floats")
@click.option("--include-metadata", is_flag=True, help="Return match metadata")
@click.pass_context
def query(
    ctx,
    host: str,
    namespace: str,
    top_k: int,
    vector_id: Optional[str],
    vector: Optional[str],
    include_metadata: bool,
):
    """Query an index by vector id or by vector values."""
    if bool(vector_id) == bool(vector):
        console.print("[red]Error:[/red] pass exactly one of --id or --vector")
        sys.exit(1)

    try:
        with PineconeClient() as client:
            conn = client.index(host, namespace=namespace)
            if vector_id:
                res = conn.query_by_vector_id(vector_id, top_k, include_metadata=include_metadata)
            else:
                res = conn.query_by_vector_values(
                    json.loads(vector), top_k, include_metadata=include_metadata
                )

        table = Table(title=f"Top {top_k} matches in {res.namespace}")
        table.add_column("ID", style="cyan")
        table.add_column("Score", style="white")
        table.add_column("Metadata", style="dim")
        for match in res.matches:
            meta = json.dumps(match.vector.metadata) if match.vector.metadata else ""
            table.add_row(match.vector.id, f"{match.score:.4f}", meta)

        console.print(table)
    except Exception as e:
        _fail(ctx, e)


if __name__ == "__main__":
    main()

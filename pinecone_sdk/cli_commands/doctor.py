"""
"Doctor" command: configuration and connectivity diagnostics.

Prints a short report:
 - Config summary and required keys
 - Control plane reachability (list_indexes)
 - Readiness of each index found
"""

from __future__ import annotations

import click

from pinecone_sdk.core.config import print_configuration_summary, validate_required_settings
from pinecone_sdk.core.exceptions import PineconeSDKError
from pinecone_sdk.data.control_client import PineconeClient


@click.command()
@click.option("--host", help="Control plane host override")
def doctor(host: str | None):
    """Run Pinecone SDK diagnostics and print a summary report."""
    click.echo("Pinecone SDK Doctor")
    click.echo("=" * 40)

    print_configuration_summary()

    missing = validate_required_settings()
    if missing:
        click.echo("\nConfiguration Issues:")
        for item in missing:
            click.echo(f"  ✗ Missing: {item}")
        click.echo("\nDone.")
        raise SystemExit(1)

    try:
        client = PineconeClient(host=host)
    except PineconeSDKError as e:
        click.echo(f"\n✗ Client init failed: {e}")
        raise SystemExit(1)

    with client:
        try:
            indexes = client.list_indexes()
        except PineconeSDKError as e:
            click.echo(f"\n✗ Control plane unreachable ({client.host}): {e}")
            raise SystemExit(1)

        click.echo(f"\n✓ Control plane healthy ({client.host})")
        if not indexes:
            click.echo("  (no indexes)")
        for idx in indexes:
            mark = "✓" if idx.ready else "-"
            state = idx.status.state if idx.status else "unknown"
            click.echo(f"  {mark} {idx.name} | {state} | {idx.host or 'no host'}")

    click.echo("\nDone.")

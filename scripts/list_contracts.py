#!/usr/bin/python3

from datetime import datetime, timezone
from pathlib import Path

import click
from ape.cli import ConnectedProviderCommand

from curation_deploy.ape_backend import active_network
from curation_deploy.artifacts import ArtifactStore


@click.command(cls=ConnectedProviderCommand, name="list-contracts")
@click.option(
    "--artifacts-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding the <contract>.<network>.json artifacts",
    required=False,
)
def cli(artifacts_dir):
    """List all contracts recorded for the active network."""
    network = active_network()
    records = ArtifactStore(directory=artifacts_dir).records(network)
    click.secho(f"\n{network}", fg="green")
    if not records:
        click.secho("    No contracts recorded.", fg="yellow")
        return

    for index, record in enumerate(records, start=1):
        deployed_at = datetime.fromtimestamp(record.deployed_at, tz=timezone.utc)
        click.secho(
            f"    {index}. {record.name} {record.address} ({deployed_at:%Y-%m-%d %H:%M} UTC)",
            fg="cyan",
        )
        if record.implementation:
            click.secho(f"        implementation {record.implementation}", fg="cyan")


if __name__ == "__main__":
    cli()

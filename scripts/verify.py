from pathlib import Path

import click
from ape.cli import ConnectedProviderCommand, network_option

from curation_deploy.ape_backend import ApeBackend, active_network, check_etherscan_plugin
from curation_deploy.artifacts import ArtifactStore
from curation_deploy.cli import exit_on_failure


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@click.option(
    "--contract-name",
    "-c",
    "contract_names",
    help="Contract to verify",
    type=click.STRING,
    required=True,
    multiple=True,
)
@click.option(
    "--artifacts-dir",
    type=click.Path(file_okay=False, exists=True, path_type=Path),
    help="Directory holding the <contract>.<network>.json artifacts",
    required=False,
)
@exit_on_failure
def cli(network, contract_names, artifacts_dir):
    """Verify deployed contracts recorded for the active network."""
    check_etherscan_plugin()
    store = ArtifactStore(directory=artifacts_dir)
    backend = ApeBackend()
    network_name = active_network()

    # read every record first so a missing one fails before anything is published
    records = [store.read(network_name, contract_name) for contract_name in contract_names]
    for record in records:
        if record.implementation:
            # we have a proxy, but need the underlying implementation
            print(
                f"Proxy contract detected; verifying implementation contract at "
                f"{record.implementation}"
            )
        address = record.implementation or record.address
        print(f"(i) Verifying {record.name}...")
        backend.verify(address)


if __name__ == "__main__":
    cli()

from pathlib import Path

import click

from curation_deploy.types import SignerAddress, StepIndex

plan_option = click.option(
    "--plan",
    "-p",
    "plan_filepath",
    help="Deployment plan YAML file.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=True,
)

artifacts_dir_option = click.option(
    "--artifacts-dir",
    help="Directory holding the <contract>.<network>.json artifacts; overrides the plan.",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
)

skip_deployed_option = click.option(
    "--skip-deployed",
    help="Reuse contracts that already have an artifact on this network instead of redeploying.",
    is_flag=True,
    default=False,
)

no_overwrite_option = click.option(
    "--no-overwrite",
    help="Fail instead of replacing an existing artifact.",
    is_flag=True,
    default=False,
)

start_at_option = click.option(
    "--start-at",
    help="Index of the first plan step to run.",
    type=StepIndex(),
    default=0,
)

impersonate_option = click.option(
    "--impersonate",
    "-i",
    help="Send wiring transactions as this address (fork/test networks only).",
    type=SignerAddress(),
    required=False,
)

dry_run_option = click.option(
    "--dry-run",
    help="Resolve every step without sending transactions.",
    is_flag=True,
    default=False,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions without asking for confirmation.",
    is_flag=True,
    default=False,
)

verify_option = click.option(
    "--verify",
    help="Publish contract sources to the block explorer after deploying.",
    is_flag=True,
    default=False,
)

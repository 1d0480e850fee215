#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from curation_deploy.cli import deploy_plan_file
from curation_deploy.options import (
    artifacts_dir_option,
    autosign_option,
    dry_run_option,
    impersonate_option,
    no_overwrite_option,
    plan_option,
    skip_deployed_option,
    start_at_option,
    verify_option,
)


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@plan_option
@artifacts_dir_option
@skip_deployed_option
@no_overwrite_option
@start_at_option
@impersonate_option
@dry_run_option
@autosign_option
@verify_option
def cli(
    network,
    account,
    plan_filepath,
    artifacts_dir,
    skip_deployed,
    no_overwrite,
    start_at,
    impersonate,
    dry_run,
    autosign,
    verify,
):
    """Run a deployment plan on the selected network."""
    deploy_plan_file(
        plan_filepath=plan_filepath,
        account=account,
        impersonate=impersonate,
        artifacts_dir=artifacts_dir,
        skip_deployed=skip_deployed,
        overwrite=not no_overwrite,
        start_at=start_at,
        dry_run=dry_run,
        autosign=autosign,
        verify=verify,
    )


if __name__ == "__main__":
    cli()

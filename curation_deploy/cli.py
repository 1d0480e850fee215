import functools
import sys
from pathlib import Path
from typing import List, Optional

import click
from ape.api import AccountAPI

from curation_deploy.ape_backend import ape_context
from curation_deploy.artifacts import ArtifactStore, ContractRecord, OverwritePolicy
from curation_deploy.context import ExecutionContext
from curation_deploy.errors import DeploymentError
from curation_deploy.orchestrator import Orchestrator, RedeployPolicy
from curation_deploy.plan import DeploymentPlan


def exit_on_failure(function):
    """Prints a failed run's error to stderr and exits with status 1."""

    @functools.wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except DeploymentError as error:
            click.secho(f"Deployment failed: {error}", fg="red", err=True)
            sys.exit(1)

    return wrapper


def _display_records(records: List[ContractRecord]) -> None:
    click.secho("\nDeployed contracts", fg="green")
    for index, record in enumerate(records, start=1):
        click.secho(f"    {index}. {record.name} {record.address}", fg="cyan")


def _display_resolution(resolved) -> None:
    click.secho("\nDry run; nothing was sent", fg="yellow")
    for index, (step, named_args) in enumerate(resolved):
        click.secho(f"    [{index}] {step.describe()}", fg="cyan")
        for name, value in named_args.items():
            click.echo(f"\t{name}={value}")


def execute_plan(
    plan: DeploymentPlan,
    context: ExecutionContext,
    store: Optional[ArtifactStore] = None,
    redeploy: RedeployPolicy = RedeployPolicy.ALWAYS,
    start_at: int = 0,
    dry_run: bool = False,
) -> List[ContractRecord]:
    store = store or ArtifactStore(directory=plan.artifacts_dir)
    orchestrator = Orchestrator(context=context, store=store, redeploy=redeploy)
    if dry_run:
        _display_resolution(orchestrator.validate(plan))
        return []
    records = orchestrator.run(plan, start_at=start_at)
    _display_records(records)
    return records


@exit_on_failure
def deploy_plan_file(
    plan_filepath: Path,
    account: Optional[AccountAPI] = None,
    impersonate: Optional[str] = None,
    artifacts_dir: Optional[Path] = None,
    skip_deployed: bool = False,
    overwrite: bool = True,
    start_at: int = 0,
    dry_run: bool = False,
    autosign: bool = False,
    verify: bool = False,
) -> List[ContractRecord]:
    """Runs a plan file on the connected network; the entry point of every script."""
    plan = DeploymentPlan.from_yaml(plan_filepath)
    context = ape_context(
        account=account,
        impersonate=impersonate or plan.impersonate,
        autosign=autosign,
        verify=verify,
    )
    store = ArtifactStore(
        directory=artifacts_dir or plan.artifacts_dir,
        overwrite=OverwritePolicy.OVERWRITE if overwrite else OverwritePolicy.FAIL,
    )
    redeploy = RedeployPolicy.SKIP_EXISTING if skip_deployed else RedeployPolicy.ALWAYS
    return execute_plan(
        plan,
        context=context,
        store=store,
        redeploy=redeploy,
        start_at=start_at,
        dry_run=dry_run,
    )

#!/usr/bin/python3

from curation_deploy.cli import deploy_plan_file
from curation_deploy.plan import plan_filepath

PLAN_FILEPATH = plan_filepath("box")


def main():
    """
    Deploys Box behind a TransparentUpgradeableProxy, initialized with 43.
    The proxy address is recorded as abis/Box.<network>.json

    ape run deploy_box --network ethereum:local:test
    """
    deploy_plan_file(plan_filepath=PLAN_FILEPATH)

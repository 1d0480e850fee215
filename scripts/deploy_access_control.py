#!/usr/bin/python3

from curation_deploy.cli import deploy_plan_file
from curation_deploy.plan import plan_filepath

PLAN_FILEPATH = plan_filepath("access-control")


def main():
    """
    Deploys AccessControl and records it as abis/AccessControl.<network>.json

    ape run deploy_access_control --network ethereum:dev
    """
    deploy_plan_file(plan_filepath=PLAN_FILEPATH)

#!/usr/bin/python3

from curation_deploy.cli import deploy_plan_file
from curation_deploy.plan import plan_filepath

PLAN_FILEPATH = plan_filepath("set-auction")


def main():
    """Points EditionCurationMinter at the recorded CANFTMarket."""
    deploy_plan_file(plan_filepath=PLAN_FILEPATH)

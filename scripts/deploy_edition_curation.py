#!/usr/bin/python3

from curation_deploy.cli import deploy_plan_file
from curation_deploy.plan import plan_filepath

PLAN_FILEPATH = plan_filepath("edition-curation")


def main():
    """
    Deploys EditionCurationMinter wired to KODA V2, the CANFTMarket and the
    self service access and frequency controls recorded for the active network.

    ape run deploy_edition_curation --network ethereum:dev
    """
    deploy_plan_file(plan_filepath=PLAN_FILEPATH)

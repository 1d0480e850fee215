#!/usr/bin/python3

from curation_deploy.cli import deploy_plan_file
from curation_deploy.plan import plan_filepath

PLAN_FILEPATH = plan_filepath("auction")


def main():
    """
    Deploys CANFTMarket against the AccessControl and KnownOriginDigitalAssetV2
    contracts recorded for the active network; the deployer becomes the market owner.

    ape run deploy_auction --network ethereum:dev
    """
    deploy_plan_file(plan_filepath=PLAN_FILEPATH)

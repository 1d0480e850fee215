#!/usr/bin/python3

from curation_deploy.ape_backend import active_network
from curation_deploy.cli import deploy_plan_file
from curation_deploy.constants import KOVAN_FORK
from curation_deploy.plan import plan_filepath

PLAN_FILEPATH = plan_filepath("permissions")

# Owner of KnownOriginDigitalAssetV2 and SelfServiceFrequencyControls on kovan
KODA_OWNER = "0xdB6E076eA582fbE875f6998B610422b9b162a42a"

IMPERSONATE = {
    KOVAN_FORK: KODA_OWNER,
}


def main():
    """
    Whitelists EditionCurationMinter on the frequency controls and grants it
    the KnownOrigin minting role on KODA V2.

    On a kovan fork the KODA owner is impersonated; everywhere else the
    selected account must be the owner.

    ape run add_permissions --network ethereum:kovan-fork:foundry
    """
    deploy_plan_file(plan_filepath=PLAN_FILEPATH, impersonate=IMPERSONATE.get(active_network()))

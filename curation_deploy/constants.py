from pathlib import Path

import curation_deploy

#
# Filesystem
#

PACKAGE_DIR = Path(curation_deploy.__file__).parent
PLANS_DIR = PACKAGE_DIR / "plans"
ARTIFACTS_DIRNAME = "abis"

#
# Networks
#

DEV = "dev"
LOCAL = "local"
KOVAN_FORK = "kovan-fork"

# Networks where impersonation and other test-only capabilities are allowed.
TEST_NETWORKS = (LOCAL, DEV)
FORK_NETWORK_SUFFIXES = ("-fork", "_fork")

DEFAULT_ECOSYSTEM = "ethereum"

#
# Contracts
#

OZ_DEPENDENCY_NAME = "openzeppelin"
OZ_DEPENDENCY_VERSION = "5.0.0"
PROXY_CONTRACT_NAME = "TransparentUpgradeableProxy"
DEFAULT_INITIALIZER = "initialize"

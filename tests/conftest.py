import itertools

import pytest
from eth_utils import to_checksum_address

from curation_deploy.artifacts import ArtifactStore
from curation_deploy.chain import ChainBackend, Deployment
from curation_deploy.constants import DEV
from curation_deploy.context import ExecutionContext, SignerSource
from curation_deploy.errors import TransactionReverted

DEPLOYER_ADDRESS = "0x00000000000000000000000000000000000000d1"
KODA_OWNER = to_checksum_address("0xdb6e076ea582fbe875f6998b610422b9b162a42a")


# Fake contracts; every method receives the sending account first.


class FakeContract:
    def __init__(self, address, args, deployer):
        self.address = address
        self.args = list(args)
        self.deployer = deployer


class AccessControl(FakeContract):
    pass


class Market(FakeContract):
    access_control = None

    def setAccessControl(self, sender, access_control):
        if sender.address != self.deployer:
            raise TransactionReverted("Ownable: caller is not the owner")
        self.access_control = access_control


class Box(FakeContract):
    initialized = False
    value = None

    def initialize(self, sender, value):
        if self.initialized:
            raise TransactionReverted("Initializable: contract is already initialized")
        self.initialized = True
        self.value = value


class RoleGate(FakeContract):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.role_a = set()

    def grantRoleA(self, sender, account):
        self.role_a.add(account)

    def requireRoleAGranted(self, sender, account):
        if account not in self.role_a:
            raise TransactionReverted("role A not granted")


class OwnedByKoda(FakeContract):
    def addAddressToWhitelist(self, sender, account):
        if sender.address != KODA_OWNER:
            raise TransactionReverted("caller is not the owner")


FAKE_CONTRACTS = {
    "AccessControl": AccessControl,
    "Market": Market,
    "CANFTMarket": Market,
    "Box": Box,
    "RoleGate": RoleGate,
    "SelfServiceFrequencyControls": OwnedByKoda,
}


class FakeAccount:
    def __init__(self, address):
        self.address = to_checksum_address(address)


class FakeReceipt:
    def __init__(self, txn_hash, method):
        self.txn_hash = txn_hash
        self.method = method
        self.failed = False


class FakeChain(ChainBackend):
    """In-memory chain: instant confirmations, reverts raised by the fake contracts."""

    def __init__(self):
        self.contracts = dict()
        self.deployments = list()
        self.calls = list()
        self.impersonated = list()
        self.verified = list()
        self.reverting = set()
        self._counter = itertools.count(1)

    def _next_address(self):
        return to_checksum_address(f"0x{next(self._counter):040x}")

    def _tx_hash(self):
        return f"0x{len(self.deployments) + len(self.calls):064x}"

    def _call(self, instance, method, args, sender):
        self.calls.append((instance.address, method, list(args), sender.address))
        return getattr(instance, method)(sender, *args)

    def deploy(self, contract_name, args, sender):
        if contract_name in self.reverting:
            raise TransactionReverted(f"{contract_name} constructor reverted")
        address = self._next_address()
        if contract_name == self.proxy_contract_name:
            logic, owner, data = args
            implementation = self.contracts[logic]
            instance = type(implementation)(address, [], sender.address)
            self.contracts[address] = instance
            if data:
                method, init_args = data
                self._call(instance, method, init_args, sender)
        else:
            contract_type = FAKE_CONTRACTS.get(contract_name, FakeContract)
            self.contracts[address] = contract_type(address, args, sender.address)
        self.deployments.append((contract_name, list(args), sender.address))
        return Deployment(address=address, instance=self.contracts[address], tx_hash=self._tx_hash())

    def deployed(self, contract_name):
        return [d for d in self.deployments if d[0] == contract_name]

    def at(self, contract_name, address):
        return self.contracts[address]

    def encode_call(self, contract_name, address, method, args):
        if not hasattr(self.contracts[address], method):
            raise TransactionReverted(f"{contract_name} has no method {method}")
        return method, list(args)

    def transact(self, contract_name, address, method, args, sender):
        instance = self.contracts.get(address)
        if instance is None:
            raise TransactionReverted(f"no contract at {address}")
        if not hasattr(instance, method):
            raise TransactionReverted(f"{contract_name} has no method {method}")
        self._call(instance, method, args, sender)
        return FakeReceipt(self._tx_hash(), method)

    def impersonate(self, address):
        self.impersonated.append(address)
        return FakeAccount(address)

    def verify(self, address):
        self.verified.append(address)


# Fixtures


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def deployer_account():
    return FakeAccount(DEPLOYER_ADDRESS)


@pytest.fixture
def artifacts_dir(tmp_path):
    return tmp_path / "abis"


@pytest.fixture
def store(artifacts_dir):
    return ArtifactStore(directory=artifacts_dir)


@pytest.fixture
def make_context(chain, deployer_account):
    def _make_context(network=DEV, impersonate=None, verify=False):
        return ExecutionContext(
            network=network,
            signer_source=SignerSource(account=deployer_account, impersonate=impersonate),
            backend=chain,
            autosign=True,
            verify=verify,
        )

    return _make_context


@pytest.fixture
def context(make_context):
    return make_context()

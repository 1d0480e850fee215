import typing
from collections import OrderedDict
from typing import Any, Dict, Sequence, Set

from eth_utils import to_checksum_address

from curation_deploy.chain import ChainBackend, Deployment
from curation_deploy.confirm import _confirm_resolution
from curation_deploy.constants import DEFAULT_INITIALIZER
from curation_deploy.errors import AlreadyInitialized, DeploymentFailed, TransactionReverted

if typing.TYPE_CHECKING:
    from curation_deploy.context import ExecutionContext

# Revert reasons of OpenZeppelin's Initializable (4.x message, 5.x custom error)
ALREADY_INITIALIZED_REASONS = ("already initialized", "InvalidInitialization")


def _is_already_initialized(reason: str) -> bool:
    return any(marker in (reason or "") for marker in ALREADY_INITIALIZED_REASONS)


def _named(args: Sequence[Any], names: Sequence[str]) -> OrderedDict:
    names = names or [f"arg{i}" for i in range(len(args))]
    return OrderedDict(zip(names, args))


class ContractDeployer:
    """
    Deploys contracts, either directly or behind a transparent upgradeable proxy.

    Nothing is recorded here: a deployment that raises has produced no artifact, and
    deploying the same contract twice creates two instances. Only upgradeable deployments
    confirmed by this deployer are remembered, so their initializer never runs twice.
    """

    def __init__(
        self,
        backend: ChainBackend,
        account: Any,
        network: str,
        autosign: bool = False,
    ):
        self.backend = backend
        self.account = account
        self.network = network
        self.autosign = autosign
        self._proxies: Dict[str, Deployment] = dict()
        self._initialized: Set[str] = set()

    @classmethod
    def from_context(cls, context: "ExecutionContext") -> "ContractDeployer":
        return cls(
            backend=context.backend,
            account=context.signer_source.account,
            network=context.network,
            autosign=context.autosign,
        )

    def forget_proxies(self) -> None:
        """
        Starts a new run: proxies confirmed earlier are deployed again if asked for.
        Initialized proxies stay guarded against a second `initialize`.
        """
        self._proxies.clear()

    def _deploy(self, contract_name: str, args: Sequence[Any]) -> Deployment:
        try:
            return self.backend.deploy(contract_name, list(args), sender=self.account)
        except TransactionReverted as error:
            raise DeploymentFailed(
                f"Deployment of {contract_name} failed: {error.reason}",
                network=self.network,
                contract_name=contract_name,
            ) from error

    def deploy_direct(
        self,
        contract_name: str,
        constructor_args: Sequence[Any],
        parameter_names: Sequence[str] = (),
    ) -> Deployment:
        if not self.autosign:
            _confirm_resolution(_named(constructor_args, parameter_names), contract_name)
        deployment = self._deploy(contract_name, constructor_args)
        print(f"(i) {contract_name} deployed to {deployment.address}")
        return deployment

    def deploy_upgradeable(
        self,
        contract_name: str,
        init_args: Sequence[Any],
        initializer: str = DEFAULT_INITIALIZER,
        parameter_names: Sequence[str] = (),
    ) -> Deployment:
        confirmed = self._proxies.get(contract_name)
        if confirmed is not None:
            print(
                f"(i) {contract_name} proxy already confirmed at {confirmed.address}; "
                f"not initializing again"
            )
            return confirmed

        if not self.autosign:
            _confirm_resolution(_named(init_args, parameter_names), contract_name)
        implementation = self._deploy(contract_name, ())

        try:
            data = self.backend.encode_call(
                contract_name, implementation.address, initializer, list(init_args)
            )
        except TransactionReverted as error:
            raise DeploymentFailed(
                f"Cannot encode {contract_name}.{initializer}: {error.reason}",
                network=self.network,
                contract_name=contract_name,
            ) from error

        proxy_name = self.backend.proxy_contract_name
        print(f"\nDeploying {proxy_name} contract to proxy {contract_name}.")
        proxy = self._deploy(
            proxy_name, [implementation.address, self.account.address, data]
        )
        self._initialized.add(to_checksum_address(proxy.address))

        print(
            f"\nWrapping {contract_name} into {proxy_name} at {proxy.address} "
            f"(implementation at {implementation.address})."
        )
        deployment = Deployment(
            address=proxy.address,
            instance=self.backend.at(contract_name, proxy.address),
            tx_hash=proxy.tx_hash,
            implementation=implementation.address,
        )
        self._proxies[contract_name] = deployment
        return deployment

    def initialize(
        self,
        contract_name: str,
        proxy_address: str,
        init_args: Sequence[Any],
        initializer: str = DEFAULT_INITIALIZER,
    ) -> Any:
        """Calls the initializer through an already deployed proxy."""
        proxy_address = to_checksum_address(proxy_address)
        if proxy_address in self._initialized:
            raise AlreadyInitialized(
                f"{contract_name} proxy at {proxy_address} has already been initialized",
                network=self.network,
                contract_name=contract_name,
            )
        try:
            receipt = self.backend.transact(
                contract_name, proxy_address, initializer, list(init_args), sender=self.account
            )
        except TransactionReverted as error:
            if _is_already_initialized(error.reason):
                raise AlreadyInitialized(
                    f"{contract_name} proxy at {proxy_address} has already been initialized",
                    network=self.network,
                    contract_name=contract_name,
                ) from error
            raise DeploymentFailed(
                f"{contract_name}.{initializer} failed: {error.reason}",
                network=self.network,
                contract_name=contract_name,
            ) from error
        self._initialized.add(proxy_address)
        return receipt

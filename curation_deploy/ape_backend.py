import os
from typing import Any, Optional, Sequence

from ape import accounts, networks, project
from ape.api import AccountAPI
from ape.cli.choices import select_account
from ape.contracts import ContractContainer, ContractInstance
from ape.exceptions import ApeException

from curation_deploy.chain import ChainBackend, Deployment
from curation_deploy.constants import OZ_DEPENDENCY_NAME, OZ_DEPENDENCY_VERSION, TEST_NETWORKS
from curation_deploy.context import ExecutionContext, SignerSource
from curation_deploy.errors import TransactionReverted
from curation_deploy.networks import explorer_api_key_envvar, is_test_network, network_id


def _reason(error: Exception) -> str:
    # custom solidity errors surface as exception classes named after the error
    return f"{type(error).__name__}: {error}"


def _dependency_container(contract_name: str) -> ContractContainer:
    """Looks a contract type up in the project's dependencies (e.g. openzeppelin)."""
    matches = dict()
    for dependency_name, versions in project.dependencies.items():
        for dependency in versions.values():
            container = getattr(dependency, contract_name, None)
            if container is not None:
                matches[dependency_name] = container
    if not matches:
        raise ValueError(
            f"No contract type named '{contract_name}' in the project or its dependencies"
        )
    if len(matches) > 1:
        raise ValueError(f"'{contract_name}' is ambiguous; found in {', '.join(sorted(matches))}")
    return next(iter(matches.values()))


def get_contract_container(contract_name: str) -> ContractContainer:
    try:
        return getattr(project, contract_name)
    except AttributeError:
        # not compiled by this project
        return _dependency_container(contract_name)


def active_network() -> str:
    network = networks.provider.network
    return network_id(ecosystem=network.ecosystem.name, network=network.name)


def check_etherscan_plugin() -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    the API key environment variable is set.
    """
    if is_test_network(active_network()):
        # unnecessary for local deployment
        return
    try:
        import ape_etherscan  # noqa: F401
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to verify contracts.")
    from ape_etherscan.utils import API_KEY_ENV_KEY_MAP

    explorer_envvar = explorer_api_key_envvar(
        networks.provider.network.ecosystem.name, API_KEY_ENV_KEY_MAP
    )
    if not os.environ.get(explorer_envvar):
        raise ValueError(f"{explorer_envvar} is not set.")


class ApeBackend(ChainBackend):
    """Chain access through the ape framework and the active provider."""

    def container(self, contract_name: str) -> ContractContainer:
        if contract_name == self.proxy_contract_name:
            oz_dependency = project.dependencies[OZ_DEPENDENCY_NAME][OZ_DEPENDENCY_VERSION]
            return getattr(oz_dependency, contract_name)
        return get_contract_container(contract_name)

    def deploy(self, contract_name: str, args: Sequence[Any], sender: AccountAPI) -> Deployment:
        container = self.container(contract_name)
        try:
            instance = sender.deploy(container, *args)
        except ApeException as error:
            raise TransactionReverted(_reason(error)) from error
        return Deployment(
            address=instance.address,
            instance=instance,
            tx_hash=instance.txn_hash,
        )

    def at(self, contract_name: str, address: str) -> ContractInstance:
        return self.container(contract_name).at(address)

    def encode_call(
        self, contract_name: str, address: str, method: str, args: Sequence[Any]
    ) -> bytes:
        instance = self.at(contract_name, address)
        try:
            method_handler = getattr(instance, method)
            return method_handler.encode_input(*args)
        except (ApeException, AttributeError) as error:
            raise TransactionReverted(_reason(error)) from error

    def transact(
        self,
        contract_name: str,
        address: str,
        method: str,
        args: Sequence[Any],
        sender: AccountAPI,
    ) -> Any:
        instance = self.at(contract_name, address)
        try:
            method_handler = getattr(instance, method)
            receipt = method_handler(*args, sender=sender)
        except (ApeException, AttributeError) as error:
            raise TransactionReverted(_reason(error)) from error
        if receipt.failed:
            raise TransactionReverted(f"transaction {receipt.txn_hash} failed")
        return receipt

    def impersonate(self, address: str) -> AccountAPI:
        try:
            return accounts.test_accounts.impersonate_account(address)
        except (ApeException, NotImplementedError) as error:
            raise TransactionReverted(_reason(error)) from error

    def verify(self, address: str) -> None:
        explorer = networks.provider.network.explorer
        if explorer is None:
            raise ValueError(f"No block explorer configured for {active_network()}")
        explorer.publish_contract(address)


def ape_context(
    account: Optional[AccountAPI] = None,
    impersonate: Optional[str] = None,
    autosign: bool = False,
    verify: bool = False,
) -> ExecutionContext:
    """Builds the execution context of a run on the connected ape provider."""
    if account is None:
        account = select_account()
    if autosign:
        print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
    if hasattr(account, "set_autosign"):
        account.set_autosign(autosign)
    if verify:
        check_etherscan_plugin()

    context = ExecutionContext(
        network=active_network(),
        signer_source=SignerSource(account=account, impersonate=impersonate),
        backend=ApeBackend(),
        test_networks=TEST_NETWORKS,
        autosign=autosign,
        verify=verify,
    )
    _print_deployment_info(context)
    return context


def _print_deployment_info(context: ExecutionContext) -> None:
    print(
        f"Account: {context.deployer.address}",
        f"Impersonate: {context.signer_source.impersonate}",
        f"Verify: {context.verify}",
        f"Ecosystem: {networks.provider.network.ecosystem.name}",
        f"Network: {networks.provider.network.name}",
        f"Artifacts network: {context.network}",
        f"Chain ID: {networks.provider.network.chain_id}",
        sep="\n",
    )

import typing
from typing import Any, Iterable

from curation_deploy.artifacts import ArtifactStore
from curation_deploy.chain import ChainBackend
from curation_deploy.confirm import _continue
from curation_deploy.constants import TEST_NETWORKS
from curation_deploy.context import Signer
from curation_deploy.errors import (
    ImpersonationRefused,
    NotFound,
    TransactionReverted,
    UnresolvedDependency,
    WiringFailed,
)
from curation_deploy.networks import is_test_network
from curation_deploy.params import DependencyResolver
from curation_deploy.plan import WiringStep

if typing.TYPE_CHECKING:
    from curation_deploy.context import ExecutionContext


class WiringExecutor:
    """
    Sends post-deployment configuration calls (role grants, whitelisting, links
    between contracts) to contracts recorded in the artifact store.
    """

    def __init__(
        self,
        backend: ChainBackend,
        store: ArtifactStore,
        resolver: DependencyResolver,
        test_networks: Iterable[str] = TEST_NETWORKS,
        autosign: bool = False,
    ):
        self.backend = backend
        self.store = store
        self.resolver = resolver
        self.test_networks = tuple(test_networks)
        self.autosign = autosign

    @classmethod
    def from_context(
        cls, context: "ExecutionContext", store: ArtifactStore, resolver: DependencyResolver
    ) -> "WiringExecutor":
        return cls(
            backend=context.backend,
            store=store,
            resolver=resolver,
            test_networks=context.test_networks,
            autosign=context.autosign,
        )

    def _check_signer(self, signer: Signer, network: str, step: WiringStep) -> None:
        if signer.impersonated and not is_test_network(network, self.test_networks):
            raise ImpersonationRefused(
                f"Refusing to impersonate {signer.address}: "
                f"'{network}' is not a fork or test network",
                network=network,
                contract_name=step.target,
            )

    def _account(self, signer: Signer, network: str, step: WiringStep) -> Any:
        if not signer.impersonated:
            return signer.account
        try:
            return self.backend.impersonate(signer.address)
        except TransactionReverted as error:
            raise ImpersonationRefused(
                f"Cannot impersonate {signer.address}: {error.reason}",
                network=network,
                contract_name=step.target,
            ) from error

    def execute(self, step: WiringStep, network: str, signer: Signer) -> Any:
        self._check_signer(signer, network, step)
        try:
            target = self.store.read(network, step.target)
        except NotFound:
            raise UnresolvedDependency(name=step.target, network=network)
        named_args = self.resolver.resolve_named(step, network)

        base_message = (
            f"\nTransacting {step.target}[{target.address[:10]}].{step.method}"
            f" as {signer.address}{' (impersonated)' if signer.impersonated else ''}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self.autosign:
            _continue()

        account = self._account(signer, network, step)
        try:
            return self.backend.transact(
                step.target,
                target.address,
                step.method,
                list(named_args.values()),
                sender=account,
            )
        except TransactionReverted as error:
            raise WiringFailed(
                f"{step.target}.{step.method} reverted: {error.reason}",
                network=network,
                contract_name=step.target,
            ) from error

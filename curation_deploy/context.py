from dataclasses import dataclass
from typing import Any, NamedTuple, Optional, Tuple

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from curation_deploy.chain import ChainBackend
from curation_deploy.constants import TEST_NETWORKS
from curation_deploy.errors import ImpersonationRefused
from curation_deploy.networks import is_test_network
from curation_deploy.plan import RequiredSigner, WiringStep


class Signer(NamedTuple):
    """
    An account that sends transactions for one run.

    An impersonated signer starts out without an account: the executor asks the
    chain backend for one right before it submits.
    """

    address: Optional[ChecksumAddress]
    account: Any = None
    impersonated: bool = False

    @classmethod
    def default(cls, account: Any) -> "Signer":
        address = getattr(account, "address", None)
        return cls(address=address, account=account)

    @classmethod
    def impersonation(cls, address: str) -> "Signer":
        return cls(address=to_checksum_address(address), impersonated=True)


@dataclass(frozen=True)
class SignerSource:
    account: Any
    impersonate: Optional[ChecksumAddress] = None


@dataclass(frozen=True)
class ExecutionContext:
    """Everything a run needs to know about where and as whom it executes."""

    network: str
    signer_source: SignerSource
    backend: ChainBackend
    test_networks: Tuple[str, ...] = TEST_NETWORKS
    autosign: bool = False
    verify: bool = False

    @property
    def deployer(self) -> Signer:
        return Signer.default(self.signer_source.account)

    @property
    def allows_impersonation(self) -> bool:
        return is_test_network(self.network, self.test_networks)

    def refuse_impersonation(self, address: str, contract_name: Optional[str] = None):
        raise ImpersonationRefused(
            f"Refusing to impersonate {address}: '{self.network}' is not a fork or test network",
            network=self.network,
            contract_name=contract_name,
        )

    def signer_for(self, step: WiringStep) -> Signer:
        """
        Default signer, unless an impersonation target applies to the step; that is
        only permitted on fork/test networks.
        """
        target = step.impersonate or self.signer_source.impersonate
        if step.signer == RequiredSigner.IMPERSONATED and not target:
            raise ImpersonationRefused(
                f"{step.target}.{step.method} must be sent by an impersonated account "
                f"but no impersonation target is configured",
                network=self.network,
                contract_name=step.target,
            )
        if not target:
            return self.deployer
        if not self.allows_impersonation:
            self.refuse_impersonation(target, contract_name=step.target)
        return Signer.impersonation(target)

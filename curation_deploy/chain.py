from abc import ABC, abstractmethod
from typing import Any, NamedTuple, Optional, Sequence

from eth_typing import ChecksumAddress

from curation_deploy.constants import PROXY_CONTRACT_NAME


class Deployment(NamedTuple):
    """A confirmed contract creation."""

    address: ChecksumAddress
    instance: Any
    tx_hash: Optional[str] = None
    implementation: Optional[ChecksumAddress] = None


class ChainBackend(ABC):
    """
    The narrow interface through which deployments and wiring reach the chain.

    Every transacting method blocks until the transaction is confirmed and raises
    `TransactionReverted` when it reverts or cannot be confirmed.
    """

    proxy_contract_name = PROXY_CONTRACT_NAME

    @abstractmethod
    def deploy(self, contract_name: str, args: Sequence[Any], sender: Any) -> Deployment:
        raise NotImplementedError

    @abstractmethod
    def at(self, contract_name: str, address: str) -> Any:
        """Returns a handle to an existing contract typed as `contract_name`."""
        raise NotImplementedError

    @abstractmethod
    def encode_call(
        self, contract_name: str, address: str, method: str, args: Sequence[Any]
    ) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def transact(
        self, contract_name: str, address: str, method: str, args: Sequence[Any], sender: Any
    ) -> Any:
        raise NotImplementedError

    @abstractmethod
    def impersonate(self, address: str) -> Any:
        """Returns an account able to send transactions as `address` (fork/test only)."""
        raise NotImplementedError

    def verify(self, address: str) -> None:
        """Publishes the source of the contract at `address` to a block explorer."""
        raise NotImplementedError(f"{type(self).__name__} cannot verify contracts")

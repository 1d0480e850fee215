"""Errors raised while deploying and wiring a release."""

from typing import Optional


class DeploymentError(Exception):
    """Base class for every failure that aborts a deployment run."""

    def __init__(
        self,
        message: str,
        network: Optional[str] = None,
        contract_name: Optional[str] = None,
        step_index: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.network = network
        self.contract_name = contract_name
        self.step_index = step_index

    def __str__(self) -> str:
        context = []
        if self.step_index is not None:
            context.append(f"step={self.step_index}")
        if self.contract_name:
            context.append(f"contract={self.contract_name}")
        if self.network:
            context.append(f"network={self.network}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class NotFound(DeploymentError, LookupError):
    """Raised when the artifact store has no record for a (network, name) pair."""


class InvalidArtifact(DeploymentError, ValueError):
    """Raised when an artifact file exists but is not a usable record."""


class ArtifactExists(DeploymentError, FileExistsError):
    """Raised when writing a record that already exists and overwriting is disabled."""


class UnresolvedDependency(DeploymentError):
    """Raised when a step references a contract with no record on the active network."""

    def __init__(self, name: str, network: str):
        super().__init__(
            f"'{name}' has not been deployed on '{network}'",
            network=network,
            contract_name=name,
        )
        self.name = name


class DeploymentFailed(DeploymentError):
    """Raised when a contract creation transaction reverts or fails to confirm."""


class AlreadyInitialized(DeploymentError):
    """Raised when the initializer of an upgradeable contract is invoked a second time."""


class WiringFailed(DeploymentError):
    """Raised when a post-deployment configuration call reverts."""


class ImpersonationRefused(DeploymentError):
    """Raised when impersonation is requested outside of a fork/test network."""


class PlanInvalid(DeploymentError, ValueError):
    """Raised when a deployment plan file is malformed."""


class TransactionReverted(Exception):
    """Raised by chain backends when a transaction reverts or cannot be confirmed."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

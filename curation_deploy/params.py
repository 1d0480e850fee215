import typing
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, List

from ape.utils import ZERO_ADDRESS

from curation_deploy.artifacts import ArtifactStore
from curation_deploy.errors import NotFound, PlanInvalid, UnresolvedDependency

if typing.TYPE_CHECKING:
    from curation_deploy.plan import DeploymentStep, WiringStep


class VariableContext:
    def __init__(self, contract_name: str, constants: typing.Dict[str, Any] = None):
        self.contract_name = contract_name
        self.constants = constants or dict()


class ResolutionContext:
    """What a variable may look at while it is being resolved."""

    def __init__(
        self,
        store: ArtifactStore,
        network: str,
        deployer_address: typing.Optional[str] = None,
        pending: typing.Iterable[str] = (),
    ):
        self.store = store
        self.network = network
        self.deployer_address = deployer_address
        # contracts that a dry run expects to be deployed by an earlier step
        self.pending = set(pending)


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self, context: ResolutionContext) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        result = isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)
        return result


class DeployerAddress(Variable):
    DEPLOYER_INDICATOR = "deployer"

    @classmethod
    def is_deployer(cls, value: str) -> bool:
        """Returns True if the variable is a special deployer variable."""
        return value == cls.DEPLOYER_INDICATOR

    def resolve(self, context: ResolutionContext) -> Any:
        if context.deployer_address is None:
            return ZERO_ADDRESS
        return context.deployer_address

    def __eq__(self, other):
        return isinstance(other, DeployerAddress)

    def __hash__(self):
        return hash(self.DEPLOYER_INDICATOR)

    def __repr__(self):
        return f"{self.VARIABLE_PREFIX}{self.DEPLOYER_INDICATOR}"


class Constant:
    """Looks up a value in the plan's constants; substituted when the plan is loaded."""

    def __init__(self, constant_name: str, context: VariableContext):
        try:
            self.constant_value = context.constants[constant_name]
        except KeyError:
            raise PlanInvalid(
                f"Constant '{constant_name}' not found in deployment file.",
                contract_name=context.contract_name,
            )

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()


class ContractReference(Variable):
    def __init__(self, contract_name: str):
        if not contract_name:
            raise PlanInvalid("Empty contract reference")
        self.contract_name = contract_name

    def resolve(self, context: ResolutionContext) -> Any:
        """Resolves a contract address from the artifact store."""
        try:
            record = context.store.read(context.network, self.contract_name)
        except NotFound:
            if self.contract_name in context.pending:
                # eager validation
                return ZERO_ADDRESS
            raise UnresolvedDependency(name=self.contract_name, network=context.network)
        return record.address

    def __eq__(self, other):
        return isinstance(other, ContractReference) and other.contract_name == self.contract_name

    def __hash__(self):
        return hash(self.contract_name)

    def __repr__(self):
        return f"{self.VARIABLE_PREFIX}{self.contract_name}"


def _variable_from_value(variable: str, context: VariableContext) -> Any:
    variable = variable[len(Variable.VARIABLE_PREFIX) :]
    if DeployerAddress.is_deployer(variable):
        return DeployerAddress()
    elif Constant.is_constant(variable):
        return Constant(variable, context).constant_value
    else:
        return ContractReference(variable)


def _process_raw_value(value: Any, variable_context: VariableContext) -> Any:
    if isinstance(value, list):
        return [_process_raw_value(v, variable_context) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, variable_context)

    return value


def _resolve_param(value: Any, context: ResolutionContext) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, (list, tuple)):
        return [_resolve_param(v, context) for v in value]

    if isinstance(value, Variable):
        return value.resolve(context)

    return value  # literally a value


def references(value: Any) -> List[str]:
    """Returns the names of the contracts referenced by a parameter value, in order."""
    if isinstance(value, (list, tuple)):
        names = list()
        for v in value:
            names.extend(references(v))
        return names
    if isinstance(value, ContractReference):
        return [value.contract_name]
    return []


ResolvedArgs = List[Any]


class DependencyResolver:
    """
    Replaces contract references in a step's arguments with addresses read from the
    artifact store for the active network.

    Steps are resolved in the order the plan declares them; no reordering is attempted.
    Every argument is resolved before the caller gets to send a transaction, so a
    missing dependency never reaches the chain.
    """

    def __init__(self, store: ArtifactStore, deployer_address: typing.Optional[str] = None):
        self.store = store
        self.deployer_address = deployer_address

    def _context(self, network: str, pending: typing.Iterable[str] = ()) -> ResolutionContext:
        return ResolutionContext(
            store=self.store,
            network=network,
            deployer_address=self.deployer_address,
            pending=pending,
        )

    def resolve(
        self,
        step: typing.Union["DeploymentStep", "WiringStep"],
        network: str,
        pending: typing.Iterable[str] = (),
    ) -> ResolvedArgs:
        context = self._context(network, pending=pending)
        return [_resolve_param(arg, context) for arg in step.args]

    def resolve_named(
        self,
        step: typing.Union["DeploymentStep", "WiringStep"],
        network: str,
        pending: typing.Iterable[str] = (),
    ) -> OrderedDict:
        """Resolves a step's arguments keyed by their parameter names (or positions)."""
        resolved = self.resolve(step, network, pending=pending)
        names = step.parameter_names or tuple(f"arg{i}" for i in range(len(resolved)))
        return OrderedDict(zip(names, resolved))

import typing
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from eth_utils import is_address, to_checksum_address

from curation_deploy.constants import DEFAULT_INITIALIZER, PLANS_DIR
from curation_deploy.errors import PlanInvalid
from curation_deploy.params import VariableContext, _process_raw_value, references


DEPLOY_KEY = "deploy"
WIRE_KEY = "wire"
CONTRACT_CONSTRUCTOR_PARAMETER_KEY = "constructor"
CONTRACT_PROXY_PARAMETER_KEY = "proxy"

_DEPLOY_KEYS = {DEPLOY_KEY, CONTRACT_CONSTRUCTOR_PARAMETER_KEY, CONTRACT_PROXY_PARAMETER_KEY}
_WIRE_KEYS = {WIRE_KEY, "method", "args", "signer", "impersonate"}
_PROXY_KEYS = {"initializer", "args"}


class RequiredSigner(Enum):
    DEFAULT = "default"
    IMPERSONATED = "impersonated"


@dataclass(frozen=True)
class DeploymentStep:
    contract_name: str
    args: Tuple[Any, ...] = ()
    parameter_names: Tuple[str, ...] = ()
    upgradeable: bool = False
    initializer: str = DEFAULT_INITIALIZER

    @property
    def dependencies(self) -> List[str]:
        return references(list(self.args))

    def describe(self) -> str:
        kind = "proxied " if self.upgradeable else ""
        return f"deploy {kind}{self.contract_name}"


@dataclass(frozen=True)
class WiringStep:
    target: str
    method: str
    args: Tuple[Any, ...] = ()
    signer: RequiredSigner = RequiredSigner.DEFAULT
    impersonate: Optional[str] = None
    parameter_names: Tuple[str, ...] = ()

    @property
    def contract_name(self) -> str:
        return self.target

    @property
    def dependencies(self) -> List[str]:
        return [self.target, *references(list(self.args))]

    def describe(self) -> str:
        return f"wire {self.target}.{self.method}"


Step = Union[DeploymentStep, WiringStep]


@dataclass(frozen=True)
class DeploymentPlan:
    """The ordered deployment and wiring steps of a release."""

    name: str
    steps: Tuple[Step, ...]
    constants: Dict[str, Any] = field(default_factory=dict)
    artifacts_dir: Optional[Path] = None
    impersonate: Optional[str] = None

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    @classmethod
    def from_yaml(cls, filepath: Path) -> "DeploymentPlan":
        config = _load_plan_file(filepath)
        return cls.from_config(config, default_name=Path(filepath).stem)

    @classmethod
    def from_config(cls, config: typing.Dict, default_name: str = "plan") -> "DeploymentPlan":
        if not isinstance(config, dict):
            raise PlanInvalid("Malformed deployment plan YAML.")

        steps_config = config.get("steps")
        if not steps_config or not isinstance(steps_config, list):
            raise PlanInvalid("Deployment plan is missing a 'steps' list.")

        constants = _section(config, "constants")

        deployment = _section(config, "deployment")
        name = deployment.get("name", default_name)
        if not isinstance(name, str) or not name:
            raise PlanInvalid("'deployment.name' must be a non-empty string.")

        artifacts_dir = _section(config, "artifacts").get("dir")
        if artifacts_dir is not None and not isinstance(artifacts_dir, str):
            raise PlanInvalid("'artifacts.dir' must be a path.")

        impersonate = deployment.get("impersonate")
        if impersonate is not None:
            impersonate = _process_address(impersonate, VariableContext(name, constants))

        steps = list()
        for index, step_config in enumerate(steps_config):
            if not isinstance(step_config, dict):
                raise PlanInvalid(f"Step {index} of plan '{name}' is not a mapping.")
            if DEPLOY_KEY in step_config and WIRE_KEY in step_config:
                raise PlanInvalid(f"Step {index} of plan '{name}' both deploys and wires.")
            if DEPLOY_KEY in step_config:
                steps.append(_deployment_step(step_config, constants, index))
            elif WIRE_KEY in step_config:
                steps.append(_wiring_step(step_config, constants, index))
            else:
                raise PlanInvalid(
                    f"Step {index} of plan '{name}' needs a '{DEPLOY_KEY}' or '{WIRE_KEY}' key."
                )

        return cls(
            name=name,
            steps=tuple(steps),
            constants=dict(constants),
            artifacts_dir=Path(artifacts_dir) if artifacts_dir else None,
            impersonate=impersonate,
        )


def _load_plan_file(filepath: Path) -> dict:
    try:
        with open(filepath, "r") as file:
            return yaml.safe_load(file)
    except yaml.YAMLError as error:
        raise PlanInvalid(f"Deployment plan {filepath} is not valid YAML: {error}") from error


def plan_filepath(name: str) -> Path:
    """Returns a bundled plan file, e.g. plans/auction.yml"""
    return PLANS_DIR / f"{name}.yml"


def _section(config: Dict, key: str) -> Dict:
    section = config.get(key) or dict()
    if not isinstance(section, dict):
        raise PlanInvalid(f"'{key}' must be a mapping.")
    return section


def _check_keys(step_config: Dict, allowed: set, index: int) -> None:
    unknown = set(step_config) - allowed
    if unknown:
        raise PlanInvalid(f"Step {index} has unknown key(s): {', '.join(sorted(unknown))}")


def _process_args(raw_args: Any, context: VariableContext, index: int) -> Tuple[tuple, tuple]:
    """Returns (values, names) for a mapping or a list of raw arguments."""
    if raw_args is None:
        return (), ()
    if isinstance(raw_args, dict):
        names = tuple(raw_args.keys())
        values = tuple(_process_raw_value(v, context) for v in raw_args.values())
        return values, names
    if isinstance(raw_args, list):
        return tuple(_process_raw_value(v, context) for v in raw_args), ()
    raise PlanInvalid(
        f"Arguments of step {index} must be a mapping or a list.",
        contract_name=context.contract_name,
    )


def _process_address(value: Any, context: VariableContext) -> str:
    value = _process_raw_value(value, context)
    if not isinstance(value, str) or not is_address(value):
        raise PlanInvalid(
            f"'{value}' is not an address that can be impersonated.",
            contract_name=context.contract_name,
        )
    return to_checksum_address(value)


def _deployment_step(step_config: Dict, constants: Dict, index: int) -> DeploymentStep:
    _check_keys(step_config, _DEPLOY_KEYS, index)
    contract_name = step_config[DEPLOY_KEY]
    if not isinstance(contract_name, str) or not contract_name:
        raise PlanInvalid(f"Step {index} has an invalid contract name.")
    context = VariableContext(contract_name=contract_name, constants=constants)

    if CONTRACT_PROXY_PARAMETER_KEY not in step_config:
        args, names = _process_args(
            step_config.get(CONTRACT_CONSTRUCTOR_PARAMETER_KEY), context, index
        )
        return DeploymentStep(contract_name=contract_name, args=args, parameter_names=names)

    if CONTRACT_CONSTRUCTOR_PARAMETER_KEY in step_config:
        raise PlanInvalid(
            "Proxied contracts are initialized, not constructed; "
            "use 'proxy: {args: ...}' instead of 'constructor'.",
            contract_name=contract_name,
        )
    proxy_data = step_config[CONTRACT_PROXY_PARAMETER_KEY] or dict()
    if not isinstance(proxy_data, dict):
        raise PlanInvalid("'proxy' must be a mapping.", contract_name=contract_name)
    _check_keys(proxy_data, _PROXY_KEYS, index)
    args, names = _process_args(proxy_data.get("args"), context, index)
    return DeploymentStep(
        contract_name=contract_name,
        args=args,
        parameter_names=names,
        upgradeable=True,
        initializer=proxy_data.get("initializer", DEFAULT_INITIALIZER),
    )


def _wiring_step(step_config: Dict, constants: Dict, index: int) -> WiringStep:
    _check_keys(step_config, _WIRE_KEYS, index)
    target = step_config[WIRE_KEY]
    method = step_config.get("method")
    if not isinstance(target, str) or not target:
        raise PlanInvalid(f"Step {index} has an invalid wiring target.")
    if not method:
        raise PlanInvalid(f"Step {index} is missing 'method'.", contract_name=target)
    context = VariableContext(contract_name=target, constants=constants)

    args, names = _process_args(step_config.get("args"), context, index)

    try:
        signer = RequiredSigner(step_config.get("signer", RequiredSigner.DEFAULT.value))
    except ValueError:
        choices = ", ".join(s.value for s in RequiredSigner)
        raise PlanInvalid(
            f"Step {index} has an unknown signer; expected one of {choices}.",
            contract_name=target,
        )

    impersonate = step_config.get("impersonate")
    if impersonate is not None:
        impersonate = _process_address(impersonate, context)

    return WiringStep(
        target=target,
        method=method,
        args=args,
        signer=signer,
        impersonate=impersonate,
        parameter_names=names,
    )

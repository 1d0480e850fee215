from collections import OrderedDict

import click
from ape.utils import ZERO_ADDRESS


def _abort_unless(question: str) -> None:
    if not click.confirm(question, default=True):
        print("Aborting deployment!")
        raise click.Abort()


def _confirm_deployment(contract_name: str) -> None:
    """Asks the user to confirm the deployment of a single contract."""
    _abort_unless(f"Deploy {contract_name}?")


def _continue() -> None:
    """Asks the user to continue."""
    _abort_unless("Continue?")


def _confirm_zero_address() -> None:
    _abort_unless("Zero Address detected for deployment parameter; Continue?")


def _contains_zero_address(value) -> bool:
    if isinstance(value, (list, tuple)):
        return any(_contains_zero_address(v) for v in value)
    return value == ZERO_ADDRESS


def _confirm_resolution(resolved_params: OrderedDict, contract_name: str) -> None:
    """Shows the resolved parameters of a contract and asks to deploy it."""
    if resolved_params:
        print(f"\nConstructor parameters for {contract_name}")
        for name, resolved_value in resolved_params.items():
            print(f"\t{name}={resolved_value}")
    else:
        print(f"\n(i) No constructor parameters for {contract_name}")
    _confirm_deployment(contract_name)
    if _contains_zero_address(list(resolved_params.values())):
        _confirm_zero_address()

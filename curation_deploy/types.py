import click
from ape.utils import ZERO_ADDRESS
from eth_utils import is_address, to_checksum_address


class StepIndex(click.ParamType):
    """Index of a plan step; plans are counted from 0."""

    name = "step_index"

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            index = value
        else:
            try:
                index = int(value)
            except ValueError:
                self.fail(f"{value} is not a step index", param, ctx)
        if index < 0:
            self.fail(f"step index {index} is negative", param, ctx)
        return index


class SignerAddress(click.ParamType):
    name = "signer_address"

    def convert(self, value, param, ctx):
        if not is_address(value):
            self.fail(f"{value} is not a valid ethereum address", param, ctx)
        address = to_checksum_address(value)
        if address == ZERO_ADDRESS:
            self.fail("the zero address cannot sign transactions", param, ctx)
        return address

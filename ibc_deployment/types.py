import click
from eth_utils import is_address, to_checksum_address


class MinInt(click.ParamType):
    name = "minint"

    def __init__(self, min_value):
        self.min_value = min_value

    def convert(self, value, param, ctx):
        try:
            ivalue = int(value)
        except ValueError:
            self.fail(f"{value} is not a valid integer", param, ctx)
        if ivalue < self.min_value:
            self.fail(
                f"{value} is less than the minimum allowed value of {self.min_value}", param, ctx
            )
        return ivalue


class Address(str):
    """
    An on-chain contract or account address.

    Always holds the EIP-55 checksummed form; constructing one from anything
    that is not a 20-byte hex address raises ValueError.
    """

    def __new__(cls, value):
        if isinstance(value, Address):
            return value
        if not isinstance(value, (str, bytes)) or not is_address(value):
            raise ValueError(f"{value!r} is not a valid address")
        return super().__new__(cls, to_checksum_address(value))

    def __repr__(self) -> str:
        return f"Address('{self}')"

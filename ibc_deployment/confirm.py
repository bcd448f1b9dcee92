import sys
from typing import Any, Dict, Optional, Sequence

from ape.utils import ZERO_ADDRESS


def _abort() -> None:
    print("Aborting deployment!")
    sys.exit(-1)


def _confirm_deployment(contract_name: str) -> None:
    """Asks the user to confirm the deployment of a single contract."""
    answer = input(f"Deploy {contract_name} Y/N? ")
    if answer.lower().strip() == "n":
        _abort()


def _continue() -> None:
    """Asks the user to continue."""
    answer = input("Continue Y/N? ")
    if answer.lower().strip() == "n":
        _abort()


def _confirm_zero_address() -> None:
    answer = input("Zero Address detected for deployment parameter; Continue? Y/N? ")
    if answer.lower().strip() == "n":
        _abort()


def _format_value(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    return str(value)


def _confirm_resolution(
    resolved_args: Sequence[Any],
    contract_name: str,
    libraries: Optional[Dict[str, str]] = None,
) -> None:
    """Asks the user to confirm the resolved constructor arguments for a single contract."""
    if libraries:
        print(f"\nLibraries linked into {contract_name}")
        for library_name, address in libraries.items():
            print(f"\t{library_name}={address}")

    if len(resolved_args) == 0:
        print(f"\n(i) No constructor arguments for {contract_name}")
        _confirm_deployment(contract_name)
        return

    print(f"\nConstructor arguments for {contract_name}")
    contains_zero_address = False
    for position, resolved_value in enumerate(resolved_args):
        print(f"\t[{position}]={_format_value(resolved_value)}")
        if not contains_zero_address:
            contains_zero_address = resolved_value == ZERO_ADDRESS
    _confirm_deployment(contract_name)
    if contains_zero_address:
        _confirm_zero_address()

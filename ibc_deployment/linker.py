import re
from typing import Dict, Set

from ape.contracts import ContractContainer
from eth_utils import keccak, remove_0x_prefix
from ethpm_types import Bytecode

from ibc_deployment.types import Address

# Links already compiled contract types at deploy time. ape-solidity's
# `add_library` instead recompiles dependents against a deployed library.

# solc >= 0.5 library placeholder: __$ + first 34 hex chars of keccak(<source>:<Library>) + $__
PLACEHOLDER_PATTERN = re.compile(r"__\$[0-9a-fA-F]{34}\$__")


def fully_qualified_name(container: ContractContainer) -> str:
    contract_type = container.contract_type
    return f"{contract_type.source_id}:{contract_type.name}"


def link_placeholder(fqn: str) -> str:
    return f"__${keccak(text=fqn).hex()[:34]}$__"


def unlinked_placeholders(bytecode: str) -> Set[str]:
    """Returns the library placeholders still present in the bytecode."""
    return set(PLACEHOLDER_PATTERN.findall(bytecode or ""))


def link_bytecode(bytecode: str, links: Dict[str, Address]) -> str:
    """
    Substitutes library addresses into unlinked bytecode.

    `links` maps fully qualified library names (`<source>:<Library>`) to
    deployed addresses. Placeholders with no matching entry are left as is;
    use `unlinked_placeholders` to detect them.
    """
    for fqn, address in links.items():
        replacement = remove_0x_prefix(Address(address)).lower()
        bytecode = bytecode.replace(link_placeholder(fqn), replacement)
    return bytecode


def link_container(container: ContractContainer, bytecode: str) -> ContractContainer:
    """Returns a container of the same contract type with linked deployment bytecode."""
    contract_type = container.contract_type
    linked_type = contract_type.model_copy(
        update={"deployment_bytecode": Bytecode(bytecode=bytecode)}
    )
    return type(container)(linked_type)

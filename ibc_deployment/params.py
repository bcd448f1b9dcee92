import typing
from typing import Any, Callable, Dict, List, Optional

from ape.api import AccountAPI, ReceiptAPI
from ape.contracts.base import ContractContainer, ContractTransactionHandler
from ape.exceptions import ApeException
from ape_accounts import KeyfileAccount
from ethpm_types import MethodABI
from requests.exceptions import RequestException
from web3 import Web3
from web3.exceptions import Web3Exception

from ibc_deployment.confirm import _confirm_resolution, _continue
from ibc_deployment.errors import DeploymentError, LinkResolutionError, WiringError
from ibc_deployment.ledger import DeployedContract
from ibc_deployment.linker import (
    fully_qualified_name,
    link_bytecode,
    link_container,
    link_placeholder,
    unlinked_placeholders,
)
from ibc_deployment.networks import NetworkContext
from ibc_deployment.types import Address
from ibc_deployment.utils import get_contract_container

w3 = Web3()

# failures of a submitted transaction or of the connection carrying it
TRANSACTION_ERRORS = (ApeException, RequestException, Web3Exception)


def _validate_method_args(
    method_abis: List[MethodABI], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not w3.is_encodable(abi_input.type, arg):
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def _validate_constructor_args(
    contract_name: str, container: ContractContainer, args: typing.Sequence[Any]
) -> None:
    """Validates the constructor arguments against the constructor ABI."""
    abi_inputs = container.constructor.abi.inputs
    if len(args) != len(abi_inputs):
        raise DeploymentError(
            contract_name,
            f"constructor requires {len(abi_inputs)} argument(s), got {len(args)}",
        )
    for position, (abi_input, value) in enumerate(zip(abi_inputs, args)):
        if not w3.is_encodable(abi_input.type, value):
            raise DeploymentError(
                contract_name,
                f"constructor parameter '{abi_input.name}' at position {position} has a value "
                f"{value!r} whose type does not match expected ABI type '{abi_input.type}'",
            )


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: AccountAPI, autosign: bool = False):
        self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        if isinstance(account, KeyfileAccount):
            # only keyfile accounts prompt for signing; test accounts always sign
            account.set_autosign(autosign)

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account

    def _get_kwargs(self) -> typing.Dict[str, Any]:
        return dict()

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        call = f"{method.contract.contract_type.name}[{method.contract.address[:10]}].{method}"
        try:
            named_args = _validate_method_args(method_abis=method.abis, args=args)
        except ValueError as e:
            raise WiringError(f"{call}: {e}") from e

        base_message = f"\nTransacting {call}"
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        try:
            receipt = method(*args, sender=self._account, **self._get_kwargs())
        except TRANSACTION_ERRORS as e:
            raise WiringError(f"{call} failed: {e}") from e
        if receipt.failed:
            raise WiringError(f"{call} failed in transaction {receipt.txn_hash}")
        return receipt


class Deployer(Transactor):
    """
    Represents the signer of a network context plus sequential,
    confirmed contract creation (optionally with library linking).
    """

    def __init__(
        self,
        context: NetworkContext,
        autosign: bool = False,
        required_confirmations: Optional[int] = None,
        get_container: Callable[[str], ContractContainer] = get_contract_container,
    ):
        super().__init__(context.signer, autosign)
        self.context = context
        self.required_confirmations = required_confirmations
        self._get_container = get_container
        self._print_deployment_info()

        if not self._autosign:
            # Confirms the start of the deployment.
            _continue()

    def _get_kwargs(self) -> typing.Dict[str, Any]:
        """Returns the transaction kwargs."""
        kwargs = dict()
        if self.required_confirmations is not None:
            kwargs["required_confirmations"] = self.required_confirmations
        return kwargs

    def deploy(self, contract_name: str, *args) -> DeployedContract:
        """Deploys a contract and waits for the creation transaction to be confirmed."""
        container = self._get_container(contract_name)
        return self._deploy_contract(contract_name, container, args)

    def deploy_and_link(
        self, contract_name: str, libraries: Dict[str, Optional[Address]], *args
    ) -> DeployedContract:
        """
        Deploys a contract after substituting the given library addresses
        into its bytecode. Fails before submitting anything if a reference
        cannot be resolved.
        """
        container = self._get_container(contract_name)
        linked_container = self._link(contract_name, container, libraries)
        return self._deploy_contract(contract_name, linked_container, args, libraries)

    def _link(
        self,
        contract_name: str,
        container: ContractContainer,
        libraries: Dict[str, Optional[Address]],
    ) -> ContractContainer:
        deployment_bytecode = container.contract_type.deployment_bytecode
        bytecode = deployment_bytecode.bytecode if deployment_bytecode else None
        if not bytecode:
            raise LinkResolutionError(contract_name, "no deployment bytecode to link")

        links = dict()
        for library_name, address in libraries.items():
            if address is None:
                raise LinkResolutionError(
                    contract_name, f"library {library_name} has not been deployed"
                )
            try:
                address = Address(address)
            except ValueError as e:
                raise LinkResolutionError(contract_name, f"library {library_name}: {e}") from e

            fqn = fully_qualified_name(self._get_container(library_name))
            if link_placeholder(fqn) not in bytecode:
                raise LinkResolutionError(
                    contract_name, f"{library_name} is not one of its libraries"
                )
            links[fqn] = address

        linked_bytecode = link_bytecode(bytecode, links)
        unresolved = unlinked_placeholders(linked_bytecode)
        if unresolved:
            raise LinkResolutionError(
                contract_name,
                f"missing links for library references {', '.join(sorted(unresolved))}",
            )
        return link_container(container, linked_bytecode)

    def _deploy_contract(
        self,
        contract_name: str,
        container: ContractContainer,
        args: typing.Sequence[Any],
        libraries: Optional[Dict[str, Address]] = None,
    ) -> DeployedContract:
        _validate_constructor_args(contract_name, container, args)
        print(f"\nDeploying {contract_name}...")
        if not self._autosign:
            _confirm_resolution(args, contract_name, libraries)

        try:
            instance = self._account.deploy(container, *args, **self._get_kwargs())
        except TRANSACTION_ERRORS as e:
            raise DeploymentError(contract_name, str(e)) from e

        deployed = DeployedContract(
            name=contract_name,
            address=Address(instance.address),
            instance=instance,
            confirmed=True,
        )
        print(f"'{contract_name}' deployed to: {deployed.address}")
        return deployed

    def _print_deployment_info(self):
        print(
            f"Account: {self._account.address}",
            f"Balance: {self._account.balance}",
            f"Network: {self.context.name}",
            f"Chain ID: {self.context.chain_id}",
            f"RPC: {self.context.rpc_url}",
            sep="\n",
        )

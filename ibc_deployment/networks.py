import typing
from pathlib import Path
from typing import List, Optional

from ape import accounts, networks
from ape.api import AccountAPI
from eth_account import Account

from ibc_deployment.constants import LOCAL_NETWORKS, NETWORK_PARAMS_DIR
from ibc_deployment.errors import ConfigurationError
from ibc_deployment.types import Address
from ibc_deployment.utils import load_config

Account.enable_unaudited_hdwallet_features()


def is_local_network() -> bool:
    """Returns True if ape is connected to its ephemeral local network."""
    return networks.provider.network.name in LOCAL_NETWORKS


def network_params_filepath(network_name: str, params_dir: Path = NETWORK_PARAMS_DIR) -> Path:
    return params_dir / f"{network_name}.yml"


def load_network_config(network_name: str, params_dir: Path = NETWORK_PARAMS_DIR) -> dict:
    """Loads the parameters file for the named network."""
    return load_config(network_params_filepath(network_name, params_dir))


def derive_signer_addresses(
    mnemonic: str, path: str, initial_index: int, count: int, passphrase: str = ""
) -> List[Address]:
    """Derives `count` HD-wallet addresses starting at `path`/`initial_index`."""
    addresses = list()
    for index in range(initial_index, initial_index + count):
        account = Account.from_mnemonic(
            mnemonic, passphrase=passphrase, account_path=f"{path}/{index}"
        )
        addresses.append(Address(account.address))
    return addresses


def _derive_signers(accounts_config: dict) -> List[Address]:
    mnemonic = accounts_config.get("mnemonic")
    if not mnemonic:
        return list()

    path = accounts_config.get("path", "m/44'/60'/0'/0")
    initial_index = int(accounts_config.get("initial_index", 0))
    count = int(accounts_config.get("count", 1))
    if initial_index < 0:
        raise ConfigurationError("accounts.initial_index cannot be negative.")
    if count < 1:
        raise ConfigurationError("accounts.count must be at least 1.")

    return derive_signer_addresses(
        mnemonic=mnemonic,
        path=path.rstrip("/"),
        initial_index=initial_index,
        count=count,
        passphrase=accounts_config.get("passphrase", ""),
    )


def _default_signer(index: int) -> AccountAPI:
    test_accounts = accounts.test_accounts
    if index >= len(test_accounts):
        raise ConfigurationError(
            f"No test account at index {index}; only {len(test_accounts)} are configured."
        )
    return test_accounts[index]


class NetworkContext:
    """
    The resolved identity of the target network plus the single account
    that signs every deployment and configuration transaction of a run.
    """

    def __init__(
        self,
        name: str,
        chain_id: int,
        signer: AccountAPI,
        rpc_url: Optional[str] = None,
        signers: Optional[List[Address]] = None,
    ):
        self.name = name
        self.chain_id = chain_id
        self.signer = signer
        self.rpc_url = rpc_url
        self.signers = signers or list()

    @classmethod
    def from_config(
        cls,
        config: typing.Dict,
        account: Optional[AccountAPI] = None,
        signer_index: int = 0,
    ) -> "NetworkContext":
        deployment = config.get("deployment") or dict()

        # chain id is checked first; nothing else is resolved without it
        chain_id = deployment.get("chain_id")
        if chain_id is None:
            raise ConfigurationError("chain_id is not set in network parameters.")
        try:
            chain_id = int(chain_id)
        except (TypeError, ValueError):
            raise ConfigurationError(f"chain_id '{chain_id}' is not an integer.")

        name = deployment.get("name")
        if not name:
            raise ConfigurationError("name is not set in network parameters.")

        accounts_config = config.get("accounts") or dict()
        signers = _derive_signers(accounts_config)
        if signers and signer_index >= len(signers):
            raise ConfigurationError(
                f"Signer index {signer_index} is outside the {len(signers)} derived accounts."
            )

        if account is None:
            initial_index = int(accounts_config.get("initial_index", 0))
            account = _default_signer(initial_index + signer_index)

        if signers and Address(account.address) not in signers:
            raise ConfigurationError(
                f"Signer {account.address} is not derived from the configured mnemonic."
            )

        return cls(
            name=name,
            chain_id=chain_id,
            signer=account,
            rpc_url=deployment.get("url"),
            signers=signers,
        )

    def check_chain_id(self, provider_chain_id: int, live: bool = True) -> None:
        """Checks the configured chain id against the connected provider's."""
        if live and provider_chain_id != self.chain_id:
            raise ConfigurationError(
                f"chain_id in network parameters ({self.chain_id}) does not match "
                f"chain_id of current network ({provider_chain_id})."
            )

    def check_provider(self) -> None:
        self.check_chain_id(networks.provider.chain_id, live=not is_local_network())

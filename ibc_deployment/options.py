from pathlib import Path

import click

from ibc_deployment.constants import (
    CONFIG_DIR,
    NETWORK_PARAMS_DIR,
    SGX_MODE_ENVVAR,
    SGX_MODES,
    SUPPORTED_NETWORKS,
)
from ibc_deployment.types import MinInt

account_alias_option = click.option(
    "--account",
    "-a",
    help="Alias of an ape account to sign with; defaults to the derived test account.",
    type=str,
    required=False,
)

signer_index_option = click.option(
    "--signer-index",
    "-i",
    help="Index of the signer within the network's derived accounts.",
    type=MinInt(0),
    default=0,
)

sgx_mode_option = click.option(
    "--sgx-mode",
    help="Remote attestation mode; SW selects the simulation root CA.",
    type=click.Choice(SGX_MODES),
    envvar=SGX_MODE_ENVVAR,
    required=False,
)

config_dir_option = click.option(
    "--config-dir",
    help="Directory holding the attestation root CA certificates.",
    type=click.Path(file_okay=False, exists=True, path_type=Path),
    default=CONFIG_DIR,
)

params_dir_option = click.option(
    "--params-dir",
    help="Directory holding the network parameter files.",
    type=click.Path(file_okay=False, exists=True, path_type=Path),
    default=NETWORK_PARAMS_DIR,
)

network_name_option = click.option(
    "--network-name",
    "-n",
    help="Network whose address ledger to read.",
    type=click.Choice(SUPPORTED_NETWORKS),
    required=False,
)

confirmations_option = click.option(
    "--confirmations",
    "-c",
    help="Number of block confirmations to wait for after each transaction.",
    type=MinInt(0),
    required=False,
)

autosign_option = click.option(
    "--auto",
    help="Automatically sign transactions.",
    is_flag=True,
)

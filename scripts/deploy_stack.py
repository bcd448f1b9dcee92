#!/usr/bin/python3
from pathlib import Path
from typing import Optional

import click
from ape import accounts
from ape.cli import ConnectedProviderCommand, network_option

from ibc_deployment.ledger import ledger_filepath, write_ledger
from ibc_deployment.networks import NetworkContext, is_local_network, load_network_config
from ibc_deployment.options import (
    account_alias_option,
    autosign_option,
    config_dir_option,
    confirmations_option,
    params_dir_option,
    sgx_mode_option,
    signer_index_option,
)
from ibc_deployment.params import Deployer
from ibc_deployment.stack import deploy_stack
from ibc_deployment.trust import load_root_certificate


def run(
    network_name: str,
    account: Optional[str],
    signer_index: int,
    sgx_mode: Optional[str],
    config_dir: Path,
    params_dir: Path,
    confirmations: Optional[int],
    auto: bool,
) -> Path:
    """Deploys the stack on the connected network and returns the ledger filepath."""
    # network parameters and the signer are resolved before any transaction
    config = load_network_config(network_name, params_dir=params_dir)
    signer = accounts.load(account) if account else None
    context = NetworkContext.from_config(config, account=signer, signer_index=signer_index)
    context.check_provider()

    root_certificate = load_root_certificate(sgx_mode=sgx_mode, config_dir=config_dir)

    deployer = Deployer(context, autosign=auto, required_confirmations=confirmations)
    ledger = deploy_stack(
        deployer=deployer,
        root_certificate=root_certificate,
        constants=config.get("constants"),
    )
    return write_ledger(ledger, ledger_filepath(config, context.name))


@click.command(cls=ConnectedProviderCommand, name="deploy-stack")
@network_option(required=True)
@account_alias_option
@signer_index_option
@sgx_mode_option
@config_dir_option
@params_dir_option
@confirmations_option
@autosign_option
def cli(
    network,
    account,
    signer_index,
    sgx_mode,
    config_dir,
    params_dir,
    confirmations,
    auto,
):
    """
    Deploys the IBC handler with its logic modules, the LCP client linked
    against LCPProtoMarshaler and AVRValidator, and the mock app; registers
    the client and binds the mock app's port; then writes the addresses to
    the network's env file.

    ape run deploy_stack --network ethereum:chain0:node --auto
    SGX_MODE=SW ape run deploy_stack --network ethereum:chain1:node --auto
    """
    click.echo(f"Connected to {network.name} network.")
    if is_local_network():
        click.secho(
            "You are deploying to ape's local network, which is created and destroyed "
            "with this process. Use a node-backed network (e.g. ethereum:chain0:node).",
            fg="yellow",
        )

    output_filepath = run(
        network_name=network.name,
        account=account,
        signer_index=signer_index,
        sgx_mode=sgx_mode,
        config_dir=config_dir,
        params_dir=params_dir,
        confirmations=confirmations,
        auto=auto,
    )
    click.secho(f"(i) Address ledger written to {output_filepath}!", fg="green")


if __name__ == "__main__":
    cli()

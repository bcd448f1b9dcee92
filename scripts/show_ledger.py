#!/usr/bin/python3

import click

from ibc_deployment.constants import SUPPORTED_NETWORKS
from ibc_deployment.ledger import ledger_filepath, read_ledger
from ibc_deployment.networks import load_network_config
from ibc_deployment.options import network_name_option, params_dir_option


@click.command(name="show-ledger")
@network_name_option
@params_dir_option
def cli(network_name, params_dir):
    """List the deployed addresses recorded for each network. Optionally filter by network."""
    for name in SUPPORTED_NETWORKS:
        if network_name and network_name != name:
            continue

        config = load_network_config(name, params_dir=params_dir)
        filepath = ledger_filepath(config, name)
        click.secho(f"\n{name} ({filepath})", fg="green")
        if not filepath.exists():
            click.secho("    not deployed", fg="yellow")
            continue

        for index, (key, address) in enumerate(read_ledger(filepath).items(), start=1):
            click.secho(f"    {index}. {key} {address}", fg="cyan")


if __name__ == "__main__":
    cli()

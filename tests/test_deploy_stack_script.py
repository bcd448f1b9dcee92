import importlib
from pathlib import Path
from types import SimpleNamespace

import click
import pytest
import yaml
from click.testing import CliRunner

from ibc_deployment.errors import ConfigurationError
from ibc_deployment.ledger import read_ledger
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

SCRIPTS_DIR = Path(__file__).parent.parent / "scripts"


@pytest.fixture
def script(monkeypatch):
    monkeypatch.syspath_prepend(str(SCRIPTS_DIR))
    return importlib.import_module("deploy_stack")


@pytest.fixture
def deploy_command(script):
    """The deploy script's options around its run function, for a connected chain0."""

    @click.command()
    @account_alias_option
    @signer_index_option
    @sgx_mode_option
    @config_dir_option
    @params_dir_option
    @confirmations_option
    @autosign_option
    def command(**options):
        click.echo(f"ledger: {script.run(network_name='chain0', **options)}")

    return command


@pytest.fixture
def deployers(script, monkeypatch, project):
    created = list()

    def build(*args, **kwargs):
        deployer = Deployer(*args, get_container=project, **kwargs)
        created.append(deployer)
        return deployer

    monkeypatch.setattr(script, "Deployer", build)
    return created


def _write_params(params_dir, deployment, artifacts_dir):
    params_dir.mkdir()
    config = {
        "deployment": deployment,
        "constants": {"DEVELOPMENT_MODE": True},
        "artifacts": {"dir": str(artifacts_dir), "filename": "chain0.env.sh"},
    }
    with open(params_dir / "chain0.yml", "w") as file:
        yaml.safe_dump(config, file)


def test_missing_chain_id_aborts_before_deployer(
    deploy_command, deployers, chain, config_dir, tmp_path
):
    params_dir = tmp_path / "params"
    _write_params(params_dir, {"name": "chain0"}, tmp_path / "artifacts")

    result = CliRunner().invoke(
        deploy_command,
        ["--params-dir", str(params_dir), "--config-dir", str(config_dir), "--auto"],
    )

    assert isinstance(result.exception, ConfigurationError)
    assert "chain_id is not set" in str(result.exception)
    assert deployers == []
    assert chain.transactions == []
    assert not (tmp_path / "artifacts").exists()


def test_deploy_stack_run(
    script, deploy_command, deployers, context, chain, config_dir, tmp_path, monkeypatch
):
    params_dir = tmp_path / "params"
    artifacts_dir = tmp_path / "artifacts"
    _write_params(params_dir, {"name": "chain0", "chain_id": 2018}, artifacts_dir)

    # provider checks need a live connection
    monkeypatch.setattr(context, "check_provider", lambda: None)
    from_config = SimpleNamespace(calls=list())

    def resolve(config, account=None, signer_index=0):
        from_config.calls.append((config["deployment"]["chain_id"], account, signer_index))
        return context

    monkeypatch.setattr(script, "NetworkContext", SimpleNamespace(from_config=resolve))

    result = CliRunner().invoke(
        deploy_command,
        ["--params-dir", str(params_dir), "--config-dir", str(config_dir), "--auto"],
        env={"SGX_MODE": "SW"},
    )

    assert result.exit_code == 0, result.output
    assert from_config.calls == [(2018, None, 0)]
    assert len(deployers) == 1
    assert chain.deployed["LCPClient"].args[2] == b"simulation-root-ca"

    exports = read_ledger(artifacts_dir / "chain0.env.sh")
    assert list(exports) == [
        "IBC_HANDLER",
        "LCP_PROTO_MARSHALER",
        "AVR_VALIDATOR",
        "LCP_CLIENT",
        "IBC_MOCKAPP",
    ]
    assert exports["IBC_MOCKAPP"] == chain.deployed["IBCMockApp"].address


def test_invalid_sgx_mode_is_rejected(deploy_command, deployers, config_dir):
    result = CliRunner().invoke(
        deploy_command, ["--config-dir", str(config_dir), "--sgx-mode", "SIM"]
    )
    assert result.exit_code == 2
    assert deployers == []

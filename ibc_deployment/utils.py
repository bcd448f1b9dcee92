from pathlib import Path

import yaml
from ape import project
from ape.contracts import ContractContainer

from ibc_deployment.errors import ConfigurationError, DeploymentError


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def load_config(filepath: Path) -> dict:
    """Loads a network parameters file."""
    if not filepath.exists():
        raise ConfigurationError(f"No network parameters file found at {filepath}")
    config = _load_yaml(filepath)
    if not isinstance(config, dict):
        raise ConfigurationError(f"Malformed network parameters file {filepath}")
    return config


def _get_dependency_contract_container(contract: str) -> ContractContainer:
    for dependency_name, dependency_versions in project.dependencies.items():
        if len(dependency_versions) > 1:
            raise DeploymentError(contract, f"ambiguous {dependency_name} dependency")
        try:
            dependency_api = list(dependency_versions.values())[0]
            contract_container = getattr(dependency_api, contract)
            return contract_container
        except AttributeError:
            continue
    raise DeploymentError(contract, "no contract type found in project or dependencies")


def get_contract_container(contract: str) -> ContractContainer:
    try:
        contract_container = getattr(project, contract)
    except AttributeError:
        # not in root project; check dependencies (yui-ibc-solidity, lcp-solidity)
        contract_container = _get_dependency_contract_container(contract)

    return contract_container

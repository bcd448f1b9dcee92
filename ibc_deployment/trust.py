import os
from pathlib import Path
from typing import Optional

from ibc_deployment.constants import (
    CONFIG_DIR,
    PRODUCTION_ROOT_CERT_FILENAME,
    SGX_MODE_ENVVAR,
    SGX_MODE_HARDWARE,
    SGX_MODE_SIMULATION,
    SGX_MODES,
    SIMULATION_ROOT_CERT_FILENAME,
)
from ibc_deployment.errors import ConfigurationError, ResourceNotFoundError


def is_simulation_mode(sgx_mode: Optional[str]) -> bool:
    """
    Returns True for remote attestation simulation (SGX_MODE=SW).
    An unset or empty mode means hardware attestation.
    """
    if not sgx_mode:
        return False
    if sgx_mode not in SGX_MODES:
        raise ConfigurationError(
            f"Unrecognized {SGX_MODE_ENVVAR} '{sgx_mode}'; expected one of {', '.join(SGX_MODES)}."
        )
    return sgx_mode == SGX_MODE_SIMULATION


def root_certificate_filepath(simulation: bool, config_dir: Path = CONFIG_DIR) -> Path:
    filename = SIMULATION_ROOT_CERT_FILENAME if simulation else PRODUCTION_ROOT_CERT_FILENAME
    return Path(config_dir) / filename


def load_root_certificate(sgx_mode: Optional[str] = None, config_dir: Path = CONFIG_DIR) -> bytes:
    """Reads the attestation root CA certificate (DER) for the selected mode."""
    if sgx_mode is None:
        sgx_mode = os.environ.get(SGX_MODE_ENVVAR)

    simulation = is_simulation_mode(sgx_mode)
    if simulation:
        print("RA simulation is enabled")
    else:
        print(f"RA simulation is disabled ({SGX_MODE_ENVVAR}={sgx_mode or SGX_MODE_HARDWARE})")

    filepath = root_certificate_filepath(simulation, config_dir)
    if not filepath.is_file():
        raise ResourceNotFoundError(f"Root CA certificate not found at {filepath}")
    return filepath.read_bytes()

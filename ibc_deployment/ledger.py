import os
import re
import tempfile
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional

from ibc_deployment.constants import ARTIFACTS_DIR, LEDGER_FILE_SUFFIX
from ibc_deployment.types import Address

ContractName = str
ExportKey = str

EXPORT_LINE_PATTERN = re.compile(r"^export\s+([A-Za-z_][A-Za-z0-9_]*)=(\S+)\s*$")


class DeployedContract(NamedTuple):
    """A contract whose creation transaction has been confirmed on-chain."""

    name: ContractName
    address: Address
    instance: Any
    confirmed: bool = True


class AddressLedger:
    """
    The contracts deployed on one network during a run, in deployment order.
    Entries are only ever appended.
    """

    class DuplicateEntry(ValueError):
        """Raised when a contract name is recorded twice"""

    def __init__(self, network_name: str):
        self.network_name = network_name
        self._entries: "OrderedDict[ContractName, DeployedContract]" = OrderedDict()
        self._export_keys: Dict[ContractName, ExportKey] = dict()

    def __contains__(self, name: ContractName) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries.values())

    def add(self, deployed: DeployedContract, export_as: Optional[ExportKey] = None) -> None:
        if deployed.name in self._entries:
            raise self.DuplicateEntry(f"{deployed.name} is already recorded in the ledger.")
        if export_as and export_as in self._export_keys.values():
            raise self.DuplicateEntry(f"Export key {export_as} is already in use.")
        self._entries[deployed.name] = deployed
        if export_as:
            self._export_keys[deployed.name] = export_as

    def get(self, name: ContractName) -> Optional[DeployedContract]:
        return self._entries.get(name)

    def address_of(self, name: ContractName) -> Address:
        try:
            return self._entries[name].address
        except KeyError:
            raise KeyError(f"{name} has not been deployed on {self.network_name}")

    def exports(self) -> "OrderedDict[ExportKey, Address]":
        """Returns the exported keys and addresses, in deployment order."""
        exports = OrderedDict()
        for name, deployed in self._entries.items():
            key = self._export_keys.get(name)
            if key:
                exports[key] = deployed.address
        return exports


def ledger_filepath(config: Dict, network_name: str) -> Path:
    """Returns the filepath of the address ledger for a network."""
    artifact_config = config.get("artifacts") or dict()
    artifact_dir = Path(artifact_config.get("dir", ARTIFACTS_DIR))
    filename = artifact_config.get("filename") or f"{network_name}{LEDGER_FILE_SUFFIX}"
    return artifact_dir / filename


def _format_ledger(exports: Dict[ExportKey, Address]) -> str:
    return "".join(f"export {key}={address}\n" for key, address in exports.items())


def write_ledger(ledger: AddressLedger, filepath: Path) -> Path:
    """
    Writes the ledger's exported addresses as shell `export KEY=VALUE` lines,
    replacing any previous content of the file.
    """
    content = _format_ledger(ledger.exports())
    filepath.parent.mkdir(parents=True, exist_ok=True)

    print(f"Writing contract addresses to {filepath}")
    print(content)

    # replace atomically so a reader never sees a partially written ledger
    fd, temp_filepath = tempfile.mkstemp(dir=filepath.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as file:
            file.write(content)
        os.chmod(temp_filepath, 0o644)
        os.replace(temp_filepath, filepath)
    except BaseException:
        os.unlink(temp_filepath)
        raise

    return filepath


def read_ledger(filepath: Path) -> "OrderedDict[ExportKey, Address]":
    """Reads the exported addresses of a ledger file."""
    exports = OrderedDict()
    with open(filepath, "r") as file:
        for line_number, line in enumerate(file, start=1):
            if not line.strip():
                continue
            match = EXPORT_LINE_PATTERN.match(line)
            if not match:
                raise ValueError(f"Malformed ledger line {line_number} in {filepath}: {line!r}")
            key, value = match.groups()
            exports[key] = Address(value)
    return exports

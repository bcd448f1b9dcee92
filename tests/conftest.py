from types import SimpleNamespace

import pytest
from ape.exceptions import ApeException
from eth_utils import to_checksum_address

from ibc_deployment.constants import (
    AVR_VALIDATOR,
    IBC_HANDLER,
    IBC_LOGIC_MODULES,
    IBC_MOCK_APP,
    LCP_CLIENT,
    LCP_PROTO_MARSHALER,
)
from ibc_deployment.errors import DeploymentError
from ibc_deployment.linker import link_placeholder
from ibc_deployment.networks import NetworkContext
from ibc_deployment.params import Deployer

# Common constants
CHAIN_ID = 2018
NETWORK_NAME = "chain0"
ROOT_CERTIFICATE = bytes.fromhex("3082") + b"\x01" * 64
DEPLOYER_ADDRESS = to_checksum_address("0x" + "de" * 20)
LOGIC_MODULE_ADDRESSES = tuple(
    to_checksum_address(f"0x{0x100 + i:040x}") for i in range(len(IBC_LOGIC_MODULES))
)

HANDLER_ABIS = {
    "registerClient": [("clientType", "string"), ("client", "address")],
    "bindPort": [("portId", "string"), ("moduleAddress", "address")],
}

CONSTRUCTOR_ABIS = {
    IBC_HANDLER: [(f"logicModule{i}", "address") for i in range(len(IBC_LOGIC_MODULES))],
    LCP_CLIENT: [("ibcHandler", "address"), ("developmentMode", "bool"), ("rootCACert", "bytes")],
    IBC_MOCK_APP: [("ibcHandler", "address")],
}


# Utility functions
def source_id(contract_name):
    return f"contracts/{contract_name}.sol"


def placeholder(library_name):
    return link_placeholder(f"{source_id(library_name)}:{library_name}")


def client_bytecode():
    return (
        "0x6080604052"
        + placeholder(LCP_PROTO_MARSHALER)
        + "5050"
        + placeholder(AVR_VALIDATOR)
        + "00"
    )


# Fakes of the ape objects touched by the deployment code


class FakeContractType:
    def __init__(self, name, bytecode="0x6080604052"):
        self.name = name
        self.source_id = source_id(name)
        self.deployment_bytecode = SimpleNamespace(bytecode=bytecode)

    def model_copy(self, update):
        copy = FakeContractType(self.name)
        copy.deployment_bytecode = update.get("deployment_bytecode", self.deployment_bytecode)
        return copy


class FakeContainer:
    def __init__(self, contract_type):
        self.contract_type = contract_type

    @property
    def constructor(self):
        inputs = CONSTRUCTOR_ABIS.get(self.contract_type.name, [])
        return SimpleNamespace(
            abi=SimpleNamespace(inputs=[SimpleNamespace(name=n, type=t) for n, t in inputs])
        )


class FakeMethod:
    def __init__(self, contract, name, inputs, chain):
        self.contract = contract
        self.name = name
        self.abis = [
            SimpleNamespace(
                name=name,
                inputs=[SimpleNamespace(name=n, type=t) for n, t in inputs],
            )
        ]
        self.chain = chain

    def __str__(self):
        return self.name

    def __call__(self, *args, sender, **kwargs):
        self.chain.submit(sender, ("transact", self.contract.contract_type.name, self.name, args))
        return SimpleNamespace(failed=False, txn_hash="0x" + "ab" * 32)


class FakeInstance:
    def __init__(self, contract_type, address, args, chain):
        self.contract_type = contract_type
        self.address = address
        self.args = args
        self._chain = chain

    def __getattr__(self, name):
        inputs = HANDLER_ABIS.get(name)
        if inputs is None:
            raise AttributeError(name)
        return FakeMethod(self, name, inputs, self._chain)


class FakeChain:
    """
    Records every submitted transaction in order and hands out addresses.
    Deployments of contracts and calls of methods named in `fail_on` raise
    `error_class` instead of being recorded.
    """

    def __init__(self):
        self.transactions = list()
        self.fail_on = set()
        self.error_class = ApeException
        self.deployed = dict()

    def submit(self, sender, transaction):
        target = transaction[1] if transaction[0] == "deploy" else transaction[2]
        if target in self.fail_on:
            raise self.error_class(f"execution reverted: {target}")
        self.transactions.append(transaction)

    @property
    def deployments(self):
        return [t[1] for t in self.transactions if t[0] == "deploy"]

    def next_address(self):
        return to_checksum_address(f"0x{len(self.deployed) + 1:040x}")


class FakeAccount:
    def __init__(self, chain, address=DEPLOYER_ADDRESS):
        self.address = address
        self.balance = 10**21
        self.chain = chain
        self.deploy_kwargs = list()

    def deploy(self, container, *args, **kwargs):
        contract_type = container.contract_type
        self.chain.submit(self, ("deploy", contract_type.name, args))
        self.deploy_kwargs.append(kwargs)
        instance = FakeInstance(contract_type, self.chain.next_address(), args, self.chain)
        self.chain.deployed[contract_type.name] = instance
        return instance


class FakeProject:
    def __init__(self, containers):
        self.containers = containers

    def __call__(self, contract_name):
        try:
            return self.containers[contract_name]
        except KeyError:
            raise DeploymentError(contract_name, "no contract type found")


# Fixtures
@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def account(chain):
    return FakeAccount(chain)


@pytest.fixture
def project():
    names = [*IBC_LOGIC_MODULES, IBC_HANDLER, LCP_PROTO_MARSHALER, AVR_VALIDATOR, IBC_MOCK_APP]
    containers = {name: FakeContainer(FakeContractType(name)) for name in names}
    containers[LCP_CLIENT] = FakeContainer(FakeContractType(LCP_CLIENT, client_bytecode()))
    return FakeProject(containers)


@pytest.fixture
def context(account):
    return NetworkContext(
        name=NETWORK_NAME,
        chain_id=CHAIN_ID,
        signer=account,
        rpc_url="http://127.0.0.1:8545",
    )


@pytest.fixture
def deployer(context, project):
    return Deployer(context, autosign=True, get_container=project)


@pytest.fixture
def handler(deployer):
    return deployer.deploy(IBC_HANDLER, *LOGIC_MODULE_ADDRESSES)


@pytest.fixture
def config_dir(tmp_path):
    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "simulation_rootca.der").write_bytes(b"simulation-root-ca")
    (directory / "Intel_SGX_Attestation_RootCA.der").write_bytes(b"intel-root-ca")
    return directory

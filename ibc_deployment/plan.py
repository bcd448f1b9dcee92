import typing
from abc import ABC, abstractmethod
from typing import Any, Iterator, List, NamedTuple, Optional, Tuple

from ibc_deployment.constants import (
    AVR_VALIDATOR,
    DEFAULT_DEVELOPMENT_MODE,
    IBC_HANDLER,
    IBC_LOGIC_MODULES,
    IBC_MOCK_APP,
    LCP_CLIENT,
    LCP_CLIENT_TYPE,
    LCP_PROTO_MARSHALER,
    LEDGER_EXPORT_KEYS,
    PORT_MOCK,
)
from ibc_deployment.errors import ConfigurationError
from ibc_deployment.ledger import AddressLedger


class VariableContext:
    """Everything a plan variable may resolve against during a run."""

    def __init__(
        self,
        ledger: AddressLedger,
        constants: typing.Dict[str, Any] = None,
        root_certificate: Optional[bytes] = None,
    ):
        self.ledger = ledger
        self.constants = constants or dict()
        self.root_certificate = root_certificate


# Variables


class Variable(ABC):
    @abstractmethod
    def resolve(self, context: VariableContext) -> Any:
        raise NotImplementedError

    def references(self) -> List[str]:
        """Names of the contracts this variable needs to be deployed beforehand."""
        return list()


class ContractName(Variable):
    def __init__(self, contract_name: str):
        self.contract_name = contract_name

    def __repr__(self) -> str:
        return f"${self.contract_name}"

    def references(self) -> List[str]:
        return [self.contract_name]

    def resolve(self, context: VariableContext) -> Any:
        """Resolves a contract address."""
        return context.ledger.address_of(self.contract_name)


_MISSING = object()


class Constant(Variable):
    def __init__(self, constant_name: str, default: Any = _MISSING):
        self.constant_name = constant_name
        self.default = default

    def __repr__(self) -> str:
        return f"${self.constant_name}"

    def resolve(self, context: VariableContext) -> Any:
        value = context.constants.get(self.constant_name, self.default)
        if value is _MISSING:
            raise ConfigurationError(
                f"Constant '{self.constant_name}' not found in network parameters."
            )
        return value


class RootCertificate(Variable):
    def __repr__(self) -> str:
        return "$root_ca"

    def resolve(self, context: VariableContext) -> Any:
        if context.root_certificate is None:
            raise ConfigurationError("Root CA certificate has not been loaded.")
        return context.root_certificate


def _resolve_param(value: Any, context: VariableContext) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, (list, tuple)):
        return [_resolve_param(v, context) for v in value]

    if isinstance(value, Variable):
        return value.resolve(context)

    return value  # literally a value


def resolve_args(args: typing.Sequence[Any], context: VariableContext) -> List[Any]:
    return [_resolve_param(arg, context) for arg in args]


def _references(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [name for v in value for name in _references(v)]
    if isinstance(value, Variable):
        return value.references()
    return list()


# Steps


class Deploy(NamedTuple):
    """Deploys a contract, optionally linked against already deployed libraries."""

    contract_name: str
    args: Tuple[Any, ...] = ()
    libraries: Tuple[str, ...] = ()
    export_as: Optional[str] = None

    def references(self) -> List[str]:
        return _references(self.args) + list(self.libraries)


class Configure(NamedTuple):
    """Calls a state-changing method on an already deployed contract."""

    target: str
    method: str
    args: Tuple[Any, ...] = ()

    def references(self) -> List[str]:
        return [self.target] + _references(self.args)


def register_client(
    client_name: str = LCP_CLIENT,
    client_type: str = LCP_CLIENT_TYPE,
    handler_name: str = IBC_HANDLER,
) -> Configure:
    """Registers a light client implementation on the IBC handler."""
    return Configure(handler_name, "registerClient", (client_type, ContractName(client_name)))


def bind_port(
    app_name: str = IBC_MOCK_APP,
    port_id: str = PORT_MOCK,
    handler_name: str = IBC_HANDLER,
) -> Configure:
    """Binds an IBC application to a port on the IBC handler."""
    return Configure(handler_name, "bindPort", (port_id, ContractName(app_name)))


Step = typing.Union[Deploy, Configure]


class DeploymentPlan:
    """
    An explicit, ordered list of deployment and configuration steps.

    The order is validated on construction: every contract used as a
    constructor argument, linked library or configuration target must be
    deployed by an earlier step.
    """

    class Invalid(ValueError):
        """Raised when the plan is not in dependency order"""

    def __init__(self, steps: typing.Iterable[Step]):
        self.steps = tuple(steps)
        self._validate()

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def _validate(self) -> None:
        deployed, export_keys = list(), set()
        for position, step in enumerate(self.steps):
            if not isinstance(step, (Deploy, Configure)):
                raise self.Invalid(f"Step {position} is not a deployment step: {step!r}")

            for name in step.references():
                if name not in deployed:
                    raise self.Invalid(
                        f"Step {position} ({self._describe(step)}) references {name} "
                        f"before it is deployed."
                    )

            if isinstance(step, Deploy):
                if step.contract_name in deployed:
                    raise self.Invalid(f"{step.contract_name} is deployed more than once.")
                if step.export_as:
                    if step.export_as in export_keys:
                        raise self.Invalid(f"Export key {step.export_as} is used more than once.")
                    export_keys.add(step.export_as)
                deployed.append(step.contract_name)

    @staticmethod
    def _describe(step: Step) -> str:
        if isinstance(step, Deploy):
            return f"deploy {step.contract_name}"
        return f"{step.target}.{step.method}"

    def contract_names(self) -> List[str]:
        return [step.contract_name for step in self.steps if isinstance(step, Deploy)]

    def until(self, contract_name: str) -> "DeploymentPlan":
        """Returns the leading part of the plan, up to and including deploying `contract_name`."""
        for position, step in enumerate(self.steps):
            if isinstance(step, Deploy) and step.contract_name == contract_name:
                return DeploymentPlan(self.steps[: position + 1])
        raise ValueError(f"{contract_name} is not deployed by this plan.")


def _deploy(contract_name: str, *args, libraries: Tuple[str, ...] = ()) -> Deploy:
    return Deploy(
        contract_name=contract_name,
        args=tuple(args),
        libraries=libraries,
        export_as=LEDGER_EXPORT_KEYS.get(contract_name),
    )


def ibc_handler_steps(logic_modules: typing.Sequence[str] = IBC_LOGIC_MODULES) -> List[Step]:
    steps = [_deploy(name) for name in logic_modules]
    steps.append(_deploy(IBC_HANDLER, *[ContractName(name) for name in logic_modules]))
    return steps


def ibc_stack_plan(logic_modules: typing.Sequence[str] = IBC_LOGIC_MODULES) -> DeploymentPlan:
    """
    logic modules -> OwnableIBCHandler -> LCPProtoMarshaler, AVRValidator
    -> LCPClient (linked) -> registerClient -> IBCMockApp -> bindPort
    """
    steps = ibc_handler_steps(logic_modules)
    steps.extend(
        [
            _deploy(LCP_PROTO_MARSHALER),
            _deploy(AVR_VALIDATOR),
            _deploy(
                LCP_CLIENT,
                ContractName(IBC_HANDLER),
                Constant("DEVELOPMENT_MODE", default=DEFAULT_DEVELOPMENT_MODE),
                RootCertificate(),
                libraries=(LCP_PROTO_MARSHALER, AVR_VALIDATOR),
            ),
            register_client(),
            _deploy(IBC_MOCK_APP, ContractName(IBC_HANDLER)),
            bind_port(),
        ]
    )
    return DeploymentPlan(steps)

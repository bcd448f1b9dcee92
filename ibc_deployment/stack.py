import typing
from collections import OrderedDict
from typing import Any, Optional

from ape.api import ReceiptAPI

from ibc_deployment.constants import IBC_HANDLER
from ibc_deployment.errors import WiringError
from ibc_deployment.ledger import AddressLedger, DeployedContract
from ibc_deployment.params import Deployer, Transactor
from ibc_deployment.plan import (
    Configure,
    Deploy,
    DeploymentPlan,
    VariableContext,
    ibc_stack_plan,
    resolve_args,
)


def configure(
    transactor: Transactor, target: DeployedContract, method_name: str, *args
) -> ReceiptAPI:
    """Sends a configuration transaction to a deployed contract."""
    try:
        method = getattr(target.instance, method_name)
    except AttributeError as e:
        raise WiringError(f"{target.name} has no method '{method_name}'") from e
    return transactor.transact(method, *args)


class StackAssembler:
    """
    Executes a deployment plan step by step with a single deployer,
    recording every confirmed deployment in an address ledger.

    The first failure aborts the run; contracts deployed before it are
    reported and left on-chain.
    """

    def __init__(
        self,
        deployer: Deployer,
        plan: Optional[DeploymentPlan] = None,
        constants: typing.Dict[str, Any] = None,
        root_certificate: Optional[bytes] = None,
    ):
        self.deployer = deployer
        self.plan = plan if plan is not None else ibc_stack_plan()
        self.ledger = AddressLedger(network_name=deployer.context.name)
        self.variables = VariableContext(
            ledger=self.ledger, constants=constants, root_certificate=root_certificate
        )

    def run(self) -> AddressLedger:
        for step in self.plan:
            try:
                if isinstance(step, Deploy):
                    self._deploy(step)
                else:
                    self._configure(step)
            except Exception:
                self._report_orphans()
                raise
        return self.ledger

    def _deploy(self, step: Deploy) -> DeployedContract:
        args = resolve_args(step.args, self.variables)
        if step.libraries:
            libraries = OrderedDict()
            for library_name in step.libraries:
                library = self.ledger.get(library_name)
                libraries[library_name] = library.address if library else None
            deployed = self.deployer.deploy_and_link(step.contract_name, libraries, *args)
        else:
            deployed = self.deployer.deploy(step.contract_name, *args)
        self.ledger.add(deployed, export_as=step.export_as)
        return deployed

    def _configure(self, step: Configure) -> ReceiptAPI:
        target = self.ledger.get(step.target)
        args = resolve_args(step.args, self.variables)
        print(f"\nConfiguring {step.target}.{step.method}")
        return configure(self.deployer, target, step.method, *args)

    def _report_orphans(self) -> None:
        if not len(self.ledger):
            print("\nDeployment aborted; no contracts were deployed.")
            return
        print(f"\nDeployment aborted; contracts left on {self.ledger.network_name}:")
        for deployed in self.ledger:
            print(f"\t{deployed.name} {deployed.address}")


def deploy_ibc(deployer: Deployer, plan: Optional[DeploymentPlan] = None) -> DeployedContract:
    """Deploys the IBC logic modules and the handler aggregating them."""
    plan = plan if plan is not None else ibc_stack_plan()
    ledger = StackAssembler(deployer=deployer, plan=plan.until(IBC_HANDLER)).run()
    return ledger.get(IBC_HANDLER)


def deploy_stack(
    deployer: Deployer,
    root_certificate: bytes,
    constants: typing.Dict[str, Any] = None,
    plan: Optional[DeploymentPlan] = None,
) -> AddressLedger:
    """Deploys and wires the IBC handler, LCP client and mock app."""
    assembler = StackAssembler(
        deployer=deployer, plan=plan, constants=constants, root_certificate=root_certificate
    )
    return assembler.run()

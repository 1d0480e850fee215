from collections import OrderedDict
from enum import Enum
from typing import Any, List, Optional, Tuple

from curation_deploy.artifacts import ArtifactStore, ContractRecord
from curation_deploy.context import ExecutionContext
from curation_deploy.deployer import ContractDeployer
from curation_deploy.errors import DeploymentError, PlanInvalid, UnresolvedDependency
from curation_deploy.params import DependencyResolver
from curation_deploy.plan import DeploymentPlan, DeploymentStep, Step, WiringStep
from curation_deploy.wiring import WiringExecutor


class RedeployPolicy(Enum):
    # deploy every step, even if the network already has a record for the contract
    ALWAYS = "always"
    # reuse the recorded address and send nothing
    SKIP_EXISTING = "skip-existing"


class Orchestrator:
    """
    Walks a deployment plan in its declared order: deployment steps are resolved,
    deployed and recorded, wiring steps are executed. The first failure stops the run;
    what was already sent stays on chain and what was recorded stays recorded.
    """

    def __init__(
        self,
        context: ExecutionContext,
        store: ArtifactStore,
        redeploy: RedeployPolicy = RedeployPolicy.ALWAYS,
        deployer: Optional[ContractDeployer] = None,
        executor: Optional[WiringExecutor] = None,
        resolver: Optional[DependencyResolver] = None,
    ):
        self.context = context
        self.store = store
        self.redeploy = redeploy
        self.resolver = resolver or DependencyResolver(
            store=store, deployer_address=context.deployer.address
        )
        self.deployer = deployer or ContractDeployer.from_context(context)
        self.executor = executor or WiringExecutor.from_context(
            context, store=store, resolver=self.resolver
        )
        self.receipts: List[Any] = list()

    @property
    def network(self) -> str:
        return self.context.network

    def _annotate(self, error: DeploymentError, index: int, step: Step) -> None:
        error.step_index = index
        if error.network is None:
            error.network = self.network
        if error.contract_name is None:
            error.contract_name = step.contract_name

    def _reuses_record(self, step: DeploymentStep) -> bool:
        return self.redeploy == RedeployPolicy.SKIP_EXISTING and self.store.exists(
            self.network, step.contract_name
        )

    def _deploy(self, step: DeploymentStep) -> ContractRecord:
        name = step.contract_name
        if self._reuses_record(step):
            record = self.store.read(self.network, name)
            print(f"(i) Skipping {name}; already deployed at {record.address}")
            return record

        # nothing is sent for a record that could not be written
        self.store.check_writable(self.network, name)
        args = self.resolver.resolve(step, self.network)
        if step.upgradeable:
            deployment = self.deployer.deploy_upgradeable(
                name,
                args,
                initializer=step.initializer,
                parameter_names=step.parameter_names,
            )
        else:
            deployment = self.deployer.deploy_direct(
                name, args, parameter_names=step.parameter_names
            )

        record = self.store.write(
            self.network,
            name,
            deployment.address,
            tx_hash=deployment.tx_hash,
            implementation=deployment.implementation,
            deployer=self.context.deployer.address,
        )
        print(f"(i) Recorded {name} at {self.store.filepath(self.network, name)}")
        return record

    def _wire(self, step: WiringStep) -> Any:
        signer = self.context.signer_for(step)
        receipt = self.executor.execute(step, self.network, signer)
        self.receipts.append(receipt)
        return receipt

    def run(self, plan: DeploymentPlan, start_at: int = 0) -> List[ContractRecord]:
        if not 0 <= start_at <= max(len(plan) - 1, 0):
            raise PlanInvalid(
                f"Cannot start plan '{plan.name}' at step {start_at}; it has {len(plan)} steps",
                network=self.network,
            )

        self.deployer.forget_proxies()
        print(f"Running plan '{plan.name}' on {self.network}")
        records = list()
        for index, step in enumerate(plan.steps):
            if index < start_at:
                continue
            print(f"\n[{index}] {step.describe()}")
            try:
                if isinstance(step, DeploymentStep):
                    records.append(self._deploy(step))
                else:
                    self._wire(step)
            except DeploymentError as error:
                self._annotate(error, index=index, step=step)
                raise

        if self.context.verify:
            self.verify(records)
        return records

    def validate(self, plan: DeploymentPlan) -> List[Tuple[Step, OrderedDict]]:
        """
        Resolves every step without sending transactions or writing artifacts.
        Contracts deployed by an earlier step of the plan resolve to the zero address.
        """
        pending = set()
        resolved = list()
        for index, step in enumerate(plan.steps):
            try:
                for name in step.dependencies:
                    if name not in pending and not self.store.exists(self.network, name):
                        raise UnresolvedDependency(name=name, network=self.network)
                if isinstance(step, WiringStep):
                    self.context.signer_for(step)
                elif not self._reuses_record(step):
                    self.store.check_writable(self.network, step.contract_name)
                named_args = self.resolver.resolve_named(step, self.network, pending=pending)
            except DeploymentError as error:
                self._annotate(error, index=index, step=step)
                raise
            resolved.append((step, named_args))
            if isinstance(step, DeploymentStep):
                pending.add(step.contract_name)
        return resolved

    def verify(self, records: List[ContractRecord]) -> None:
        for record in records:
            # proxies are verified through their implementation
            address = record.implementation or record.address
            print(f"(i) Verifying {record.name} at {address}...")
            self.context.backend.verify(address)

"""Balance-driven relay: consensus source -> (intermediate) -> Sapphire.

Each cycle re-reads every balance from the ledgers, picks one action from
that observation alone and schedules the next cycle. Nothing is carried
between cycles, so a restarted process continues from chain state.
"""
from __future__ import annotations

import asyncio
from dataclasses import replace

from sapphire_relay.adapters.address import to_runtime_address
from sapphire_relay.adapters.gateway import LedgerGateway
from sapphire_relay.config.networks import NetworkConfig
from sapphire_relay.domain.errors import OperationalError, RelayError
from sapphire_relay.domain.models import (
    AccountSet,
    Action,
    AllowanceGrant,
    CycleOutcome,
    Deposit,
    Fee,
    Operation,
    OperationKind,
    Transfer,
    WorkflowState,
)
from sapphire_relay.infra.telemetry import RuntimeEventLogger
from sapphire_relay.status.reporter import StatusReporter


def decide(state: WorkflowState, has_intermediate: bool) -> Action:
    if state.source_balance > 0:
        return Action.DRAIN_SOURCE
    if has_intermediate and (state.intermediate_balance or 0) > 0:
        return Action.DRAIN_INTERMEDIATE
    return Action.IDLE


def transfer_fee(network: NetworkConfig) -> int:
    return network.gas_price * network.fee_gas * network.scaling_factor


def transfer_amount(balance: int, fee: int) -> int | None:
    """Amount left after the fee, or None when nothing would remain."""
    amount = int(balance) - int(fee)
    if amount <= 0:
        return None
    return amount


class SettlementEngine:
    """Observe-decide-act loop for one resolved account set."""

    def __init__(
        self,
        accounts: AccountSet,
        gateway: LedgerGateway,
        network: NetworkConfig,
        reporter: StatusReporter,
        log,
        *,
        poll_interval: float = 10.0,
        transfer_delay: float = 0.001,
        events: RuntimeEventLogger | None = None,
    ):
        self.accounts = accounts
        self.gateway = gateway
        self.network = network
        self.reporter = reporter
        self.log = log
        self.poll_interval = float(poll_interval)
        self.transfer_delay = float(transfer_delay)
        self.events = events
        self.cycles = 0

    def _emit(self, event: str, **fields) -> None:
        if self.events is not None:
            self.events.emit(event, **fields)

    async def observe(self) -> WorkflowState:
        source = await self.gateway.consensus_balance(self.accounts.source.address)
        intermediate = None
        if self.accounts.intermediate is not None:
            intermediate = await self.gateway.runtime_balance(self.accounts.intermediate.address)
        # display only
        destination = await self.gateway.runtime_balance(self.accounts.destination.address)
        return WorkflowState(source, intermediate, destination)

    async def run_cycle(self) -> CycleOutcome:
        self.cycles += 1
        action: Action | None = None
        state: WorkflowState | None = None
        try:
            state = await self.observe()
            self.reporter.balances(self.accounts, state)
            action = decide(state, self.accounts.has_intermediate)
            self.log.debug(
                "cycle=%s source=%s intermediate=%s destination=%s action=%s",
                self.cycles,
                state.source_balance,
                state.intermediate_balance,
                state.destination_balance,
                action.value,
            )
            if action is Action.DRAIN_SOURCE:
                submitted = await self._drain_source(state.source_balance)
                return CycleOutcome(action, self.poll_interval, state, submitted=submitted)
            if action is Action.DRAIN_INTERMEDIATE:
                submitted = await self._drain_intermediate(state.intermediate_balance or 0)
                delay = self.transfer_delay if submitted else self.poll_interval
                return CycleOutcome(action, delay, state, submitted=submitted)
            return CycleOutcome(Action.IDLE, self.poll_interval, state)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            err = exc if isinstance(exc, RelayError) else OperationalError(f"{type(exc).__name__}: {exc}")
            if err is not exc:
                err.__cause__ = exc
            self.log.exception("cycle=%s failed action=%s: %s", self.cycles, action and action.value, err)
            self._report_failure(action, err)
            return CycleOutcome(action, self.poll_interval, state, error=err)

    def _report_failure(self, action: Action | None, err: RelayError) -> None:
        # a broken status sink must not stop the loop
        try:
            self.reporter.alert(str(err))
        except Exception as exc:
            self.log.exception("cycle=%s alert not delivered: %s", self.cycles, exc)
        try:
            self._emit("cycle.error", cycle=self.cycles, action=action and action.value, error=str(err))
        except Exception as exc:
            self.log.exception("cycle=%s event not written: %s", self.cycles, exc)

    async def _check_existing_allowance(self) -> None:
        # Grants below add to the allowance; a leftover one is reported, not reconciled.
        existing = await self.gateway.consensus_allowance(
            self.accounts.source.address, self.network.bridge_address
        )
        if existing > 0:
            msg = (
                f"existing allowance {existing} for {self.network.bridge_address}; "
                "granting on top of it"
            )
            self.log.warning(msg)
            self.reporter.alert(msg)
            self._emit("allowance.existing", amount=str(existing))

    async def _drain_source(self, amount: int) -> tuple[Operation, ...]:
        source = self.accounts.source
        target = self.accounts.intermediate or self.accounts.destination
        deposit_amount = amount * self.network.scaling_factor
        self.log.info("depositable %s -> %s (%s runtime units)", amount, target.address, deposit_amount)

        await self._check_existing_allowance()

        grant = Operation(
            kind=OperationKind.ALLOWANCE_GRANT,
            signer=source.signer,
            nonce=await self.gateway.consensus_nonce(source.address),
            fee=Fee(amount=0, gas=0),
            body=AllowanceGrant(beneficiary=self.network.bridge_address, amount_change=amount),
        )
        gas = await self.gateway.estimate_gas(grant)
        grant = replace(grant, fee=Fee(amount=0, gas=gas))
        await self.gateway.submit(grant)
        self._emit("submit.allowance", amount=str(amount), nonce=grant.nonce, gas=gas)

        deposit = Operation(
            kind=OperationKind.DEPOSIT,
            signer=source.signer,
            # the source key signs the deposit as a runtime transaction
            nonce=await self.gateway.runtime_nonce(source.address),
            fee=Fee(amount=0, gas=self.network.fee_gas, consensus_messages=1),
            body=Deposit(to=to_runtime_address(target.address), amount=deposit_amount),
        )
        await self.gateway.submit(deposit)
        self._emit("submit.deposit", amount=str(deposit_amount), nonce=deposit.nonce, to=target.role)
        return grant, deposit

    async def _drain_intermediate(self, balance: int) -> tuple[Operation, ...]:
        intermediate = self.accounts.intermediate
        if intermediate is None:
            raise OperationalError("drain intermediate without an intermediate account")
        fee = transfer_fee(self.network)
        amount = transfer_amount(balance, fee)
        if amount is None:
            self.log.warning("intermediate balance %s does not cover transfer fee %s; skipping", balance, fee)
            self._emit("transfer.skip", balance=str(balance), fee=str(fee))
            return ()

        self.log.info("transferable %s -> %s (fee %s)", amount, self.accounts.destination.address, fee)
        intermediate_runtime = to_runtime_address(intermediate.address)
        transfer = Operation(
            kind=OperationKind.TRANSFER,
            signer=intermediate.signer,
            nonce=await self.gateway.runtime_nonce(intermediate_runtime),
            fee=Fee(amount=fee, gas=self.network.fee_gas),
            body=Transfer(to=to_runtime_address(self.accounts.destination.address), amount=amount),
        )
        await self.gateway.submit(transfer)
        self._emit("submit.transfer", amount=str(amount), fee=str(fee), nonce=transfer.nonce)
        return (transfer,)

    async def run(self) -> None:
        self.log.info(
            "relay loop start network=%s source=%s intermediate=%s destination=%s",
            self.network.name,
            self.accounts.source.address,
            self.accounts.intermediate.address if self.accounts.intermediate else "-",
            self.accounts.destination.address,
        )
        self._emit("engine.start", network=self.network.name, hops=2 if self.accounts.has_intermediate else 1)
        while True:
            outcome = await self.run_cycle()
            await asyncio.sleep(outcome.delay)

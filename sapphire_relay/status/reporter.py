from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

from sapphire_relay.config.networks import NetworkConfig
from sapphire_relay.data.snapshot_store import SnapshotStore
from sapphire_relay.domain.models import Account, AccountSet, Ledger, WorkflowState, format_amount
from sapphire_relay.identity.base import SecretMaterial

G = "\033[92m"; R = "\033[91m"; Y = "\033[93m"; B = "\033[94m"; RS = "\033[0m"


class StatusReporter(Protocol):
    def accounts(self, accounts: AccountSet) -> None: ...

    def secret(self, secret: SecretMaterial) -> None: ...

    def balances(self, accounts: AccountSet, state: WorkflowState) -> None: ...

    def alert(self, message: str) -> None: ...


def _balances_by_role(accounts: AccountSet, state: WorkflowState) -> list[tuple[Account, int]]:
    rows = [(accounts.source, state.source_balance)]
    if accounts.intermediate is not None:
        rows.append((accounts.intermediate, state.intermediate_balance or 0))
    rows.append((accounts.destination, state.destination_balance))
    return rows


def _decimals(network: NetworkConfig, account: Account) -> int:
    if account.ledger is Ledger.CONSENSUS:
        return network.consensus_decimals
    return network.runtime_decimals


class ConsoleReporter:
    """Terminal status lines. Balances print only when they change."""

    def __init__(self, network: NetworkConfig, out: Callable[[str], None] = print):
        self.network = network
        self._out = out
        self._last: WorkflowState | None = None
        self._secret_shown = False

    def accounts(self, accounts: AccountSet) -> None:
        self._out(f"{B}[RELAY] network={self.network.name} hops={'2' if accounts.has_intermediate else '1'}{RS}")
        for acct in accounts.all():
            self._out(f"  {acct.role:<13} {acct.ledger.value:<9} {acct.address}")

    def secret(self, secret: SecretMaterial) -> None:
        if self._secret_shown:
            return
        self._secret_shown = True
        header = f"======== SECRET {secret.kind.upper()} ========"
        self._out(f"\n{R}{header}{RS}")
        self._out(f"{R}Anyone with this can move the relayed funds. Write it down, never share it.{RS}")
        self._out(secret.value)
        self._out(f"{R}{'=' * len(header)}{RS}\n")

    def balances(self, accounts: AccountSet, state: WorkflowState) -> None:
        if state == self._last:
            return
        self._last = state
        for acct, value in _balances_by_role(accounts, state):
            human = format_amount(value, _decimals(self.network, acct))
            self._out(f"{G}[BALANCE]{RS} {acct.role:<13} {acct.address}   balance: {human} ROSE ({value})")

    def alert(self, message: str) -> None:
        self._out(f"{R}[ALERT] {message}{RS}")


class SnapshotReporter:
    """Keeps a JSON status snapshot current for the dashboard."""

    def __init__(self, network: NetworkConfig, store: SnapshotStore):
        self.network = network
        self.store = store
        self.payload: dict = {
            "ok": True,
            "network": network.name,
            "accounts": [],
            "alert": "",
            "updated_ts": 0.0,
        }
        self._secret: dict | None = None

    def _flush(self) -> None:
        self.payload["updated_ts"] = time.time()
        self.store.write(self.payload)

    def accounts(self, accounts: AccountSet) -> None:
        self.payload["accounts"] = [
            {"role": a.role, "ledger": a.ledger.value, "address": a.address, "balance": None}
            for a in accounts.all()
        ]
        self._flush()

    def secret(self, secret: SecretMaterial) -> None:
        # memory only; the snapshot file never carries it
        self._secret = {"kind": secret.kind, "value": secret.value, "sensitive": True}

    def secret_view(self) -> dict | None:
        return dict(self._secret) if self._secret is not None else None

    def balances(self, accounts: AccountSet, state: WorkflowState) -> None:
        rows = []
        for acct, value in _balances_by_role(accounts, state):
            rows.append({
                "role": acct.role,
                "ledger": acct.ledger.value,
                "address": acct.address,
                # strings: JSON consumers lose precision past 2**53
                "balance": str(value),
                "balance_rose": format_amount(value, _decimals(self.network, acct)),
            })
        self.payload["accounts"] = rows
        self.payload["ok"] = True
        self._flush()

    def alert(self, message: str) -> None:
        self.payload["ok"] = False
        self.payload["alert"] = message
        self._flush()


class CompositeReporter:
    def __init__(self, *reporters: StatusReporter):
        self.reporters = reporters

    def accounts(self, accounts: AccountSet) -> None:
        for r in self.reporters:
            r.accounts(accounts)

    def secret(self, secret: SecretMaterial) -> None:
        for r in self.reporters:
            r.secret(secret)

    def balances(self, accounts: AccountSet, state: WorkflowState) -> None:
        for r in self.reporters:
            r.balances(accounts, state)

    def alert(self, message: str) -> None:
        for r in self.reporters:
            r.alert(message)

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Union

from sapphire_relay.domain.errors import RelayError


class Ledger(str, enum.Enum):
    CONSENSUS = "consensus"
    RUNTIME = "runtime"


@dataclass(frozen=True)
class Account:
    ledger: Ledger
    address: str
    signer: Any = None
    role: str = ""


@dataclass(frozen=True)
class AccountSet:
    """Resolved accounts for one relay run.

    Runtime accounts are addressed by their 0x form; the engine asks the
    address codec for the oasis1 form when an operation needs it.
    """

    source: Account
    destination: Account
    intermediate: Account | None = None

    @property
    def has_intermediate(self) -> bool:
        return self.intermediate is not None

    def all(self) -> list[Account]:
        out = [self.source]
        if self.intermediate is not None:
            out.append(self.intermediate)
        out.append(self.destination)
        return out


@dataclass(frozen=True)
class WorkflowState:
    source_balance: int
    intermediate_balance: int | None
    destination_balance: int


class Action(str, enum.Enum):
    DRAIN_SOURCE = "drain_source"
    DRAIN_INTERMEDIATE = "drain_intermediate"
    IDLE = "idle"


class OperationKind(str, enum.Enum):
    ALLOWANCE_GRANT = "staking.Allow"
    DEPOSIT = "consensus.Deposit"
    TRANSFER = "accounts.Transfer"

    @property
    def ledger(self) -> Ledger:
        if self is OperationKind.ALLOWANCE_GRANT:
            return Ledger.CONSENSUS
        return Ledger.RUNTIME


@dataclass(frozen=True)
class Fee:
    amount: int
    gas: int
    consensus_messages: int = 0


@dataclass(frozen=True)
class AllowanceGrant:
    beneficiary: str
    amount_change: int
    negative: bool = False


@dataclass(frozen=True)
class Deposit:
    to: str
    amount: int


@dataclass(frozen=True)
class Transfer:
    to: str
    amount: int


OperationBody = Union[AllowanceGrant, Deposit, Transfer]


@dataclass(frozen=True)
class Operation:
    kind: OperationKind
    signer: Any
    nonce: int
    fee: Fee
    body: OperationBody


@dataclass(frozen=True)
class CycleOutcome:
    action: Action | None
    delay: float
    state: WorkflowState | None = None
    error: RelayError | None = None
    submitted: tuple[Operation, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None


def format_amount(value: int, decimals: int) -> str:
    """Render base units as a decimal string without float rounding."""
    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(int(value)), 10**decimals)
    if decimals == 0:
        return f"{sign}{whole}"
    frac_s = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{frac_s}" if frac_s else f"{sign}{whole}"

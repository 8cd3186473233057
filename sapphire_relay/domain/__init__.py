from .errors import ConfigurationError, GatewayError, OperationalError, RelayError
from .models import (
    Account,
    AccountSet,
    Action,
    AllowanceGrant,
    CycleOutcome,
    Deposit,
    Fee,
    Ledger,
    Operation,
    OperationKind,
    Transfer,
    WorkflowState,
    format_amount,
)

__all__ = [
    "Account",
    "AccountSet",
    "Action",
    "AllowanceGrant",
    "ConfigurationError",
    "CycleOutcome",
    "Deposit",
    "Fee",
    "GatewayError",
    "Ledger",
    "Operation",
    "OperationKind",
    "OperationalError",
    "RelayError",
    "Transfer",
    "WorkflowState",
    "format_amount",
]

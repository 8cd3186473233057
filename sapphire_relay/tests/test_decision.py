from sapphire_relay.config import get_network
from sapphire_relay.domain.models import Action, WorkflowState
from sapphire_relay.settlement import decide, transfer_amount, transfer_fee


def test_source_balance_wins() -> None:
    assert decide(WorkflowState(1, 10**20, 0), has_intermediate=True) is Action.DRAIN_SOURCE
    assert decide(WorkflowState(1, None, 0), has_intermediate=False) is Action.DRAIN_SOURCE


def test_intermediate_only_with_capability() -> None:
    assert decide(WorkflowState(0, 5, 0), has_intermediate=True) is Action.DRAIN_INTERMEDIATE
    assert decide(WorkflowState(0, 5, 0), has_intermediate=False) is Action.IDLE


def test_idle_when_drained() -> None:
    assert decide(WorkflowState(0, 0, 10**30), has_intermediate=True) is Action.IDLE
    assert decide(WorkflowState(0, None, 0), has_intermediate=False) is Action.IDLE


def test_transfer_fee_constants() -> None:
    net = get_network("mainnet")
    assert net.scaling_factor == 10**9
    assert transfer_fee(net) == 100 * 70_000 * 10**9


def test_transfer_amount_checks_non_positive() -> None:
    fee = 7 * 10**15
    assert transfer_amount(fee + 1, fee) == 1
    assert transfer_amount(fee, fee) is None
    assert transfer_amount(500, fee) is None

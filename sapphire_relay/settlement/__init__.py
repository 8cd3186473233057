from .engine import SettlementEngine, decide, transfer_amount, transfer_fee

__all__ = ["SettlementEngine", "decide", "transfer_amount", "transfer_fee"]

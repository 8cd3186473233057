"""Wire encoding of relay operations.

Consensus transactions are CBOR maps signed as ``SignedTransaction``;
runtime transactions follow the runtime SDK ``Transaction`` layout and are
submitted as ``[body, [auth_proof]]``. Amounts are Python ints end to end
and only become big-endian byte strings here.
"""
from __future__ import annotations

import cbor2

from sapphire_relay.adapters.address import from_bech32
from sapphire_relay.adapters.signers import (
    CONSENSUS_TX_CONTEXT,
    RUNTIME_TX_CONTEXT,
    chain_separated,
    runtime_chain_context,
)
from sapphire_relay.domain.models import (
    AllowanceGrant,
    Deposit,
    Ledger,
    Operation,
    Transfer,
)

NATIVE_DENOMINATION = b""
RUNTIME_TX_VERSION = 1
CALL_FORMAT_PLAIN = 0


def quantity_to_bytes(value: int) -> bytes:
    value = int(value)
    if value < 0:
        raise ValueError(f"quantity must be non-negative, got {value}")
    if value == 0:
        return b""
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def quantity_from_bytes(raw) -> int:
    if raw is None:
        return 0
    if isinstance(raw, int):
        return raw
    return int.from_bytes(bytes(raw), "big")


def dumps(obj) -> bytes:
    return cbor2.dumps(obj, canonical=True)


def _base_units(amount: int) -> list:
    return [quantity_to_bytes(amount), NATIVE_DENOMINATION]


def consensus_tx(op: Operation) -> dict:
    if not isinstance(op.body, AllowanceGrant):
        raise TypeError(f"not a consensus operation: {op.kind}")
    body = {
        "beneficiary": from_bech32(op.body.beneficiary),
        "amount_change": quantity_to_bytes(op.body.amount_change),
    }
    if op.body.negative:
        body["negative"] = True
    return {
        "nonce": int(op.nonce),
        "fee": {"amount": quantity_to_bytes(op.fee.amount), "gas": int(op.fee.gas)},
        "method": op.kind.value,
        "body": body,
    }


def runtime_tx(op: Operation) -> dict:
    if not isinstance(op.body, (Deposit, Transfer)):
        raise TypeError(f"not a runtime operation: {op.kind}")
    fee = {"amount": _base_units(op.fee.amount), "gas": int(op.fee.gas)}
    if op.fee.consensus_messages:
        fee["consensus_messages"] = int(op.fee.consensus_messages)
    return {
        "v": RUNTIME_TX_VERSION,
        "call": {
            "format": CALL_FORMAT_PLAIN,
            "method": op.kind.value,
            "body": {"to": from_bech32(op.body.to), "amount": _base_units(op.body.amount)},
        },
        "ai": {
            "si": [{"address_spec": op.signer.address_spec(), "nonce": int(op.nonce)}],
            "fee": fee,
        },
    }


def sign_consensus(op: Operation, chain_context: str) -> dict:
    raw = dumps(consensus_tx(op))
    sig = op.signer.sign(chain_separated(CONSENSUS_TX_CONTEXT, chain_context), raw)
    return {
        "untrusted_raw_value": raw,
        "signature": {"public_key": op.signer.public_key, "signature": sig},
    }


def sign_runtime(op: Operation, runtime_id: bytes, chain_context: str) -> list:
    raw = dumps(runtime_tx(op))
    ctx = chain_separated(RUNTIME_TX_CONTEXT, runtime_chain_context(runtime_id, chain_context))
    return [raw, [{"signature": op.signer.sign(ctx, raw)}]]


def is_consensus(op: Operation) -> bool:
    return op.kind.ledger is Ledger.CONSENSUS

import cbor2
import nacl.signing
import pytest
from ecdsa import SECP256k1, VerifyingKey
from ecdsa.util import sigdecode_der

from sapphire_relay.adapters import transactions
from sapphire_relay.adapters.address import from_bech32, sha512_256, to_runtime_address
from sapphire_relay.adapters.signers import (
    CONSENSUS_TX_CONTEXT,
    RUNTIME_TX_CONTEXT,
    chain_separated,
    runtime_chain_context,
)
from sapphire_relay.config import get_network
from sapphire_relay.domain.models import AllowanceGrant, Deposit, Fee, Operation, OperationKind, Transfer
from sapphire_relay.tests.fakes import DESTINATION_EVM, INTERMEDIATE_SIGNER, SOURCE_SIGNER

NETWORK = get_network("mainnet")
CHAIN_CONTEXT = "ab" * 32


def _grant(amount=1000, gas=1234) -> Operation:
    return Operation(
        kind=OperationKind.ALLOWANCE_GRANT,
        signer=SOURCE_SIGNER,
        nonce=4,
        fee=Fee(amount=0, gas=gas),
        body=AllowanceGrant(beneficiary=NETWORK.bridge_address, amount_change=amount),
    )


def test_quantity_encoding() -> None:
    assert transactions.quantity_to_bytes(0) == b""
    assert transactions.quantity_to_bytes(255) == b"\xff"
    assert transactions.quantity_to_bytes(256) == b"\x01\x00"
    assert transactions.quantity_from_bytes(b"") == 0
    assert transactions.quantity_from_bytes(b"\x01\x00") == 256
    assert transactions.quantity_from_bytes(None) == 0
    big = 10**40
    assert transactions.quantity_from_bytes(transactions.quantity_to_bytes(big)) == big
    with pytest.raises(ValueError):
        transactions.quantity_to_bytes(-1)


def test_consensus_allow_shape() -> None:
    tx = transactions.consensus_tx(_grant())
    assert tx["method"] == "staking.Allow"
    assert tx["nonce"] == 4
    assert tx["fee"] == {"amount": b"", "gas": 1234}
    assert tx["body"]["beneficiary"] == from_bech32(NETWORK.bridge_address)
    assert tx["body"]["amount_change"] == transactions.quantity_to_bytes(1000)
    assert "negative" not in tx["body"]


def test_signed_consensus_tx_verifies() -> None:
    signed = transactions.sign_consensus(_grant(), CHAIN_CONTEXT)
    raw = signed["untrusted_raw_value"]
    assert cbor2.loads(raw)["method"] == "staking.Allow"
    assert signed["signature"]["public_key"] == SOURCE_SIGNER.public_key
    digest = sha512_256(chain_separated(CONSENSUS_TX_CONTEXT, CHAIN_CONTEXT), raw)
    nacl.signing.VerifyKey(SOURCE_SIGNER.public_key).verify(digest, signed["signature"]["signature"])


def test_runtime_deposit_shape() -> None:
    op = Operation(
        kind=OperationKind.DEPOSIT,
        signer=SOURCE_SIGNER,
        nonce=9,
        fee=Fee(amount=0, gas=NETWORK.fee_gas, consensus_messages=1),
        body=Deposit(to=to_runtime_address(DESTINATION_EVM), amount=1000 * 10**9),
    )
    tx = transactions.runtime_tx(op)
    assert tx["v"] == 1
    assert tx["call"]["method"] == "consensus.Deposit"
    assert tx["call"]["body"]["amount"] == [transactions.quantity_to_bytes(10**12), b""]
    assert tx["ai"]["si"] == [{"address_spec": {"signature": {"ed25519": SOURCE_SIGNER.public_key}}, "nonce": 9}]
    assert tx["ai"]["fee"] == {"amount": [b"", b""], "gas": 70_000, "consensus_messages": 1}


def test_signed_runtime_transfer_verifies() -> None:
    op = Operation(
        kind=OperationKind.TRANSFER,
        signer=INTERMEDIATE_SIGNER,
        nonce=2,
        fee=Fee(amount=7 * 10**15, gas=NETWORK.fee_gas),
        body=Transfer(to=to_runtime_address(DESTINATION_EVM), amount=123),
    )
    raw, proofs = transactions.sign_runtime(op, NETWORK.runtime_id_bytes, CHAIN_CONTEXT)
    tx = cbor2.loads(raw)
    assert tx["call"]["method"] == "accounts.Transfer"
    assert "consensus_messages" not in tx["ai"]["fee"]
    assert tx["ai"]["si"][0]["address_spec"] == {"signature": {"secp256k1eth": INTERMEDIATE_SIGNER.public_key}}

    ctx = chain_separated(RUNTIME_TX_CONTEXT, runtime_chain_context(NETWORK.runtime_id_bytes, CHAIN_CONTEXT))
    vk = VerifyingKey.from_string(INTERMEDIATE_SIGNER.public_key, curve=SECP256k1)
    assert vk.verify_digest(proofs[0]["signature"], sha512_256(ctx, raw), sigdecode=sigdecode_der)


def test_wrong_ledger_is_rejected() -> None:
    with pytest.raises(TypeError):
        transactions.runtime_tx(_grant())

from __future__ import annotations

import hashlib

import nacl.signing
from ecdsa import SECP256k1, SigningKey
from ecdsa.util import sigencode_der_canonize

from sapphire_relay.adapters.address import sha512_256

CONSENSUS_TX_CONTEXT = "oasis-core/consensus: tx"
RUNTIME_TX_CONTEXT = "oasis-runtime-sdk/tx: v0"


def chain_separated(context: str, chain_context: str) -> bytes:
    return f"{context} for chain {chain_context}".encode()


def runtime_chain_context(runtime_id: bytes, consensus_chain_context: str) -> str:
    return sha512_256(runtime_id, consensus_chain_context.encode()).hex()


class Ed25519Signer:
    """Consensus-style signer: ed25519 over SHA512/256(context || message)."""

    scheme = "ed25519"

    def __init__(self, seed: bytes):
        if len(seed) != 32:
            raise ValueError(f"ed25519 seed must be 32 bytes, got {len(seed)}")
        self._key = nacl.signing.SigningKey(bytes(seed))
        self.public_key: bytes = self._key.verify_key.encode()

    def sign(self, context: bytes, message: bytes) -> bytes:
        return self._key.sign(sha512_256(context, message)).signature

    def address_spec(self) -> dict:
        return {"signature": {"ed25519": self.public_key}}

    def seed_hex(self) -> str:
        return bytes(self._key).hex()

    def __repr__(self) -> str:
        return f"Ed25519Signer(public_key={self.public_key.hex()})"


class Secp256k1Signer:
    """Runtime secp256k1eth signer: DER, low-S, same prehash as ed25519."""

    scheme = "secp256k1eth"

    def __init__(self, private_key: bytes):
        self._key = SigningKey.from_string(bytes(private_key), curve=SECP256k1)
        self.public_key: bytes = self._key.get_verifying_key().to_string("compressed")

    def sign(self, context: bytes, message: bytes) -> bytes:
        return self._key.sign_digest_deterministic(
            sha512_256(context, message),
            hashfunc=hashlib.sha256,
            sigencode=sigencode_der_canonize,
        )

    def address_spec(self) -> dict:
        return {"signature": {"secp256k1eth": self.public_key}}

    def __repr__(self) -> str:
        return f"Secp256k1Signer(public_key={self.public_key.hex()})"

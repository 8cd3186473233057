"""Conversions between EVM-style 0x addresses and oasis1 bech32 addresses.

An Oasis address is ``version || SHA512/256(context || version || data)[:20]``
rendered as bech32 with the ``oasis`` prefix. Consensus accounts hash the
ed25519 public key under the staking context; Sapphire EVM accounts hash
the 20 address bytes under the secp256k1eth context.
"""
from __future__ import annotations

import re

from bip_utils import Bech32Decoder, Bech32Encoder
from Crypto.Hash import SHA512
from web3 import Web3

from sapphire_relay.domain.errors import ConfigurationError

HRP = "oasis"
ADDRESS_VERSION = 0
ADDRESS_SIZE = 21
STAKING_CONTEXT = b"oasis-core/address: staking"
SECP256K1ETH_CONTEXT = b"oasis-runtime-sdk/address: secp256k1eth"

_EVM_ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")


def sha512_256(*parts: bytes) -> bytes:
    h = SHA512.new(truncate="256")
    for part in parts:
        h.update(part)
    return h.digest()


def address_from_data(context: bytes, version: int, data: bytes) -> bytes:
    v = bytes([version])
    return v + sha512_256(context, v, data)[:20]


def to_bech32(raw: bytes) -> str:
    return Bech32Encoder.Encode(HRP, bytes(raw))


def from_bech32(address: str) -> bytes:
    try:
        raw = Bech32Decoder.Decode(HRP, str(address))
    except Exception as exc:
        raise ConfigurationError(f"invalid oasis address {address!r}: {exc}") from exc
    if len(raw) != ADDRESS_SIZE:
        raise ConfigurationError(f"invalid oasis address {address!r}: {len(raw)} bytes")
    return bytes(raw)


def is_evm_address(value: str) -> bool:
    return isinstance(value, str) and _EVM_ADDRESS_RE.fullmatch(value) is not None


def validate_evm_address(value: str) -> str:
    """Return the checksummed form, or raise ConfigurationError."""
    if not is_evm_address(value):
        raise ConfigurationError(f"invalid sapphire address {value!r}")
    return Web3.to_checksum_address(value)


def to_runtime_address(evm_address: str) -> str:
    validate_evm_address(evm_address)
    raw = address_from_data(SECP256K1ETH_CONTEXT, ADDRESS_VERSION, bytes.fromhex(evm_address[2:]))
    return to_bech32(raw)


def consensus_address(public_key: bytes) -> str:
    if len(public_key) != 32:
        raise ConfigurationError(f"ed25519 public key must be 32 bytes, got {len(public_key)}")
    return to_bech32(address_from_data(STAKING_CONTEXT, ADDRESS_VERSION, bytes(public_key)))

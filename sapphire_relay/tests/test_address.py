import pytest

from sapphire_relay.adapters.address import (
    consensus_address,
    from_bech32,
    to_bech32,
    to_runtime_address,
    validate_evm_address,
)
from sapphire_relay.config import NETWORKS
from sapphire_relay.domain.errors import ConfigurationError
from sapphire_relay.tests.fakes import SOURCE_SIGNER


@pytest.mark.parametrize(
    "bad",
    [
        "",
        "0x",
        "1111111111111111111111111111111111111111",
        "0x111111111111111111111111111111111111111",
        "0x11111111111111111111111111111111111111111",
        "0xg111111111111111111111111111111111111111",
        " 0x1111111111111111111111111111111111111111",
        "oasis1qrd3mnzhhgst26hsp96uf45yhq6zlax0cuzdgcfc",
    ],
)
def test_runtime_address_rejects_malformed(bad: str) -> None:
    with pytest.raises(ConfigurationError):
        to_runtime_address(bad)


def test_runtime_address_shape_and_case_insensitivity() -> None:
    lower = to_runtime_address("0xabcdefabcdefabcdefabcdefabcdefabcdefabcd")
    upper = to_runtime_address("0xABCDEFABCDEFABCDEFABCDEFABCDEFABCDEFABCD")
    assert lower == upper
    assert lower.startswith("oasis1")
    assert len(lower) == 46
    assert from_bech32(lower)[0] == 0
    assert lower != to_runtime_address("0xabcdefabcdefabcdefabcdefabcdefabcdefabce")


def test_consensus_address_from_public_key() -> None:
    addr = consensus_address(SOURCE_SIGNER.public_key)
    assert addr.startswith("oasis1")
    assert addr == consensus_address(SOURCE_SIGNER.public_key)
    with pytest.raises(ConfigurationError):
        consensus_address(b"\x00" * 31)


def test_bridge_addresses_decode() -> None:
    for net in NETWORKS.values():
        raw = from_bech32(net.bridge_address)
        assert len(raw) == 21
        assert to_bech32(raw) == net.bridge_address


def test_from_bech32_rejects_garbage() -> None:
    with pytest.raises(ConfigurationError):
        from_bech32("oasis1notanaddress")


def test_validate_evm_address_checksums() -> None:
    out = validate_evm_address("0x9858effd232b4033e47d90003d41ec34ecaeda94")
    assert out == "0x9858EfFD232B4033E47d90003D41EC34EcaEda94"

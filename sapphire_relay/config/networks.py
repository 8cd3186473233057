from __future__ import annotations

from dataclasses import dataclass

from sapphire_relay.domain.errors import ConfigurationError

CONSENSUS_DECIMALS = 9
SAPPHIRE_DECIMALS = 18


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    grpc_url: str
    # consensus_accounts module account of the runtime; allowance beneficiary
    bridge_address: str
    runtime_id: str
    evm_chain_id: int
    gas_price: int = 100
    # hardcoded; revisit when Sapphire changes its transfer gas cost
    fee_gas: int = 70_000
    consensus_decimals: int = CONSENSUS_DECIMALS
    runtime_decimals: int = SAPPHIRE_DECIMALS

    @property
    def scaling_factor(self) -> int:
        return 10 ** (self.runtime_decimals - self.consensus_decimals)

    @property
    def runtime_id_bytes(self) -> bytes:
        return bytes.fromhex(self.runtime_id)


NETWORKS: dict[str, NetworkConfig] = {
    "mainnet": NetworkConfig(
        name="mainnet",
        grpc_url="https://grpc.oasis.io",
        bridge_address="oasis1qrd3mnzhhgst26hsp96uf45yhq6zlax0cuzdgcfc",
        runtime_id="000000000000000000000000000000000000000000000000f80306c9858e7279",
        evm_chain_id=23294,
    ),
    "testnet": NetworkConfig(
        name="testnet",
        grpc_url="https://testnet.grpc.oasis.io",
        bridge_address="oasis1qqczuf3x6glkgjuf0xgtcpjjw95r3crf7y2323xd",
        runtime_id="000000000000000000000000000000000000000000000000a6d1e3ebf60dff6c",
        evm_chain_id=23295,
    ),
}


def get_network(name: str) -> NetworkConfig:
    try:
        return NETWORKS[str(name).strip().lower()]
    except KeyError:
        raise ConfigurationError(
            f"unknown network {name!r}; expected one of {sorted(NETWORKS)}"
        ) from None

from .address import consensus_address, from_bech32, to_bech32, to_runtime_address, validate_evm_address
from .gateway import LedgerGateway, OasisGrpcWebGateway
from .signers import Ed25519Signer, Secp256k1Signer

__all__ = [
    "Ed25519Signer",
    "LedgerGateway",
    "OasisGrpcWebGateway",
    "Secp256k1Signer",
    "consensus_address",
    "from_bech32",
    "to_bech32",
    "to_runtime_address",
    "validate_evm_address",
]

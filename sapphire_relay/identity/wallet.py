from __future__ import annotations

import hashlib
import re
from collections.abc import Callable
from typing import Protocol

from eth_account import Account as EthAccount
from eth_account.messages import encode_defunct

from sapphire_relay.adapters.address import consensus_address, is_evm_address, validate_evm_address
from sapphire_relay.adapters.signers import Ed25519Signer
from sapphire_relay.domain.errors import ConfigurationError
from sapphire_relay.identity.base import Identity, SecretMaterial

SIGN_IN_DOMAIN = "sapphire-relay"
SIGN_IN_URI = "https://sapphire-relay"
SIGN_IN_STATEMENT = "Derive the consensus account that relays ROSE into this Sapphire account."
# Fixed values: re-derivation needs byte-identical messages across runs.
SIGN_IN_NONCE = "noReplayProtection"
SIGN_IN_ISSUED_AT = "2000-01-01T00:00:00.000Z"

_SIGNATURE_RE = re.compile(r"0x[0-9a-fA-F]{130}")


class WalletConnector(Protocol):
    def request_accounts(self) -> list[str]: ...

    def personal_sign(self, message: str, address: str) -> str: ...


def sign_in_message(address: str, chain_id: int) -> str:
    return (
        f"{SIGN_IN_DOMAIN} wants you to sign in with your Ethereum account:\n"
        f"{address}\n"
        "\n"
        f"{SIGN_IN_STATEMENT}\n"
        "\n"
        f"URI: {SIGN_IN_URI}\n"
        "Version: 1\n"
        f"Chain ID: {int(chain_id)}\n"
        f"Nonce: {SIGN_IN_NONCE}\n"
        f"Issued At: {SIGN_IN_ISSUED_AT}"
    )


def derive_seed(signature: str) -> bytes:
    """First half of SHA-512 over the raw signature bytes."""
    if not isinstance(signature, str) or _SIGNATURE_RE.fullmatch(signature) is None:
        raise ConfigurationError("wallet returned a malformed signature")
    return hashlib.sha512(bytes.fromhex(signature[2:])).digest()[:32]


class WalletSignatureIdentityProvider:
    """Consensus key seeded from a wallet's signature over a fixed message.

    The wallet's own Sapphire address is the destination, so there is no
    intermediate hop in this variant.
    """

    def __init__(self, connector: WalletConnector, *, chain_id: int):
        self.connector = connector
        self.chain_id = int(chain_id)

    def connect(self) -> tuple[str, str]:
        accounts = self.connector.request_accounts() or []
        if not accounts:
            raise ConfigurationError("wallet returned no accounts")
        address = validate_evm_address(str(accounts[0]).strip())
        signature = str(self.connector.personal_sign(sign_in_message(address, self.chain_id), address)).strip()
        return address, signature

    def derive_identity(self, address: str, signature: str) -> Identity:
        address = validate_evm_address(address)
        seed = derive_seed(signature)
        message = encode_defunct(text=sign_in_message(address, self.chain_id))
        try:
            recovered = EthAccount.recover_message(message, signature=signature)
        except Exception as exc:
            raise ConfigurationError(f"wallet signature cannot be verified: {exc}") from exc
        if recovered.lower() != address.lower():
            raise ConfigurationError(f"wallet signature was made by {recovered}, not {address}")

        signer = Ed25519Signer(seed)
        return Identity(
            consensus_signer=signer,
            consensus_address=consensus_address(signer.public_key),
            runtime_address=address,
            secret=SecretMaterial(kind="private_key", value=signer.seed_hex()),
        )

    def resolve(self) -> Identity:
        address, signature = self.connect()
        return self.derive_identity(address, signature)


class PromptWalletConnector:
    """Terminal stand-in for a browser wallet: the operator pastes answers."""

    def __init__(self, input_fn: Callable[[str], str] = input, output: Callable[[str], None] = print):
        self._input = input_fn
        self._output = output

    def request_accounts(self) -> list[str]:
        address = self._input("Sapphire wallet address (0x...): ").strip()
        if not is_evm_address(address):
            raise ConfigurationError(f"invalid sapphire address {address!r}")
        return [address]

    def personal_sign(self, message: str, address: str) -> str:
        self._output(f"\nSign this message with {address} (personal_sign):\n\n{message}\n")
        signature = self._input("Signature (0x...): ").strip()
        if not signature:
            raise ConfigurationError("no signature provided")
        return signature

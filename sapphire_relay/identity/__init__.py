from .base import Identity, SecretMaterial, accounts_for
from .mnemonic import MnemonicIdentityProvider
from .wallet import (
    PromptWalletConnector,
    WalletConnector,
    WalletSignatureIdentityProvider,
    derive_seed,
    sign_in_message,
)

__all__ = [
    "Identity",
    "MnemonicIdentityProvider",
    "PromptWalletConnector",
    "SecretMaterial",
    "WalletConnector",
    "WalletSignatureIdentityProvider",
    "accounts_for",
    "derive_seed",
    "sign_in_message",
]

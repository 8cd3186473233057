from __future__ import annotations

from bip_utils import Bip32Slip10Ed25519, Bip39SeedGenerator, Bip44, Bip44Changes, Bip44Coins
from eth_account import Account as EthAccount
from mnemonic import Mnemonic

from sapphire_relay.adapters.address import consensus_address
from sapphire_relay.adapters.signers import Ed25519Signer, Secp256k1Signer
from sapphire_relay.domain.errors import ConfigurationError
from sapphire_relay.identity.base import Identity, SecretMaterial

# ADR 0008 consensus account path (SLIP-10 ed25519)
CONSENSUS_PATH = "m/44'/474'/{index}'"
MNEMONIC_STRENGTH = 256


class MnemonicIdentityProvider:
    """Two independent keys from one BIP-39 mnemonic.

    The consensus key and the Sapphire key come from different paths, so
    the two addresses look unrelated while both being recoverable from the
    same words. That second key is what makes the intermediate hop possible.
    """

    def __init__(self, language: str = "english", *, account_index: int = 0):
        self._mnemo = Mnemonic(language)
        self.account_index = int(account_index)

    def generate(self) -> str:
        return self._mnemo.generate(strength=MNEMONIC_STRENGTH)

    def derive_identity(self, mnemonic: str | None = None) -> Identity:
        phrase = " ".join((mnemonic or "").split()) or self.generate()
        if not self._mnemo.check(phrase):
            raise ConfigurationError("invalid mnemonic (word list or checksum mismatch)")

        seed = Bip39SeedGenerator(phrase).Generate()

        consensus_key = (
            Bip32Slip10Ed25519.FromSeed(seed)
            .DerivePath(CONSENSUS_PATH.format(index=self.account_index))
            .PrivateKey()
            .Raw()
            .ToBytes()
        )
        consensus_signer = Ed25519Signer(consensus_key)

        # m/44'/60'/0'/0/{index}
        runtime_key = (
            Bip44.FromSeed(seed, Bip44Coins.ETHEREUM)
            .Purpose()
            .Coin()
            .Account(0)
            .Change(Bip44Changes.CHAIN_EXT)
            .AddressIndex(self.account_index)
            .PrivateKey()
            .Raw()
            .ToBytes()
        )

        return Identity(
            consensus_signer=consensus_signer,
            consensus_address=consensus_address(consensus_signer.public_key),
            runtime_address=EthAccount.from_key(runtime_key).address,
            runtime_signer=Secp256k1Signer(runtime_key),
            secret=SecretMaterial(kind="mnemonic", value=phrase),
        )

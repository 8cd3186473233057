import hashlib

import pytest
from eth_account import Account as EthAccount
from eth_account.messages import encode_defunct
from web3 import Web3

from sapphire_relay.domain.errors import ConfigurationError
from sapphire_relay.identity import (
    MnemonicIdentityProvider,
    PromptWalletConnector,
    WalletSignatureIdentityProvider,
    accounts_for,
    derive_seed,
    sign_in_message,
)
from sapphire_relay.tests.fakes import TEST_MNEMONIC, WALLET, FakeWallet

CHAIN_ID = 23294


def test_mnemonic_identity_is_deterministic() -> None:
    provider = MnemonicIdentityProvider()
    a = provider.derive_identity(TEST_MNEMONIC)
    b = provider.derive_identity(TEST_MNEMONIC)
    assert (a.consensus_address, a.runtime_address) == (b.consensus_address, b.runtime_address)
    assert a.consensus_address.startswith("oasis1")
    assert a.secret.kind == "mnemonic"
    assert a.secret.sensitive
    assert TEST_MNEMONIC not in repr(a.secret)


def test_mnemonic_runtime_key_uses_ethereum_path() -> None:
    identity = MnemonicIdentityProvider().derive_identity(TEST_MNEMONIC)
    assert identity.runtime_address == "0x9858EfFD232B4033E47d90003D41EC34EcaEda94"
    assert identity.runtime_signer is not None
    assert identity.consensus_signer.public_key != identity.runtime_signer.public_key


def test_mnemonic_generated_when_missing() -> None:
    identity = MnemonicIdentityProvider().derive_identity()
    assert len(identity.secret.value.split()) == 24
    again = MnemonicIdentityProvider().derive_identity(identity.secret.value)
    assert again.consensus_address == identity.consensus_address


def test_invalid_mnemonic_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        MnemonicIdentityProvider().derive_identity("abandon " * 12)


def test_mnemonic_accounts_use_intermediate_hop() -> None:
    identity = MnemonicIdentityProvider().derive_identity(TEST_MNEMONIC)
    accounts = accounts_for(identity, "0x2222222222222222222222222222222222222222")
    assert accounts.has_intermediate
    assert accounts.intermediate.address == identity.runtime_address
    assert accounts.destination.signer is None


def test_derive_seed_is_first_half_of_sha512() -> None:
    sig = "0x" + "ab" * 65
    assert derive_seed(sig) == hashlib.sha512(bytes.fromhex("ab" * 65)).digest()[:32]
    assert derive_seed(sig) == derive_seed(sig)
    with pytest.raises(ConfigurationError):
        derive_seed("0x1234")


def test_wallet_identity_is_deterministic_and_direct() -> None:
    provider = WalletSignatureIdentityProvider(FakeWallet(), chain_id=CHAIN_ID)
    a = provider.resolve()
    b = provider.resolve()
    assert a.consensus_address == b.consensus_address
    assert a.runtime_address == WALLET.address
    assert a.runtime_signer is None
    assert a.secret.kind == "private_key"

    accounts = accounts_for(a)
    assert not accounts.has_intermediate
    assert accounts.destination.address == WALLET.address


def test_sign_in_message_binds_chain_and_address() -> None:
    wallet = FakeWallet()
    WalletSignatureIdentityProvider(wallet, chain_id=CHAIN_ID).resolve()
    (message,) = wallet.messages
    assert message == sign_in_message(WALLET.address, CHAIN_ID)
    assert f"Chain ID: {CHAIN_ID}" in message
    assert WALLET.address in message
    assert sign_in_message(WALLET.address, 23295) != message


def test_wallet_signature_from_other_key_is_rejected() -> None:
    other = EthAccount.from_key("0x" + "5d" * 32)
    provider = WalletSignatureIdentityProvider(FakeWallet(signer=other), chain_id=CHAIN_ID)
    with pytest.raises(ConfigurationError):
        provider.resolve()


def test_prompt_connector_rejects_bad_answers() -> None:
    answers = iter(["not-an-address"])
    connector = PromptWalletConnector(input_fn=lambda _prompt: next(answers), output=lambda _s: None)
    with pytest.raises(ConfigurationError):
        connector.request_accounts()

    connector = PromptWalletConnector(input_fn=lambda _prompt: "", output=lambda _s: None)
    with pytest.raises(ConfigurationError):
        connector.personal_sign("msg", WALLET.address)


def test_prompt_connector_flow() -> None:
    message = sign_in_message(WALLET.address, CHAIN_ID)
    signature = Web3.to_hex(WALLET.sign_message(encode_defunct(text=message)).signature)
    answers = iter([WALLET.address, signature])
    connector = PromptWalletConnector(input_fn=lambda _prompt: next(answers), output=lambda _s: None)
    identity = WalletSignatureIdentityProvider(connector, chain_id=CHAIN_ID).resolve()
    assert identity.consensus_signer.seed_hex() == derive_seed(signature).hex()

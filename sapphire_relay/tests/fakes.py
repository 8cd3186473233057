from __future__ import annotations

from eth_account import Account as EthAccount
from eth_account.messages import encode_defunct
from web3 import Web3

from sapphire_relay.adapters.address import consensus_address
from sapphire_relay.adapters.signers import Ed25519Signer, Secp256k1Signer
from sapphire_relay.domain.models import Account, AccountSet, Ledger

SOURCE_SIGNER = Ed25519Signer(bytes(range(32)))
INTERMEDIATE_SIGNER = Secp256k1Signer(bytes([7]) * 32)
INTERMEDIATE_EVM = "0x1111111111111111111111111111111111111111"
DESTINATION_EVM = "0x2222222222222222222222222222222222222222"
TEST_MNEMONIC = " ".join(["abandon"] * 11 + ["about"])
WALLET = EthAccount.from_key("0x" + "4c" * 32)


def make_accounts(*, two_hop: bool) -> AccountSet:
    source = Account(Ledger.CONSENSUS, consensus_address(SOURCE_SIGNER.public_key), SOURCE_SIGNER, role="source")
    destination = Account(Ledger.RUNTIME, DESTINATION_EVM, role="destination")
    if not two_hop:
        return AccountSet(source=source, destination=destination)
    intermediate = Account(Ledger.RUNTIME, INTERMEDIATE_EVM, INTERMEDIATE_SIGNER, role="intermediate")
    return AccountSet(source=source, intermediate=intermediate, destination=destination)


class FakeGateway:
    def __init__(self, *, consensus=None, runtime=None, allowance=0, gas=1234, nonces=None, fail_on=()):
        self.consensus = dict(consensus or {})
        self.runtime = dict(runtime or {})
        self.allowance = allowance
        self.gas = gas
        self.nonces = dict(nonces or {})
        self.fail_on = set(fail_on)
        self.submitted = []
        self.calls = []
        self.closed = False

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise RuntimeError(f"{name} unavailable")

    async def chain_context(self) -> str:
        self._call("chain_context")
        return "ab" * 32

    async def consensus_balance(self, address: str) -> int:
        self._call("consensus_balance")
        return self.consensus.get(address, 0)

    async def consensus_allowance(self, owner: str, beneficiary: str) -> int:
        self._call("consensus_allowance")
        return self.allowance

    async def consensus_nonce(self, address: str) -> int:
        self._call("consensus_nonce")
        return self.nonces.get(("consensus", address), 0)

    async def runtime_balance(self, evm_address: str) -> int:
        self._call("runtime_balance")
        return self.runtime.get(evm_address, 0)

    async def runtime_nonce(self, address: str) -> int:
        self._call("runtime_nonce")
        return self.nonces.get(("runtime", address), 0)

    async def estimate_gas(self, operation) -> int:
        self._call("estimate_gas")
        return self.gas

    async def submit(self, operation) -> None:
        self._call("submit")
        self.submitted.append(operation)

    async def close(self) -> None:
        self.closed = True


class RecordingReporter:
    def __init__(self):
        self.states = []
        self.alerts = []
        self.secrets = []
        self.account_sets = []

    def accounts(self, accounts) -> None:
        self.account_sets.append(accounts)

    def secret(self, secret) -> None:
        self.secrets.append(secret)

    def balances(self, accounts, state) -> None:
        self.states.append(state)

    def alert(self, message: str) -> None:
        self.alerts.append(message)


class FakeWallet:
    def __init__(self, account=WALLET, signer=None):
        self.account = account
        self.signer = signer or account
        self.messages = []

    def request_accounts(self) -> list[str]:
        return [self.account.address]

    def personal_sign(self, message: str, address: str) -> str:
        self.messages.append(message)
        signed = self.signer.sign_message(encode_defunct(text=message))
        return Web3.to_hex(signed.signature)

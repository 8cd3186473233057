from __future__ import annotations

import asyncio
from typing import Any, Protocol

import cbor2

from sapphire_relay.adapters import transactions
from sapphire_relay.adapters.address import SECP256K1ETH_CONTEXT, address_from_data, from_bech32, validate_evm_address
from sapphire_relay.adapters.grpc_web import GrpcWebClient
from sapphire_relay.config.networks import NetworkConfig
from sapphire_relay.domain.errors import GatewayError
from sapphire_relay.domain.models import Operation

HEIGHT_LATEST = 0
ROUND_LATEST = 2**64 - 1


class LedgerGateway(Protocol):
    """Everything the settlement engine needs from the two ledgers."""

    async def chain_context(self) -> str: ...

    async def consensus_balance(self, address: str) -> int: ...

    async def consensus_allowance(self, owner: str, beneficiary: str) -> int: ...

    async def consensus_nonce(self, address: str) -> int: ...

    async def runtime_balance(self, evm_address: str) -> int: ...

    async def runtime_nonce(self, address: str) -> int: ...

    async def estimate_gas(self, operation: Operation) -> int: ...

    async def submit(self, operation: Operation) -> None: ...

    async def close(self) -> None: ...


class OasisGrpcWebGateway:
    """Ledger gateway over an Oasis node's public gRPC-web endpoint."""

    def __init__(self, network: NetworkConfig, *, grpc_url: str = "", timeout: float = 15.0, log=None):
        self.network = network
        self.client = GrpcWebClient(grpc_url or network.grpc_url, timeout=timeout)
        self.log = log
        self._chain_context: str | None = None
        self._lock = asyncio.Lock()

    async def close(self) -> None:
        await self.client.close()

    async def chain_context(self) -> str:
        async with self._lock:
            if self._chain_context is None:
                ctx = await self.client.call("oasis-core.Consensus/GetChainContext", None)
                self._chain_context = ctx.decode() if isinstance(ctx, bytes) else str(ctx)
                if self.log is not None:
                    self.log.info("chain context %s", self._chain_context)
            return self._chain_context

    async def _staking_account(self, address: str) -> dict:
        out = await self.client.call(
            "oasis-core.Staking/Account",
            {"height": HEIGHT_LATEST, "owner": from_bech32(address)},
        )
        return out or {}

    async def consensus_balance(self, address: str) -> int:
        account = await self._staking_account(address)
        general = account.get("general") or {}
        return transactions.quantity_from_bytes(general.get("balance"))

    async def consensus_allowance(self, owner: str, beneficiary: str) -> int:
        account = await self._staking_account(owner)
        allowances = (account.get("general") or {}).get("allowances") or {}
        return transactions.quantity_from_bytes(allowances.get(from_bech32(beneficiary)))

    async def consensus_nonce(self, address: str) -> int:
        nonce = await self.client.call(
            "oasis-core.Consensus/GetSignerNonce",
            {"account_address": from_bech32(address), "height": HEIGHT_LATEST},
        )
        return int(nonce or 0)

    async def _runtime_query(self, method: str, args: Any) -> Any:
        out = await self.client.call(
            "oasis-core.RuntimeClient/Query",
            {
                "runtime_id": self.network.runtime_id_bytes,
                "round": ROUND_LATEST,
                "method": method,
                "args": cbor2.dumps(args, canonical=True),
            },
        )
        data = (out or {}).get("data")
        return cbor2.loads(data) if data else None

    async def runtime_balance(self, evm_address: str) -> int:
        evm_address = validate_evm_address(evm_address)
        raw = address_from_data(SECP256K1ETH_CONTEXT, 0, bytes.fromhex(evm_address[2:]))
        out = await self._runtime_query("consensus.Balance", {"address": raw})
        return transactions.quantity_from_bytes((out or {}).get("balance"))

    async def runtime_nonce(self, address: str) -> int:
        out = await self._runtime_query("accounts.Nonce", {"address": from_bech32(address)})
        return int(out or 0)

    async def estimate_gas(self, operation: Operation) -> int:
        if not transactions.is_consensus(operation):
            raise GatewayError("EstimateGas", -1, f"no consensus gas estimate for {operation.kind.value}")
        gas = await self.client.call(
            "oasis-core.Consensus/EstimateGas",
            {"signer": operation.signer.public_key, "transaction": transactions.consensus_tx(operation)},
        )
        return int(gas)

    async def submit(self, operation: Operation) -> None:
        chain_context = await self.chain_context()
        if transactions.is_consensus(operation):
            signed = transactions.sign_consensus(operation, chain_context)
            await self.client.call("oasis-core.Consensus/SubmitTx", signed)
            return
        unverified = transactions.sign_runtime(operation, self.network.runtime_id_bytes, chain_context)
        out = await self.client.call(
            "oasis-core.RuntimeClient/SubmitTx",
            {"runtime_id": self.network.runtime_id_bytes, "data": transactions.dumps(unverified)},
        )
        result = cbor2.loads(out) if isinstance(out, (bytes, bytearray)) and out else out
        if isinstance(result, dict) and "fail" in result:
            fail = result["fail"] or {}
            raise GatewayError(
                operation.kind.value,
                int(fail.get("code", -1)),
                f"{fail.get('module', '')}: {fail.get('message', '')}",
            )

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sapphire_relay.domain.models import Account, AccountSet, Ledger


@dataclass(frozen=True)
class SecretMaterial:
    """Seed material an operator needs to recover the relay accounts.

    Always sensitive. Reporters show it once behind a warning; it never
    reaches logs or the event file.
    """

    kind: str
    value: str = field(repr=False)
    sensitive: bool = True


@dataclass(frozen=True)
class Identity:
    consensus_signer: Any
    consensus_address: str
    # 0x address; the intermediate account (mnemonic) or the wallet itself
    runtime_address: str
    secret: SecretMaterial
    runtime_signer: Any = None


def accounts_for(identity: Identity, destination: str | None = None) -> AccountSet:
    """Lay out the relay accounts for a derived identity.

    With an explicit destination the identity's runtime account becomes the
    intermediate hop; without one the identity's runtime account is the
    destination itself and funds are deposited directly.
    """
    source = Account(Ledger.CONSENSUS, identity.consensus_address, identity.consensus_signer, role="source")
    if destination:
        return AccountSet(
            source=source,
            intermediate=Account(
                Ledger.RUNTIME, identity.runtime_address, identity.runtime_signer, role="intermediate"
            ),
            destination=Account(Ledger.RUNTIME, destination, role="destination"),
        )
    return AccountSet(
        source=source,
        destination=Account(Ledger.RUNTIME, identity.runtime_address, role="destination"),
    )

from __future__ import annotations

import os
import sys

from sapphire_relay.config import load_settings
from sapphire_relay.domain.errors import ConfigurationError
from sapphire_relay.runtime.app import run_main

R = "\033[91m"; RS = "\033[0m"


def _run(mode: str) -> None:
    try:
        run_main(load_settings(), mode=mode)
    except ConfigurationError as exc:
        print(f"{R}[CONFIG] {exc}{RS}", file=sys.stderr)
        sys.exit(2)


def main_mnemonic() -> None:
    """Fresh (or RELAY_MNEMONIC) seed, relayed through an intermediate account."""
    _run("mnemonic")


def main_wallet() -> None:
    """Consensus key derived from a wallet signature, deposited straight to the wallet."""
    _run("wallet")


if __name__ == "__main__":
    _run(os.environ.get("RELAY_MODE", "mnemonic").strip().lower())

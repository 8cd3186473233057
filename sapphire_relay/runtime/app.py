from __future__ import annotations

import asyncio
from collections.abc import Callable

from sapphire_relay.adapters.address import validate_evm_address
from sapphire_relay.adapters.gateway import LedgerGateway, OasisGrpcWebGateway
from sapphire_relay.config import Settings, get_network
from sapphire_relay.dashboard import run_dashboard
from sapphire_relay.data.snapshot_store import SnapshotStore
from sapphire_relay.domain.errors import ConfigurationError
from sapphire_relay.domain.models import AccountSet
from sapphire_relay.identity import (
    MnemonicIdentityProvider,
    PromptWalletConnector,
    SecretMaterial,
    WalletConnector,
    WalletSignatureIdentityProvider,
    accounts_for,
)
from sapphire_relay.infra import RuntimeEventLogger, get_logger
from sapphire_relay.runtime.shutdown import TerminationGuard
from sapphire_relay.runtime.supervisor import LoopSupervisor
from sapphire_relay.settlement import SettlementEngine
from sapphire_relay.status import CompositeReporter, ConsoleReporter, SnapshotReporter, StatusReporter

MODES = ("mnemonic", "wallet")


class App:
    """Top-level orchestrator: resolve accounts, then run the relay loop."""

    def __init__(
        self,
        settings: Settings,
        *,
        mode: str = "mnemonic",
        input_fn: Callable[[str], str] = input,
        wallet_connector: WalletConnector | None = None,
        gateway: LedgerGateway | None = None,
        reporter: StatusReporter | None = None,
    ):
        if mode not in MODES:
            raise ConfigurationError(f"unknown relay mode {mode!r}; expected one of {MODES}")
        self.settings = settings
        self.mode = mode
        self.network = get_network(settings.network)
        self.log = get_logger("sapphire-relay", settings.log_level)
        self._input = input_fn
        self._wallet_connector = wallet_connector
        self._gateway = gateway
        self.snapshot_reporter: SnapshotReporter | None = None
        self.reporter = reporter or self._build_reporter()

    def _build_reporter(self) -> StatusReporter:
        console = ConsoleReporter(self.network)
        if self.settings.dashboard_enabled:
            self.snapshot_reporter = SnapshotReporter(self.network, SnapshotStore(self.settings.data_dir))
            return CompositeReporter(console, self.snapshot_reporter)
        return console

    def resolve(self) -> tuple[AccountSet, SecretMaterial]:
        """Derive keys and validate operator input. Raises ConfigurationError."""
        if self.mode == "wallet":
            connector = self._wallet_connector or PromptWalletConnector(self._input)
            provider = WalletSignatureIdentityProvider(connector, chain_id=self.network.evm_chain_id)
            identity = provider.resolve()
            return accounts_for(identity), identity.secret

        identity = MnemonicIdentityProvider().derive_identity(self.settings.mnemonic or None)
        destination = self.settings.destination or self._input(
            "Sapphire address you want to send ROSE to (0x...): "
        )
        destination = (destination or "").strip()
        if not destination:
            raise ConfigurationError("no sapphire destination address given")
        return accounts_for(identity, validate_evm_address(destination)), identity.secret

    async def run(self, accounts: AccountSet, secret: SecretMaterial) -> None:
        """Run the relay until cancelled.

        The engine runs unsupervised next to the dashboard: `SettlementEngine.run`
        only ends by cancellation, because every cycle failure, including a
        failing reporter, is absorbed inside `run_cycle`.
        """
        self.log.info(
            "starting relay mode=%s network=%s hops=%s",
            self.mode,
            self.network.name,
            2 if accounts.has_intermediate else 1,
        )
        self.reporter.accounts(accounts)
        self.reporter.secret(secret)

        gateway = self._gateway or OasisGrpcWebGateway(
            self.network,
            grpc_url=self.settings.grpc_url,
            timeout=self.settings.request_timeout_sec,
            log=self.log,
        )
        engine = SettlementEngine(
            accounts,
            gateway,
            self.network,
            self.reporter,
            self.log,
            poll_interval=self.settings.poll_interval_sec,
            transfer_delay=self.settings.transfer_delay_sec,
            events=RuntimeEventLogger(self.settings.data_dir, enabled=self.settings.events_enabled),
        )

        task = asyncio.current_task()
        if task is not None:
            TerminationGuard(self.log, notify=self.reporter.alert).install(asyncio.get_running_loop(), task)

        try:
            if self.settings.dashboard_enabled:
                supervisor = LoopSupervisor()
                await asyncio.gather(
                    engine.run(),
                    supervisor.run_forever(
                        "dashboard",
                        lambda: run_dashboard(
                            data_dir=self.settings.data_dir,
                            host=self.settings.dashboard_host,
                            port=self.settings.dashboard_port,
                            log_level=self.settings.log_level,
                            secret_provider=self.snapshot_reporter.secret_view if self.snapshot_reporter else None,
                        ),
                        self.log,
                    ),
                )
            else:
                await engine.run()
        finally:
            await gateway.close()


def run_main(settings: Settings, *, mode: str = "mnemonic") -> None:
    app = App(settings, mode=mode)
    accounts, secret = app.resolve()
    try:
        asyncio.run(app.run(accounts, secret))
    except (asyncio.CancelledError, KeyboardInterrupt):
        app.log.info("relay stopped")

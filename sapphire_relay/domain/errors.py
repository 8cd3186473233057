from __future__ import annotations


class RelayError(Exception):
    """Base class for relay failures."""


class ConfigurationError(RelayError):
    """Bad operator input or wallet response. Fatal, never retried."""


class OperationalError(RelayError):
    """Failure inside a poll cycle. Recovered by re-observing next cycle."""


class GatewayError(OperationalError):
    """Non-OK answer from a ledger node."""

    def __init__(self, method: str, code: int, message: str):
        super().__init__(f"{method} failed code={code}: {message}")
        self.method = method
        self.code = code
        self.message = message

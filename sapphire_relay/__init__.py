"""Relay ROSE from an Oasis consensus account into a Sapphire account."""

__version__ = "0.1.0"

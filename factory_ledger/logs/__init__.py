"""Structured logging package."""

from factory_ledger.logs.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]

"""Pacote system: suporte de logging do exporter."""

from .logs import configure_logging

__all__ = ["configure_logging"]

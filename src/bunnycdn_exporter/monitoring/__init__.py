"""Pacote monitoring: cliente da API do BunnyCDN, modelos, descritores e extração de valores.

Re-exports para os pontos de entrada mais usados.
"""

from .api import BunnyAPI, PullZone, Statistics
from .client import BunnyAPIError, FetchClient, FetchError, ParseError, TransportError
from .metrics import MetricsRegistry, build_metrics_registry

__all__ = [
    "BunnyAPI",
    "PullZone",
    "Statistics",
    "BunnyAPIError",
    "FetchClient",
    "FetchError",
    "ParseError",
    "TransportError",
    "MetricsRegistry",
    "build_metrics_registry",
]

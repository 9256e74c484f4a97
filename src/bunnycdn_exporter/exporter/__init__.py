"""Pacote exporter: integração com prometheus_client e servidor HTTP.

Oferece re-exports para ``from bunnycdn_exporter.exporter import BunnyCDNCollector``.
"""

from .exporter import BunnyCDNCollector
from .main_http import run_http_server

__all__ = ["BunnyCDNCollector", "run_http_server"]

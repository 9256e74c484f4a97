"""Exporter Prometheus para as estatísticas da API do BunnyCDN."""

__version__ = "0.2.0"

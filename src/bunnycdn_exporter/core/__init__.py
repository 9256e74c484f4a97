"""Pacote core: coordenação do scrape e parsing de argumentos.

Re-exports para compatibilidade com importações diretas do pacote.
"""

from .core import Sample, ScrapeCoordinator, ScrapeCounters, ScrapeResult

__all__ = ["Sample", "ScrapeCoordinator", "ScrapeCounters", "ScrapeResult"]

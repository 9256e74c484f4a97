"""Core do exporter: coordenação de um scrape completo.

O ``ScrapeCoordinator`` executa, sob um único lock, a sequência:

1. lista as pull zones (falha aqui = scrape falho, ``up`` = 0);
2. obtém as estatísticas de cada zona, isolando falhas por zona;
3. emite as métricas por zona (incluindo a distribuição geográfica);
4. sem nenhum snapshot de zona, faz uma chamada de estatísticas da conta;
5. emite as métricas da conta a partir do snapshot disponível.

Não há retentativas: o próximo scrape externo é a retentativa.
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Callable, Protocol

from ..monitoring.api import PullZone, Statistics
from ..monitoring.client import BunnyAPIError
from ..monitoring.metrics import MetricDescriptor, MetricsRegistry
from ..monitoring.values import extract_value

logger = logging.getLogger(__name__)


class StatisticsSource(Protocol):
    def list_pull_zones(self) -> list[PullZone]: ...

    def get_statistics(self, pull_zone_id: int | None = None) -> Statistics: ...


@dataclass(frozen=True)
class Sample:
    """Valor emitido por um scrape para um descritor e valores de rótulos."""

    descriptor: MetricDescriptor
    label_values: tuple[str, ...]
    value: float


@dataclass
class ScrapeCounters:
    """Contadores operacionais monotônicos, partilhados entre scrapes."""

    total_scrapes: int = 0
    api_calls: int = 0
    errors: int = 0


@dataclass(frozen=True)
class ScrapeResult:
    """Visão consistente de um scrape: amostras, ``up`` e contadores."""

    up: bool
    samples: list[Sample] = field(default_factory=list)
    counters: ScrapeCounters = field(default_factory=ScrapeCounters)


Emit = Callable[[Sample], None]


class ScrapeCoordinator:
    """Orquestra listagem, estatísticas e emissão de métricas de um scrape."""

    def __init__(self, api: StatisticsSource, metrics: MetricsRegistry):
        self.api = api
        self.metrics = metrics
        self.counters = ScrapeCounters()
        self.up = False
        # RLock: collect() segura o lock enquanto chama scrape()
        self._lock = threading.RLock()

    # ========================
    # 1. Entradas públicas
    # ========================

    def collect(self) -> ScrapeResult:
        """Executa um scrape e devolve as amostras com ``up`` e cópia dos contadores."""
        samples: list[Sample] = []
        with self._lock:
            up = self.scrape(samples.append)
            return ScrapeResult(up=up, samples=samples, counters=replace(self.counters))

    def scrape(self, emit: Emit) -> bool:
        """Executa um scrape completo, emitindo amostras via ``emit``.

        Retorna True se a listagem de pull zones teve sucesso, independentemente
        das falhas por zona ou do fallback da conta.
        """
        with self._lock:
            self.up = self._scrape(emit)
            return self.up

    # ========================
    # 2. Etapas do scrape
    # ========================

    def _scrape(self, emit: Emit) -> bool:
        self.counters.total_scrapes += 1

        self.counters.api_calls += 1
        try:
            pull_zones = self.api.list_pull_zones()
        except BunnyAPIError as exc:
            self.counters.errors += 1
            logger.error("Unable to list pull zones: %s", exc)
            return False

        account_stats: Statistics | None = None
        for zone in pull_zones:
            stats = self._zone_statistics(zone)
            if stats is None:
                continue
            account_stats = stats
            self._emit_zone(emit, zone, stats)

        if account_stats is None:
            account_stats = self._account_statistics()

        if account_stats is not None:
            for metric in self.metrics.account:
                emit(Sample(metric.descriptor, (), extract_value(metric.series(account_stats))))
        return True

    def _zone_statistics(self, zone: PullZone) -> Statistics | None:
        self.counters.api_calls += 1
        try:
            return self.api.get_statistics(zone.id)
        except BunnyAPIError as exc:
            self.counters.errors += 1
            logger.error("Unable to collect stats for pull zone %s (%d): %s", zone.name, zone.id, exc)
            return None

    def _account_statistics(self) -> Statistics | None:
        self.counters.api_calls += 1
        try:
            return self.api.get_statistics()
        except BunnyAPIError as exc:
            self.counters.errors += 1
            logger.error("Unable to collect global stats (no pull zone statistics available): %s", exc)
            return None

    def _emit_zone(self, emit: Emit, zone: PullZone, stats: Statistics) -> None:
        for metric in self.metrics.pull_zone:
            emit(Sample(metric.descriptor, (zone.name,), extract_value(metric.series(stats))))
        for loc in stats.traffic_locations():
            emit(Sample(self.metrics.geo_traffic, (zone.name, loc.region, loc.location), loc.requests))

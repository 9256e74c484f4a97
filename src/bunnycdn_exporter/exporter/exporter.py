"""Integração com ``prometheus_client``: collector customizado do BunnyCDN.

Traduz as amostras de um scrape (descritor, valores de rótulos, valor) em
``GaugeMetricFamily`` e famílias ``counter``. Descritores com o mesmo nome
(ex.: ``request_error_count`` para 3xx/4xx/5xx) são agrupados numa única
família, com os rótulos constantes acrescentados aos variáveis, para que a
exposição tenha um só bloco HELP/TYPE por nome.

Os contadores operacionais mantêm na amostra o nome publicado
(``bunnycdn_exporter_total_scrapes``, ``bunnycdn_exporter_api_calls_total``);
``CounterMetricFamily`` acrescentaria ``_total`` a todos eles.
"""

import logging
from typing import Iterable, Iterator

from prometheus_client.core import GaugeMetricFamily, Metric
from prometheus_client.registry import Collector

from ..core.core import Sample, ScrapeCoordinator
from ..monitoring.metrics import MetricDescriptor, MetricsRegistry

logger = logging.getLogger(__name__)


def _family_labels(descriptor: MetricDescriptor) -> list[str]:
    return [*descriptor.label_names, *descriptor.const_label_names]


def _gauge_families(descriptors: Iterable[MetricDescriptor]) -> dict[str, GaugeMetricFamily]:
    """Cria uma ``GaugeMetricFamily`` vazia por nome distinto, preservando a ordem."""
    families: dict[str, GaugeMetricFamily] = {}
    for d in descriptors:
        if d.name not in families:
            families[d.name] = GaugeMetricFamily(d.name, d.help, labels=_family_labels(d))
    return families


# Auxilia BunnyCDNCollector; criado para expor contadores com o nome exato do descritor
def _counter_family(descriptor: MetricDescriptor, value: float | None = None) -> Metric:
    """Família ``counter`` cuja amostra usa ``descriptor.name`` sem sufixo extra.

    Só o nome da família perde um ``_total`` final, que o formato de texto
    reacrescenta no cabeçalho HELP/TYPE.
    """
    name = descriptor.name
    family = Metric(name.removesuffix("_total"), descriptor.help, "counter")
    if value is not None:
        family.add_sample(name, {}, float(value))
    return family


class BunnyCDNCollector(Collector):
    """Collector registrado no ``CollectorRegistry``; cada ``collect()`` dispara um scrape."""

    def __init__(self, coordinator: ScrapeCoordinator, metrics: MetricsRegistry | None = None):
        self.coordinator = coordinator
        self.metrics = metrics or coordinator.metrics

    def describe(self) -> Iterator[Metric]:
        """Descreve todas as métricas que o exporter pode emitir (sem amostras)."""
        yield from _gauge_families(self.metrics.gauge_descriptors()).values()
        yield GaugeMetricFamily(self.metrics.up.name, self.metrics.up.help)
        for d in self.metrics.counter_descriptors():
            yield _counter_family(d)

    def collect(self) -> Iterator[Metric]:
        result = self.coordinator.collect()

        families = _gauge_families(self.metrics.gauge_descriptors())
        for sample in result.samples:
            self._add_sample(families, sample)
        yield from families.values()

        yield GaugeMetricFamily(self.metrics.up.name, self.metrics.up.help, value=1.0 if result.up else 0.0)
        counters = result.counters
        for d, value in zip(
            self.metrics.counter_descriptors(),
            (counters.total_scrapes, counters.errors, counters.api_calls),
        ):
            yield _counter_family(d, value)

    @staticmethod
    def _add_sample(families: dict[str, GaugeMetricFamily], sample: Sample) -> None:
        d = sample.descriptor
        family = families.get(d.name)
        if family is None:
            # descritor fora do registry (ex.: coordenador com tabela alternativa)
            family = families[d.name] = GaugeMetricFamily(d.name, d.help, labels=_family_labels(d))
        family.add_metric([*sample.label_values, *d.const_label_values], sample.value)

"""Descritores das métricas exportadas.

Define ``MetricDescriptor`` (nome, ajuda, rótulos variáveis e constantes) e o
``MetricsRegistry``: tabela imutável, construída uma vez no arranque, com as
métricas da conta, as métricas por pull zone (cada uma associada à função que
extrai a série do snapshot) e as métricas operacionais do exporter.

O registry é passado explicitamente ao coordenador; testes podem construir
tabelas alternativas.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, Mapping

from .api import Statistics

NAMESPACE = "bunnycdn"

PULL_ZONE_LABEL = "pull_zone"
GEO_LABELS = (PULL_ZONE_LABEL, "region", "location")


def build_fq_name(namespace: str, name: str) -> str:
    """Concatena namespace e nome com '_' (equivalente ao BuildFQName do Prometheus)."""
    return "_".join(p for p in (namespace, name) if p)


@dataclass(frozen=True)
class MetricDescriptor:
    """Metadados estáticos de uma série de métricas."""

    name: str
    help: str
    label_names: tuple[str, ...] = ()
    const_labels: tuple[tuple[str, str], ...] = ()

    @property
    def const_label_names(self) -> tuple[str, ...]:
        return tuple(k for k, _ in self.const_labels)

    @property
    def const_label_values(self) -> tuple[str, ...]:
        return tuple(v for _, v in self.const_labels)


@dataclass(frozen=True)
class SnapshotMetric:
    """Entrada da tabela de despacho: chave, descritor e acessor da série."""

    key: str
    descriptor: MetricDescriptor
    series: Callable[[Statistics], Mapping[str, float]]


@dataclass(frozen=True)
class MetricsRegistry:
    """Conjunto fixo de descritores usado por um coordenador de scrape."""

    account: tuple[SnapshotMetric, ...]
    pull_zone: tuple[SnapshotMetric, ...]
    geo_traffic: MetricDescriptor
    up: MetricDescriptor
    total_scrapes: MetricDescriptor
    total_errors: MetricDescriptor
    api_calls: MetricDescriptor

    def gauge_descriptors(self) -> Iterator[MetricDescriptor]:
        """Descritores de gauges de dados (conta, pull zone e geo)."""
        for m in self.account:
            yield m.descriptor
        for m in self.pull_zone:
            yield m.descriptor
        yield self.geo_traffic

    def counter_descriptors(self) -> tuple[MetricDescriptor, ...]:
        return (self.total_scrapes, self.total_errors, self.api_calls)

    def keys(self) -> list[str]:
        return sorted(m.key for m in (*self.account, *self.pull_zone))


def build_metrics_registry(namespace: str = NAMESPACE) -> MetricsRegistry:
    """Constrói o registry padrão de métricas do BunnyCDN."""

    def desc(name, help_text, labels=(), const=()):
        return MetricDescriptor(build_fq_name(namespace, name), help_text, tuple(labels), tuple(const))

    zone = (PULL_ZONE_LABEL,)
    error_help = "Request error by code."

    account = (
        SnapshotMetric("balance", desc("account_balance", "Current account balance"), lambda s: s.user_balance_history),
        SnapshotMetric(
            "storageUsed", desc("storage_used_bytes", "Storage usage in bytes"), lambda s: s.user_storage_used
        ),
    )
    pull_zone = (
        SnapshotMetric(
            "OriginResponseTime",
            desc("origin_response_time_avg", "The average origin response time.", zone),
            lambda s: s.origin_response_time,
        ),
        SnapshotMetric(
            "bandwidthUsed",
            desc("bandwidth_used_bytes_total", "Total bandwidth used in bytes serving traffic.", zone),
            lambda s: s.bandwidth_used,
        ),
        SnapshotMetric(
            "bandwidthCached",
            desc("bandwidth_cached_bytes_total", "Total bandwidth used in bytes serving cached data.", zone),
            lambda s: s.bandwidth_cached,
        ),
        SnapshotMetric(
            "requestsServed",
            desc("requests_served_total", "Number of requests served.", zone),
            lambda s: s.requests_served,
        ),
        SnapshotMetric(
            "pullRequestsPulled",
            desc("pull_requests_pulled", "Number of pull requests from origin.", zone),
            lambda s: s.pull_requests_pulled,
        ),
        SnapshotMetric(
            "error3xx", desc("request_error_count", error_help, zone, (("code", "3xx"),)), lambda s: s.error_3xx
        ),
        SnapshotMetric(
            "error4xx", desc("request_error_count", error_help, zone, (("code", "4xx"),)), lambda s: s.error_4xx
        ),
        SnapshotMetric(
            "error5xx", desc("request_error_count", error_help, zone, (("code", "5xx"),)), lambda s: s.error_5xx
        ),
    )

    return MetricsRegistry(
        account=account,
        pull_zone=pull_zone,
        geo_traffic=desc("requests_served", "Request by location.", GEO_LABELS),
        up=desc("up", "Was the last scrape of BunnyCDN successful."),
        total_scrapes=desc("exporter_total_scrapes", "Current total BunnyCDN scrapes."),
        total_errors=desc("exporter_total_errors", "Number of errors while making API calls."),
        api_calls=desc("exporter_api_calls_total", "Number of calls made to BunnyCDN API"),
    )

"""Testes do BunnyCDNCollector sobre um CollectorRegistry real do prometheus_client."""

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.parser import text_string_to_metric_families

from bunnycdn_exporter.core.core import ScrapeCoordinator
from bunnycdn_exporter.exporter.exporter import BunnyCDNCollector
from bunnycdn_exporter.monitoring.api import PullZone, Statistics
from bunnycdn_exporter.monitoring.client import FetchError
from bunnycdn_exporter.monitoring.metrics import build_metrics_registry


class StaticAPI:
    def __init__(self, zones, stats):
        self.zones = zones
        self.stats = stats

    def list_pull_zones(self):
        if isinstance(self.zones, Exception):
            raise self.zones
        return self.zones

    def get_statistics(self, pull_zone_id=None):
        return self.stats


def _registry(api):
    coordinator = ScrapeCoordinator(api, build_metrics_registry())
    registry = CollectorRegistry()
    registry.register(BunnyCDNCollector(coordinator))
    return registry


def _samples(registry):
    text = generate_latest(registry).decode("utf-8")
    out = {}
    for family in text_string_to_metric_families(text):
        for s in family.samples:
            out.setdefault(s.name, []).append((s.labels, s.value))
    return text, out


def test_describe_lists_unique_families():
    """describe() devolve um nome por família, incluindo up e contadores."""
    coordinator = ScrapeCoordinator(StaticAPI([], Statistics()), build_metrics_registry())
    names = [m.name for m in BunnyCDNCollector(coordinator).describe()]

    assert len(names) == len(set(names))
    assert "bunnycdn_request_error_count" in names
    assert "bunnycdn_up" in names
    # o nome da família perde o _total final; a amostra mantém o nome publicado
    assert "bunnycdn_exporter_api_calls" in names
    assert "bunnycdn_exporter_total_scrapes" in names


def test_describe_does_not_scrape():
    class ExplodingAPI:
        def list_pull_zones(self):
            raise AssertionError("describe não deve chamar a API")

    _registry(ExplodingAPI())


def test_collect_exposes_zone_account_and_operational_metrics(statistics_payload):
    stats = Statistics.from_json(statistics_payload)
    registry = _registry(StaticAPI([PullZone(1, "pullzonename")], stats))

    text, samples = _samples(registry)

    assert samples["bunnycdn_up"] == [({}, 1.0)]
    assert samples["bunnycdn_bandwidth_used_bytes_total"] == [({"pull_zone": "pullzonename"}, 28639956.0)]
    assert samples["bunnycdn_bandwidth_cached_bytes_total"] == [({"pull_zone": "pullzonename"}, 28000000.0)]
    assert samples["bunnycdn_account_balance"] == [({}, 1000.0)]
    assert samples["bunnycdn_storage_used_bytes"] == [({}, 0.0)]
    errors = {labels["code"]: value for labels, value in samples["bunnycdn_request_error_count"]}
    assert errors == {"3xx": 3.0, "4xx": 4.0, "5xx": 5.0}
    assert len(samples["bunnycdn_requests_served"]) == 8
    assert ({"pull_zone": "pullzonename", "region": "EU", "location": "London, UK"}, 6040860.0) in samples[
        "bunnycdn_requests_served"
    ]
    assert samples["bunnycdn_exporter_total_scrapes"] == [({}, 1.0)]
    assert samples["bunnycdn_exporter_api_calls_total"] == [({}, 2.0)]
    assert samples["bunnycdn_exporter_total_errors"] == [({}, 0.0)]
    # um único bloco TYPE por nome
    assert text.count("# TYPE bunnycdn_request_error_count gauge") == 1


def test_collect_listing_failure_reports_up_zero():
    registry = _registry(StaticAPI(FetchError(401, "http://x/pullzone"), None))

    _, samples = _samples(registry)

    assert samples["bunnycdn_up"] == [({}, 0.0)]
    assert samples["bunnycdn_exporter_total_errors"] == [({}, 1.0)]
    assert "bunnycdn_account_balance" not in samples
    assert "bunnycdn_origin_response_time_avg" not in samples


def test_each_exposition_triggers_a_scrape():
    registry = _registry(StaticAPI([], Statistics()))
    generate_latest(registry)
    _, samples = _samples(registry)
    assert samples["bunnycdn_exporter_total_scrapes"] == [({}, 2.0)]


def test_operational_counters_keep_published_names():
    """As linhas de amostra usam exatamente os nomes publicados dos contadores."""
    registry = _registry(StaticAPI([], Statistics()))

    lines = generate_latest(registry).decode("utf-8").splitlines()

    assert "bunnycdn_exporter_total_scrapes 1.0" in lines
    assert "bunnycdn_exporter_total_errors 0.0" in lines
    assert "bunnycdn_exporter_api_calls_total 2.0" in lines
    assert "# TYPE bunnycdn_exporter_api_calls_total counter" in lines
    assert not any(line.startswith("bunnycdn_exporter_total_scrapes_total ") for line in lines)
    assert not any(line.startswith("bunnycdn_exporter_api_calls_total_total ") for line in lines)

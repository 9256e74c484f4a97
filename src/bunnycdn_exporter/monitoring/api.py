"""Operações da API do BunnyCDN: listagem de pull zones e estatísticas.

As funções recebem um ``FetchClient`` e devolvem objetos imutáveis
(``PullZone`` e ``Statistics``) decodificados a partir do JSON da resposta.
Erros de transporte/HTTP do cliente são propagados sem alteração; corpos
inválidos levantam ``ParseError``.
"""

import json
import logging
from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping
from urllib.parse import urlencode

import requests  # type: ignore[import-untyped]

from .client import FetchClient, ParseError, TransportError
from .values import TrafficLocation, traffic_locations

logger = logging.getLogger(__name__)

PULL_ZONE_PATH = "/pullzone"
STATISTICS_PATH = "/statistics"
DATE_FORMAT = "%Y-%m-%d"


# ========================
# 1. Modelos
# ========================


@dataclass(frozen=True)
class PullZone:
    """Pull zone da conta (apenas ``Id`` e ``Name`` são consumidos)."""

    id: int
    name: str


def _chart(json_key: str):
    return field(default_factory=dict, metadata={"json": json_key})


@dataclass(frozen=True)
class Statistics:
    """Snapshot de estatísticas de uma pull zone ou da conta inteira.

    Cada campo é uma série temporal ``timestamp -> valor``. Campos ausentes no
    JSON resultam em séries vazias.
    """

    origin_response_time: Mapping[str, float] = _chart("OriginResponseTimeChart")
    bandwidth_used: Mapping[str, float] = _chart("BandwidthUsedChart")
    bandwidth_cached: Mapping[str, float] = _chart("BandwidthCachedChart")
    cache_hit_rate: Mapping[str, float] = _chart("CacheHitRateChart")
    requests_served: Mapping[str, float] = _chart("RequestsServedChart")
    pull_requests_pulled: Mapping[str, float] = _chart("PullRequestsPulledChart")
    user_balance_history: Mapping[str, float] = _chart("UserBalanceHistoryChart")
    user_storage_used: Mapping[str, float] = _chart("UserStorageUsedChart")
    geo_traffic_distribution: Mapping[str, float] = _chart("GeoTrafficDistribution")
    error_3xx: Mapping[str, float] = _chart("Error3xxChart")
    error_4xx: Mapping[str, float] = _chart("Error4xxChart")
    error_5xx: Mapping[str, float] = _chart("Error5xxChart")

    @classmethod
    def from_json(cls, payload: Any) -> "Statistics":
        """Constrói o snapshot a partir do objeto JSON da resposta."""
        if not isinstance(payload, dict):
            raise ParseError(f"esperado objeto JSON em /statistics, recebido {type(payload).__name__}")
        kwargs = {}
        for f in fields(cls):
            key = f.metadata["json"]
            raw = payload.get(key)
            if raw is None:
                continue
            kwargs[f.name] = _decode_series(key, raw)
        return cls(**kwargs)

    def traffic_locations(self) -> list[TrafficLocation]:
        return traffic_locations(self.geo_traffic_distribution)


# Auxilia Statistics.from_json; valida uma série timestamp -> número
def _decode_series(key: str, raw: Any) -> dict[str, float]:
    if not isinstance(raw, dict):
        raise ParseError(f"campo {key} deveria ser um objeto, recebido {type(raw).__name__}")
    series: dict[str, float] = {}
    for ts, value in raw.items():
        # bool é subclasse de int; não é um valor numérico válido aqui
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ParseError(f"valor não numérico em {key}[{ts!r}]: {value!r}")
        series[ts] = float(value)
    return series


# ========================
# 2. Leitura e decodificação de respostas
# ========================


def _read_json(client: FetchClient, path: str) -> Any:
    """Executa o GET, lê o corpo inteiro, fecha a resposta e decodifica JSON."""
    with client.fetch(path) as resp:
        try:
            body = resp.content
        except requests.RequestException as exc:
            raise TransportError(f"falha ao ler resposta de {path}: {exc}") from exc
    try:
        return json.loads(body)
    except ValueError as exc:
        raise ParseError(f"resposta de {path} não é JSON válido: {exc}") from exc


def list_pull_zones(client: FetchClient) -> list[PullZone]:
    """Lista as pull zones da conta numa única chamada (sem paginação).

    Uma lista vazia é um resultado válido.
    """
    payload = _read_json(client, PULL_ZONE_PATH)
    if not isinstance(payload, list):
        raise ParseError(f"esperado array JSON em {PULL_ZONE_PATH}, recebido {type(payload).__name__}")

    zones: list[PullZone] = []
    for item in payload:
        if not isinstance(item, dict):
            raise ParseError(f"pull zone inválida: {item!r}")
        zone_id = item.get("Id")
        name = item.get("Name")
        if isinstance(zone_id, bool) or not isinstance(zone_id, int) or not isinstance(name, str):
            raise ParseError(f"pull zone sem Id/Name válidos: Id={zone_id!r} Name={name!r}")
        zones.append(PullZone(id=zone_id, name=name))
    logger.debug("%d pull zones listadas", len(zones))
    return zones


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def statistics_path(pull_zone_id: int | None = None, today: date | None = None) -> str:
    """Monta o caminho de /statistics para o dia corrente (UTC)."""
    day = (today or utc_today()).strftime(DATE_FORMAT)
    params = {"dateFrom": day, "dateTo": day, "loadErrors": "true"}
    if pull_zone_id is not None:
        params["pullZone"] = str(int(pull_zone_id))
    return f"{STATISTICS_PATH}?{urlencode(params)}"


def get_statistics(
    client: FetchClient,
    pull_zone_id: int | None = None,
    today: Callable[[], date] = utc_today,
) -> Statistics:
    """Obtém as estatísticas de hoje de uma pull zone, ou da conta quando ``pull_zone_id`` é None."""
    payload = _read_json(client, statistics_path(pull_zone_id, today()))
    return Statistics.from_json(payload)


class BunnyAPI:
    """Fachada usada pelo coordenador: agrupa listagem e estatísticas sobre um cliente."""

    def __init__(self, client: FetchClient, today: Callable[[], date] = utc_today):
        self.client = client
        self._today = today

    def list_pull_zones(self) -> list[PullZone]:
        return list_pull_zones(self.client)

    def get_statistics(self, pull_zone_id: int | None = None) -> Statistics:
        return get_statistics(self.client, pull_zone_id, today=self._today)

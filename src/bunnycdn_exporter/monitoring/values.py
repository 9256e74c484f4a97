"""Extração de valores representativos e decomposição geográfica.

Funções puras usadas pelo coordenador de scrape para reduzir as séries
temporais da API a um único número e para separar as chaves compostas da
distribuição geográfica (``"EU: London, UK"``) em região/localização.

Pré-condição das séries: as estatísticas são pedidas apenas para o dia
corrente, portanto cada série tem no máximo uma entrada no caso comum.
"""

import logging
from dataclasses import dataclass
from typing import Mapping

logger = logging.getLogger(__name__)

# Valor emitido quando a série está vazia ("sem dados").
# Ambíguo com um valor negativo legítimo; nenhuma métrica do BunnyCDN é negativa.
NO_DATA = -1.0


@dataclass(frozen=True)
class TrafficLocation:
    """Uma entrada da distribuição geográfica de tráfego."""

    region: str
    location: str
    requests: float


def extract_value(series: Mapping[str, float], default: float = NO_DATA) -> float:
    """Devolve o valor representativo de uma série temporal.

    - série vazia: ``default`` (``NO_DATA`` = -1)
    - uma entrada: o valor dessa entrada, sem conversão
    - mais de uma entrada: o valor da maior chave (timestamps ISO-8601 ordenam
      cronologicamente), registrando em debug que a pré-condição não se verificou
    """
    if not series:
        return default
    if len(series) == 1:
        return next(iter(series.values()))
    latest = max(series)
    logger.debug("série com %d entradas; usando a mais recente (%s)", len(series), latest)
    return series[latest]


def split_location_key(key: str) -> tuple[str, str] | None:
    """Separa ``"<Região>: <Localização>"`` no primeiro ':'.

    Retorna ``None`` quando a chave não contém ':'.
    """
    region, sep, location = key.partition(":")
    if not sep:
        return None
    return region.strip(), location.strip()


def traffic_locations(series: Mapping[str, float]) -> list[TrafficLocation]:
    """Decompõe a distribuição geográfica em uma ``TrafficLocation`` por chave.

    Chaves sem ':' são ignoradas com aviso. A ordem do resultado não é garantida.
    """
    locations: list[TrafficLocation] = []
    for key, requests in series.items():
        parts = split_location_key(key)
        if parts is None:
            logger.warning("chave de distribuição geográfica malformada ignorada: %r", key)
            continue
        region, location = parts
        locations.append(TrafficLocation(region=region, location=location, requests=requests))
    return locations

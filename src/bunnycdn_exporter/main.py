"""Ponto de entrada do exporter BunnyCDN.

Faz o parsing de argumentos, configura logging, monta cliente da API,
coordenador de scrape e collector, registra-os no ``CollectorRegistry`` e
inicia o servidor HTTP.
"""

import logging

from prometheus_client import REGISTRY, CollectorRegistry, Info

from . import __version__
from .config.settings import parse_listen_address
from .core.args import get_log_config, parse_args
from .core.core import ScrapeCoordinator
from .exporter.exporter import BunnyCDNCollector
from .exporter.main_http import run_http_server
from .monitoring.api import BunnyAPI
from .monitoring.client import FetchClient
from .monitoring.metrics import NAMESPACE, build_metrics_registry
from .system.logs import configure_logging

logger = logging.getLogger(__name__)


def build_exporter(args, registry: CollectorRegistry = REGISTRY) -> ScrapeCoordinator:
    """Monta cliente, coordenador e collector a partir dos argumentos e registra no ``registry``."""
    client = FetchClient(args.api_uri, args.api_key, ssl_verify=args.ssl_verify, timeout=args.timeout)
    coordinator = ScrapeCoordinator(BunnyAPI(client), build_metrics_registry(NAMESPACE))
    registry.register(BunnyCDNCollector(coordinator))

    build_info = Info(f"{NAMESPACE}_exporter_build", "BunnyCDN exporter build information.", registry=registry)
    build_info.info({"version": __version__})
    return coordinator


def main(argv: list[str] | None = None, registry: CollectorRegistry = REGISTRY) -> None:
    """Inicializa o exporter e atende requisições até ser interrompido.

    Args:
        argv: Lista de argumentos (usada em testes). Quando ``None`` a função
            utiliza os argumentos de linha de comando do processo.
        registry: registry onde o collector é registrado.
    """
    args = parse_args(argv)
    log_conf = get_log_config(args)
    configure_logging(log_conf["level"], log_conf.get("file"))

    logger.info("Starting bunnycdn_exporter %s", __version__)
    coordinator = build_exporter(args, registry)

    addr, port = parse_listen_address(args.listen_address)
    try:
        run_http_server(addr, port, registry=registry, metrics_path=args.metrics_path, coordinator=coordinator)
    except KeyboardInterrupt:
        logger.info("Interrompido; encerrando")
    finally:
        coordinator.api.client.close()


if __name__ == "__main__":
    main()

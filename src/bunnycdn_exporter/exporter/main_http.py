"""Servidor HTTP do exporter: métricas, página inicial e /health.

Endpoints:
- ``<metrics_path>`` (padrão ``/metrics``): exposição Prometheus do registry;
  cada requisição dispara um scrape da API do BunnyCDN.
- ``/``: página HTML com link para as métricas.
- ``/health``: JSON com o último ``up`` e métricas do processo (psutil).

Usa ``ThreadingHTTPServer``; scrapes concorrentes são serializados pelo lock
do coordenador.
"""

import json
import logging
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import psutil
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest

logger = logging.getLogger(__name__)

LANDING_PAGE = """<html>
<head><title>BunnyCDN Exporter</title></head>
<body>
<h1>BunnyCDN Exporter</h1>
<p><a href='{metrics_path}'>Metrics</a></p>
</body>
</html>
"""


class ExporterHandler(BaseHTTPRequestHandler):
    """Handler HTTP; ``registry``, ``metrics_path`` e ``coordinator`` são definidos por ``make_handler``."""

    registry: CollectorRegistry = REGISTRY
    metrics_path = "/metrics"
    coordinator = None

    def do_GET(self):
        """Trata requisições GET para métricas, página inicial e /health."""
        path = self.path.split("?", 1)[0]
        try:
            if path == self.metrics_path:
                self._send(200, CONTENT_TYPE_LATEST, generate_latest(self.registry))
            elif path == "/":
                page = LANDING_PAGE.format(metrics_path=self.metrics_path)
                self._send(200, "text/html; charset=utf-8", page.encode("utf-8"))
            elif path == "/health":
                status = {
                    "status": "ok",
                    "up": bool(getattr(self.coordinator, "up", False)),
                    "process": get_process_metrics(),
                }
                self._send(200, "application/json", json.dumps(status).encode("utf-8"))
            else:
                self._send(404, "text/plain; charset=utf-8", b"not found")
        except Exception:
            logger.exception("Erro ao tratar %s", self.path)
            self._send(500, "text/plain; charset=utf-8", b"internal error")

    def _send(self, code: int, content_type: str, body: bytes) -> None:
        self.send_response(code)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        """Silencia logs de requisições HTTP no console."""
        pass


def make_handler(registry: CollectorRegistry, metrics_path: str = "/metrics", coordinator=None):
    """Cria uma subclasse de ``ExporterHandler`` ligada ao registry e coordenador dados."""
    return type(
        "BoundExporterHandler",
        (ExporterHandler,),
        {"registry": registry, "metrics_path": metrics_path, "coordinator": coordinator},
    )


def get_process_metrics(prefix: str = "process_") -> dict:
    """Coleta métricas do processo em tempo real."""
    proc = psutil.Process()
    metrics = {
        f"{prefix}cpu_percent": proc.cpu_percent(interval=0.0),
        f"{prefix}memory_percent": proc.memory_percent(),
        f"{prefix}memory_rss_bytes": getattr(proc.memory_info(), "rss", 0),
        f"{prefix}uptime_seconds": float(max(0, (time.time() - proc.create_time()))),
        f"{prefix}num_threads": proc.num_threads(),
    }
    # num_fds não existe em todas as plataformas
    num_fds_fn = getattr(proc, "num_fds", None)
    if callable(num_fds_fn):
        try:
            metrics[f"{prefix}num_fds"] = num_fds_fn()
        except psutil.Error as exc:
            logger.debug("Falha ao obter número de descritores de arquivos: %s", exc, exc_info=True)
    return metrics


def create_http_server(
    addr: str,
    port: int,
    registry: CollectorRegistry,
    metrics_path: str = "/metrics",
    coordinator=None,
) -> ThreadingHTTPServer:
    """Cria (sem iniciar) o servidor HTTP do exporter."""
    handler = make_handler(registry, metrics_path, coordinator)
    server = ThreadingHTTPServer((addr, port), handler)  # nosec B104
    server.daemon_threads = True
    return server


def run_http_server(addr="", port=9584, registry=REGISTRY, metrics_path="/metrics", coordinator=None):
    """Inicia o servidor HTTP e atende requisições até ser interrompido."""
    server = create_http_server(addr, port, registry, metrics_path, coordinator)
    logger.info("Listening on %s:%d (%s)", addr or "0.0.0.0", server.server_address[1], metrics_path)  # nosec B104
    try:
        server.serve_forever()
    finally:
        server.server_close()

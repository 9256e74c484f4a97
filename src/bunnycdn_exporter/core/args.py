"""Parser de argumentos do exporter.

Expõe as flags:
- endereço e caminho de métricas (--web.listen-address, --web.telemetry-path)
- URI, chave, verificação TLS e timeout da API (--bunnycdn.*)
- verbosidade (-v) e opções de logging (--log-level, --log-file)

Precedência: linha de comando > variáveis de ambiente / ``.env`` > default.
"""

import argparse
import logging
from typing import Sequence

from .. import __version__
from ..config.settings import DEFAULTS, load_settings, parse_bool, parse_duration, parse_listen_address

logger = logging.getLogger(__name__)

# ========================
# 0. Configuração do parser e argumentos padrão
# ========================


# Função principal do módulo; cria e retorna o ArgumentParser configurado
def configure_argparser() -> argparse.ArgumentParser:
    """Cria e retorna ArgumentParser configurado para o exporter."""
    parser = argparse.ArgumentParser(
        prog="bunnycdn_exporter",
        description="Exporter Prometheus para as estatísticas da API do BunnyCDN",
    )

    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        default=DEFAULTS["listen_address"],
        help="Endereço onde expor a interface web e a telemetria (host:porta).",
    )
    parser.add_argument(
        "--web.telemetry-path",
        dest="metrics_path",
        default=DEFAULTS["metrics_path"],
        help="Caminho sob o qual as métricas são expostas.",
    )
    parser.add_argument(
        "--bunnycdn.api-uri",
        dest="api_uri",
        default=DEFAULTS["api_uri"],
        help="URI da API de onde obter as estatísticas.",
    )
    parser.add_argument(
        "--bunnycdn.api-key",
        dest="api_key",
        default=DEFAULTS["api_key"],
        help="Chave da API do BunnyCDN (padrão: BUNNYCDN_API_KEY).",
    )
    parser.add_argument(
        "--bunnycdn.ssl-verify",
        dest="ssl_verify",
        action=argparse.BooleanOptionalAction,
        default=DEFAULTS["ssl_verify"],
        help="Verifica o certificado TLS da URI da API.",
    )
    parser.add_argument(
        "--bunnycdn.timeout",
        dest="timeout",
        default=DEFAULTS["timeout"],
        help="Timeout de cada chamada à API (ex.: 10s, 500ms, 1m).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Aumenta a verbosidade (-v, -vv)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        type=str,
        default=DEFAULTS["log_level"],
        help="Nível de logging (DEBUG/INFO/WARNING/ERROR). Se ausente, definido por -v",
    )
    parser.add_argument(
        "--log-file",
        dest="log_file",
        type=str,
        default=DEFAULTS["log_file"],
        help="Arquivo JSONL adicional para os logs",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


# ========================
# 1. Funções auxiliares para análise e validação de argumentos
# ========================


# Auxilia main; criado para analisar argv, aplicar ambiente e validar argumentos
def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Analisa argv e retorna Namespace validado para uso no programa."""
    parser = configure_argparser()
    ns = parser.parse_args(argv)
    explicit = _explicit_args(argv)

    # Overrides do ambiente SOMENTE quando a flag não foi passada na CLI
    for arg, env_val in load_settings().items():
        if arg in explicit:
            continue
        setattr(ns, arg, env_val)

    try:
        validate_args(ns)
    except ValueError as exc:
        parser.error(str(exc))
    return ns


# Auxilia parse_args; criado para distinguir flags passadas de valores padrão
def _explicit_args(argv: Sequence[str] | None) -> set[str]:
    """Retorna os ``dest`` das flags presentes em argv, mesmo que iguais ao default."""
    parser = configure_argparser()
    parser.set_defaults(**dict.fromkeys(DEFAULTS, argparse.SUPPRESS))
    return set(vars(parser.parse_args(argv)))


# Auxilia parse_args; criado para garantir valores corretos e seguros
def validate_args(args: argparse.Namespace) -> None:
    """Valida e normaliza argumentos do exporter.

    Converte ``timeout`` para segundos (float) e ``ssl_verify`` para bool.
    """
    args.timeout = parse_duration(getattr(args, "timeout", DEFAULTS["timeout"]))
    args.ssl_verify = parse_bool(getattr(args, "ssl_verify", True))
    parse_listen_address(args.listen_address)

    if not str(args.metrics_path).startswith("/"):
        raise ValueError(f"telemetry-path deve começar com '/': {args.metrics_path!r}")
    if str(args.metrics_path) in ("/", "/health"):
        raise ValueError(f"telemetry-path reservado: {args.metrics_path!r}")
    if not str(args.api_uri).startswith(("http://", "https://")):
        raise ValueError(f"api-uri deve usar http:// ou https://: {args.api_uri!r}")

    if not getattr(args, "api_key", ""):
        logger.warning("Nenhuma chave de API configurada (--bunnycdn.api-key / BUNNYCDN_API_KEY)")


# ========================
# 2. Função auxiliar para configuração de logging
# ========================


# Auxilia main; criado para extrair configuração de logging dos argumentos
def get_log_config(args: argparse.Namespace) -> dict:
    """Retorna dict com configuração de logging ('level' e 'file') para o exporter."""
    if getattr(args, "log_level", None):
        level = str(args.log_level).upper()
    else:
        v = getattr(args, "verbose", 0) or 0
        if v >= 2:
            level = "DEBUG"
        elif v == 1:
            level = "INFO"
        else:
            level = "WARNING"

    return {"level": level, "file": getattr(args, "log_file", None)}

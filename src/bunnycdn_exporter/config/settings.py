"""Configurações do exporter BunnyCDN.

Centraliza os valores padrão e a leitura de overrides a partir de um arquivo
``.env`` e das variáveis de ambiente (prefixo ``BUNNYCDN_``). As variáveis do
processo sobrescrevem o ``.env``; a linha de comando (``core.args``)
sobrescreve ambos.

Funções públicas principais:

- ``load_settings()`` -> dicionário com as chaves de ``DEFAULTS`` vindas do ambiente
- ``parse_duration()`` -> segundos a partir de "10s", "500ms", "1m", "2h" ou "3.5"
- ``parse_listen_address()`` -> (host, porta) a partir de ":9584" ou "0.0.0.0:9584"
- ``parse_bool()`` -> bool a partir de "true"/"1"/"yes"/"false"/...
"""

import logging
import os
import re
from pathlib import Path

logger = logging.getLogger(__name__)

# ========================
# Constantes e padrões globais
# ========================

DEFAULTS = {
    "listen_address": ":9584",
    "metrics_path": "/metrics",
    "api_uri": "https://bunnycdn.com/api",
    "api_key": "",
    "ssl_verify": True,
    "timeout": "10s",
    "log_level": None,
    "log_file": None,
}

# chave de configuração -> variável de ambiente
ENV_MAP = {
    "listen_address": "BUNNYCDN_LISTEN_ADDRESS",
    "metrics_path": "BUNNYCDN_TELEMETRY_PATH",
    "api_uri": "BUNNYCDN_API_URI",
    "api_key": "BUNNYCDN_API_KEY",
    "ssl_verify": "BUNNYCDN_SSL_VERIFY",
    "timeout": "BUNNYCDN_TIMEOUT",
    "log_level": "BUNNYCDN_LOG_LEVEL",
    "log_file": "BUNNYCDN_LOG_FILE",
}

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, None: 1.0}

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


# ========================
# 1. Carregamento das configurações
# ========================


# Função principal do módulo; lê overrides do .env e do ambiente
def load_settings(env_file: Path | str | None = None) -> dict:
    """Retorna as configurações definidas via ``.env`` ou ambiente.

    Apenas as chaves presentes no ambiente aparecem no resultado (sem defaults),
    para que ``core.args`` possa aplicar a precedência CLI > ambiente > default.
    O caminho do ``.env`` vem de ``env_file``, de ``BUNNYCDN_ENV_FILE`` ou do
    diretório de trabalho.
    """
    env_path = Path(env_file or os.getenv("BUNNYCDN_ENV_FILE", ".env"))
    env_items = _merge_env_items(env_path)
    settings: dict = {}
    for key, env_var in ENV_MAP.items():
        if env_var in env_items:
            settings[key] = env_items[env_var]
    return settings


# ========================
# 2. Funções auxiliares para ambiente
# ========================


# Auxilia load_settings; criado para centralizar leitura do .env
def _read_env_file(path: Path | str) -> dict:
    """Lê um arquivo `.env` e devolve um dicionário chave->valor.

    Linhas vazias e comentários (começando com '#') são ignorados.
    """
    result: dict[str, str] = {}
    p = Path(path)
    if not p.exists():
        return result
    try:
        with p.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                if key.startswith("export "):
                    key = key[len("export ") :].strip()
                val = val.strip().strip('"').strip("'")
                result[key] = val
    except OSError as exc:
        logger.debug("Falha ao ler .env em %s: %s", p, exc)
        return {}
    return result


# Auxilia load_settings; criado para unir variáveis do ambiente e .env
def _merge_env_items(env_path: Path) -> dict:
    """Retorna um mapeamento combinado de `.env` e env vars do processo.

    As variáveis do processo sobrescrevem o arquivo `.env`.
    """
    env_items = _read_env_file(env_path)
    if env_items == {} and env_path.exists():
        logger.warning("Erro ou ficheiro .env vazio em %s", env_path)
    env_items.update(os.environ)
    return env_items


# ========================
# 3. Conversão e validação de valores
# ========================


def parse_duration(value) -> float:
    """Converte uma duração em segundos.

    Aceita números (segundos) ou strings com sufixo ``ms``, ``s``, ``m`` ou ``h``.
    """
    if isinstance(value, bool):
        raise ValueError(f"duração inválida: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        match = _DURATION_RE.match(str(value))
        if not match:
            raise ValueError(f"duração inválida: {value!r} (ex.: 10s, 500ms, 1m)")
        seconds = float(match.group(1)) * _DURATION_UNITS[match.group(2)]
    if seconds <= 0:
        raise ValueError(f"duração deve ser > 0: {value!r}")
    return seconds


def parse_listen_address(value: str) -> tuple[str, int]:
    """Separa ``host:porta``; host vazio (``":9584"``) significa todas as interfaces."""
    host, sep, port = str(value).strip().rpartition(":")
    if not sep:
        raise ValueError(f"endereço inválido (esperado host:porta): {value!r}")
    host = host.strip("[]")
    try:
        port_num = int(port)
    except ValueError as exc:
        raise ValueError(f"porta inválida em {value!r}") from exc
    if not 0 <= port_num <= 65535:
        raise ValueError(f"porta fora do intervalo em {value!r}")
    return host, port_num


def parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    sv = str(value).strip().lower()
    if sv in _TRUE_VALUES:
        return True
    if sv in _FALSE_VALUES:
        return False
    raise ValueError(f"valor booleano inválido: {value!r}")

"""Configuração de logging do exporter.

``configure_logging`` instala o formato texto no logger root e, opcionalmente,
um handler JSONL (uma linha de JSON por evento) para ingestão. Falhas de
escrita do handler de arquivo seguem ``Handler.handleError`` e não propagam.
"""

import json
import logging
import sys
import traceback
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "WARNING", log_file: str | Path | None = None) -> None:
    """Configura o logger root com ``level`` e, se indicado, um arquivo JSONL."""
    numeric = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)
    # urllib3 loga cada conexão em DEBUG
    logging.getLogger("urllib3").setLevel(max(numeric, logging.INFO))

    if log_file:
        _setup_json_file_handler(Path(log_file), numeric)


def _setup_json_file_handler(path: Path, level: int) -> None:
    """Adiciona um ``FileHandler`` JSONL ao logger root e um hook de exceções não tratadas."""
    path.parent.mkdir(parents=True, exist_ok=True)
    jfh = logging.FileHandler(str(path), encoding="utf-8")
    jfh.setLevel(level)
    jfh.setFormatter(JSONFormatter())

    root = logging.getLogger()
    if not _has_existing_file_handler(root, jfh):
        root.addHandler(jfh)
    else:
        jfh.close()

    def _exc_hook(exc_type, exc_value, exc_tb):
        try:
            root.error("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))
        except Exception:
            sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _exc_hook


class JSONFormatter(logging.Formatter):
    """Formata cada registro como um objeto JSON numa linha."""

    def format(self, record):
        obj = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            obj["exc"] = "".join(traceback.format_exception(*record.exc_info))
        return json.dumps(obj, ensure_ascii=False)


def _has_existing_file_handler(root, handler) -> bool:
    base = getattr(handler, "baseFilename", None)
    return any(isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == base for h in root.handlers)


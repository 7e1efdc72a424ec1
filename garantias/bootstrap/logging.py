"""Logs JSONL rotativos de la aplicación de garantías.

`seguimiento.log` recoge todo desde el nivel configurado, `error_operativo.log`
solo los ERROR (transportes caídos, script que no responde, IA fallida) y
`crash.log` los CRITICAL de excepciones no controladas. Cada línea lleva la
operación y el correlation_id activos y, cuando se conocen, un bloque
`garantia` con transporte, acción, IMEI y hoja.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from garantias.core.observability import CAMPOS_TRAZA, traza_actual

MAIN_LOG_NAME = "seguimiento.log"
ERROR_OPERATIVO_LOG_NAME = "error_operativo.log"
CRASH_LOG_NAME = "crash.log"

TAMANO_MAXIMO_BYTES = 1_048_576
COPIAS_ROTADAS = 5

# fichero, nivel mínimo (None = el configurado), solo ese nivel
_DESTINOS: tuple[tuple[str, int | None, bool], ...] = (
    (MAIN_LOG_NAME, None, False),
    (ERROR_OPERATIVO_LOG_NAME, logging.ERROR, True),
    (CRASH_LOG_NAME, logging.CRITICAL, False),
)

# Clientes HTTP y SDKs que a INFO registran cada petición.
_LOGGERS_RUIDOSOS = ("urllib3", "httpx", "httpcore", "anthropic", "google.auth")


class GarantiasJsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        traza = traza_actual()
        extra = dict(getattr(record, "extra", None) or {})
        garantia = dict(traza.campos) if traza is not None else {}
        for campo in CAMPOS_TRAZA:
            if campo in extra:
                garantia[campo] = str(extra.pop(campo))

        event: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "funcion": record.funcName,
            "mensaje": record.getMessage(),
            "operacion": traza.operacion if traza is not None else None,
            "correlation_id": getattr(record, "correlation_id", None)
            or (traza.correlation_id if traza is not None else None),
        }
        if garantia:
            event["garantia"] = garantia
        if extra:
            event["extra"] = extra
        if record.exc_info:
            event["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(event, ensure_ascii=False, default=str)


def _tamano_desde_entorno() -> int:
    try:
        return int(os.environ["GARANTIAS_LOG_MAX_BYTES"])
    except (KeyError, ValueError):
        return TAMANO_MAXIMO_BYTES


def configure_logging(
    log_dir: Path,
    *,
    max_bytes: int | None = None,
    backup_count: int = COPIAS_ROTADAS,
    level: int = logging.INFO,
) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)
    tamano = max_bytes or _tamano_desde_entorno()

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(level)

    formatter = GarantiasJsonFormatter()
    for nombre, nivel, exacto in _DESTINOS:
        handler = RotatingFileHandler(log_dir / nombre, maxBytes=tamano, backupCount=backup_count, encoding="utf-8")
        handler.setLevel(nivel if nivel is not None else level)
        handler.setFormatter(formatter)
        if exacto:
            handler.addFilter(lambda record, nivel=nivel: record.levelno == nivel)
        root_logger.addHandler(handler)

    for nombre in _LOGGERS_RUIDOSOS:
        logging.getLogger(nombre).setLevel(max(level, logging.WARNING))


def log_operational_error(
    logger: logging.Logger,
    message: str,
    *,
    exc: BaseException | None = None,
    extra: dict[str, Any] | None = None,
) -> None:
    """Registra un fallo recuperado; va a seguimiento.log y a error_operativo.log."""
    logger.error(message, exc_info=exc if exc is not None else False, extra={"extra": extra} if extra else None)


def write_crash_log(exc_type: type[BaseException], exc: BaseException, tb: Any, log_dir: Path) -> Path:
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.getLogger("garantias.crash").critical(
        "Excepción no controlada: %s",
        exc_type.__name__,
        exc_info=(exc_type, exc, tb),
        extra={"extra": {"python": sys.version, "cwd": str(Path.cwd())}},
    )
    return log_dir / CRASH_LOG_NAME


def install_exception_hook(log_dir: Path) -> None:
    def _handler(exc_type, exc, tb) -> None:
        try:
            write_crash_log(exc_type, exc, tb, log_dir)
        finally:
            sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = _handler

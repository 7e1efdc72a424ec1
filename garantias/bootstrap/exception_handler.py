from __future__ import annotations

import json
import logging
import traceback
import uuid
from types import TracebackType

from garantias.bootstrap.logging import CRASH_LOG_NAME
from garantias.bootstrap.settings import resolve_log_dir
from garantias.core.observability import get_correlation_id, nuevo_correlation_id

logger = logging.getLogger("garantias.global_exception")


def generar_id_incidente() -> str:
    return f"INC-{uuid.uuid4().hex[:12].upper()}"


def manejar_excepcion_global(
    exc_type: type[BaseException], exc_value: BaseException, exc_traceback: TracebackType
) -> str:
    """Registra una excepción no controlada y devuelve el ID de incidente a mostrar."""
    incident_id = generar_id_incidente()
    correlation_id = get_correlation_id() or nuevo_correlation_id()

    try:
        logger.critical(
            "Excepción no controlada. incident_id=%s",
            incident_id,
            exc_info=(exc_type, exc_value, exc_traceback),
            extra={"correlation_id": correlation_id, "extra": {"incident_id": incident_id}},
        )
    except Exception:  # noqa: BLE001
        crash_file = resolve_log_dir() / CRASH_LOG_NAME
        payload = {
            "incident_id": incident_id,
            "correlation_id": correlation_id,
            "error_type": exc_type.__name__,
            "error_message": str(exc_value),
            "stacktrace": "".join(traceback.format_exception(exc_type, exc_value, exc_traceback)),
        }
        with crash_file.open("a", encoding="utf-8") as handler:
            handler.write(json.dumps(payload, ensure_ascii=False) + "\n")

    return incident_id

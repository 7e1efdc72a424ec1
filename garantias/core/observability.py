"""Trazabilidad de las operaciones sobre garantías.

Cada acción de usuario (carga de la hoja, mutación remota, informe PDF) abre
un `OperationContext` con su propio correlation_id. Dentro de la operación
se pueden vincular datos de la garantía afectada (transporte usado, acción,
IMEI, hoja) para que todas las líneas JSONL emitidas los incluyan.
"""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

CAMPOS_TRAZA = ("transporte", "accion", "imei", "hoja")


@dataclass(frozen=True)
class Traza:
    operacion: str
    correlation_id: str
    campos: dict[str, str] = field(default_factory=dict)


_TRAZA: ContextVar[Traza | None] = ContextVar("traza_garantias", default=None)


def nuevo_correlation_id() -> str:
    return uuid.uuid4().hex


def traza_actual() -> Traza | None:
    return _TRAZA.get()


def get_correlation_id() -> str | None:
    traza = _TRAZA.get()
    return traza.correlation_id if traza is not None else None


def vincular(**campos: object) -> None:
    """Añade datos de la garantía en curso a la traza activa.

    Fuera de una operación no hace nada. Solo se aceptan las claves de
    `CAMPOS_TRAZA`; los valores vacíos se ignoran.
    """
    traza = _TRAZA.get()
    if traza is None:
        return
    nuevos = {
        clave: str(valor)
        for clave, valor in campos.items()
        if clave in CAMPOS_TRAZA and valor not in (None, "")
    }
    if nuevos:
        _TRAZA.set(replace(traza, campos={**traza.campos, **nuevos}))


class OperationContext:
    def __init__(self, operacion: str, **campos: object) -> None:
        self.operacion = operacion
        self.correlation_id = nuevo_correlation_id()
        self._campos = campos
        self._token: Token[Traza | None] | None = None

    def __enter__(self) -> OperationContext:
        self._token = _TRAZA.set(Traza(self.operacion, self.correlation_id))
        vincular(**self._campos)
        return self

    def __exit__(self, exc_type: object, exc: object, exc_tb: object) -> None:
        if self._token is not None:
            _TRAZA.reset(self._token)
            self._token = None


def log_event(
    logger: logging.Logger,
    evento: str,
    payload: dict[str, Any],
    correlation_id: str | None = None,
) -> dict[str, Any]:
    traza = _TRAZA.get()
    event = {
        "event": evento,
        "operacion": traza.operacion if traza is not None else None,
        "correlation_id": correlation_id or get_correlation_id(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "payload": payload,
    }
    logger.info(evento, extra={"correlation_id": event["correlation_id"], "extra": event})
    return event

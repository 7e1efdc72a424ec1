from __future__ import annotations

import json
import logging
from typing import Any

import requests

from garantias.bootstrap.logging import log_operational_error
from garantias.core.observability import OperationContext, log_event
from garantias.domain.models import RegistroGarantia

logger = logging.getLogger(__name__)

RESULTADO_OK = "success"

ACCION_CREAR = "create"
ACCION_ACTUALIZAR = "update"
ACCION_ELIMINAR = "delete"


def serializar_registro(registro: RegistroGarantia) -> dict[str, Any]:
    """Forma de fila que espera el Apps Script (nombres camelCase de la hoja)."""
    return {
        "fecha": registro.fecha,
        "nombreEquipo": registro.nombre_equipo,
        "marcaEquipo": registro.marca_equipo,
        "imeiMalo": registro.imei_malo,
        "tienda": registro.tienda,
        "fechaCambio": registro.fecha_cambio,
        "proveedor": registro.proveedor,
        "imeiEntregado": registro.imei_entregado,
        "falla": registro.falla,
        "cantidad": registro.cantidad,
        "precio": registro.precio,
        "fechaRealizaCambio": registro.fecha_realiza_cambio,
        "equipoProcesado": registro.equipo_procesado,
        "observaciones": registro.observaciones,
    }


def construir_payload(accion: str, registro: RegistroGarantia, imei_original: str | None = None) -> dict[str, Any]:
    if accion == ACCION_ELIMINAR:
        return {"action": ACCION_ELIMINAR, "imeiMalo": registro.imei_malo}
    payload = {"action": accion, **serializar_registro(registro)}
    if accion == ACCION_ACTUALIZAR:
        payload["originalImei"] = imei_original or registro.imei_malo
    return payload


class ScriptMutacionesClient:
    """Envía crear/actualizar/eliminar al endpoint de Apps Script.

    Un único POST por operación, sin reintentos. Cualquier fallo se registra y
    se devuelve como False: quien llama conserva su cambio local.
    """

    def __init__(self, script_url: str, session: requests.Session | None = None) -> None:
        self._script_url = script_url.strip()
        self._session = session or requests.Session()

    @property
    def configurado(self) -> bool:
        return bool(self._script_url)

    def crear(self, registro: RegistroGarantia) -> bool:
        return self._enviar(construir_payload(ACCION_CREAR, registro))

    def actualizar(self, registro: RegistroGarantia, imei_original: str) -> bool:
        return self._enviar(construir_payload(ACCION_ACTUALIZAR, registro, imei_original))

    def eliminar(self, registro: RegistroGarantia) -> bool:
        return self._enviar(construir_payload(ACCION_ELIMINAR, registro))

    def _enviar(self, payload: dict[str, Any]) -> bool:
        accion = payload["action"]
        if not self.configurado:
            logger.warning("URL del script no configurada; %s no se envía", accion)
            return False
        imei = payload.get("originalImei") or payload["imeiMalo"]
        with OperationContext(f"mutacion_{accion}", accion=accion, imei=imei):
            try:
                # text/plain evita el preflight CORS de Apps Script.
                response = self._session.post(
                    self._script_url,
                    data=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
                    headers={"Content-Type": "text/plain;charset=utf-8"},
                )
                resultado = response.json()
            except (requests.RequestException, ValueError) as exc:
                log_operational_error(logger, "Error de conexión con el script de Google", exc=exc)
                return False

            ok = isinstance(resultado, dict) and resultado.get("result") == RESULTADO_OK
            if not ok:
                log_operational_error(logger, "El script respondió sin éxito", extra={"respuesta": resultado})
            log_event(logger, "mutacion_enviada", {"ok": ok})
            return ok

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from garantias.application.normalizacion import marcar_historico, normalizar_filas
from garantias.bootstrap.logging import log_operational_error
from garantias.core.observability import OperationContext, log_event, vincular
from garantias.domain.models import RegistroGarantia
from garantias.domain.ports import TransporteFilasPort

logger = logging.getLogger(__name__)

TIMEOUT_POR_INTENTO_SEGUNDOS = 8.0

MENSAJE_SIN_DATOS = (
    "No se pudieron cargar datos de Google Sheets. Verifique el ID de la hoja, "
    "que esté publicada o compartida, y la URL del script."
)


@dataclass(frozen=True)
class IntentoCarga:
    transporte: str
    ok: bool
    filas: int = 0
    error: str = ""


@dataclass(frozen=True)
class ResultadoCarga:
    registros: list[RegistroGarantia]
    origen: str
    intentos: list[IntentoCarga] = field(default_factory=list)

    @property
    def es_respaldo(self) -> bool:
        return self.origen == "respaldo"


def registro_respaldo(intentos: Sequence[IntentoCarga]) -> RegistroGarantia:
    detalle = ", ".join(f"{intento.transporte}: {intento.error or 'sin filas'}" for intento in intentos)
    return RegistroGarantia(
        id="respaldo-0",
        fecha="",
        nombre_equipo="Sin conexión a la hoja",
        marca_equipo="",
        imei_malo="",
        tienda="",
        falla=MENSAJE_SIN_DATOS,
        observaciones=f"Intentos: {detalle}" if detalle else "No hay orígenes de datos configurados.",
    )


class CargaGarantiasUseCase:
    """Recorre la cadena de transportes en orden y se queda con el primero útil.

    Nunca lanza: si ningún transporte produce registros devuelve un único
    registro de respaldo que explica el problema de configuración.
    """

    def __init__(
        self,
        transportes: Sequence[TransporteFilasPort],
        *,
        transportes_historial: Sequence[TransporteFilasPort] = (),
        timeout: float = TIMEOUT_POR_INTENTO_SEGUNDOS,
    ) -> None:
        self._transportes = list(transportes)
        self._transportes_historial = list(transportes_historial)
        self._timeout = timeout

    def ejecutar(self) -> ResultadoCarga:
        with OperationContext("carga_garantias"):
            registros, origen, intentos = self._recorrer(self._transportes)
            if not registros:
                log_event(logger, "carga_sin_datos", {"intentos": len(intentos)})
                return ResultadoCarga([registro_respaldo(intentos)], "respaldo", intentos)

            historicos = self._cargar_historial()
            log_event(
                logger,
                "carga_completada",
                {"origen": origen, "registros": len(registros), "historicos": len(historicos)},
            )
            return ResultadoCarga(registros + historicos, origen, intentos)

    def _recorrer(
        self, transportes: Sequence[TransporteFilasPort], *, historico: bool = False
    ) -> tuple[list[RegistroGarantia], str, list[IntentoCarga]]:
        intentos: list[IntentoCarga] = []
        for transporte in transportes:
            vincular(transporte=transporte.nombre)
            logger.info("Intentando cargar datos vía %s", transporte.nombre)
            try:
                filas: list[Mapping[str, str]] = list(transporte.obtener_filas(self._timeout))
            except Exception as exc:  # noqa: BLE001
                log_operational_error(
                    logger,
                    f"Fallo en transporte {transporte.nombre}",
                    exc=exc,
                    extra={"historico": historico},
                )
                intentos.append(IntentoCarga(transporte.nombre, ok=False, error=str(exc)))
                continue
            if historico:
                filas = marcar_historico(filas)
            registros = normalizar_filas(filas)
            intentos.append(IntentoCarga(transporte.nombre, ok=bool(registros), filas=len(filas)))
            if registros:
                logger.info(
                    "Transporte %s: %s filas crudas, %s registros", transporte.nombre, len(filas), len(registros)
                )
                return registros, transporte.nombre, intentos
            logger.warning("Transporte %s no produjo registros utilizables", transporte.nombre)
        return [], "", intentos

    def _cargar_historial(self) -> list[RegistroGarantia]:
        if not self._transportes_historial:
            return []
        registros, origen, _ = self._recorrer(self._transportes_historial, historico=True)
        if not registros:
            logger.warning("No se pudo cargar la hoja de historial; se continúa sin ella")
        else:
            logger.info("Historial cargado vía %s: %s registros", origen, len(registros))
        return registros

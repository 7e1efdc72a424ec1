from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

from garantias.application.gestion_garantias import VistaGarantias
from garantias.core.errors import ValidationError
from garantias.core.observability import OperationContext, log_event
from garantias.domain.mensajes_ia import es_respuesta_fallida
from garantias.domain.models import ContenidoInforme, EstadoGarantia, FiltroGarantias
from garantias.domain.ports import AsistenteIAPort, GeneradorPdfPuerto

logger = logging.getLogger(__name__)

TITULO_GENERAL = "Reporte General de Garantías - Tiendas K24"
TITULO_FILTRADO = "Reporte de Garantías (Filtrado)"


@dataclass(frozen=True)
class ResultadoInforme:
    ruta: Path
    filtrado: bool
    con_resumen: bool
    registros: int


def es_informe_filtrado(vista: VistaGarantias, filtro: FiltroGarantias) -> bool:
    return filtro.activo() or len(vista.registros) != vista.total_cargados


def construir_metadatos(filtro: FiltroGarantias, emitido: datetime) -> tuple[str, ...]:
    estado = _etiqueta_estado(filtro.estado)
    return (
        f"Fecha de emisión: {emitido:%d/%m/%Y %H:%M}",
        f"Filtro Tienda: {filtro.tienda or 'Todas'}",
        f"Filtro Estado: {estado.upper()}",
        f"Período: {filtro.fecha_desde or 'Inicio'} a {filtro.fecha_hasta or 'Presente'}",
    )


def construir_contexto_ia(filtro: FiltroGarantias, emitido: datetime) -> str:
    return (
        f"Reporte para tienda: {filtro.tienda or 'Todas'}. "
        f"Estado: {_etiqueta_estado(filtro.estado)}. "
        f"Fecha: {emitido:%d/%m/%Y}"
    )


def construir_nombre_archivo(filtrado: bool, emitido: datetime) -> str:
    marca = int(emitido.timestamp() * 1000)
    return f"reporte_garantias_{'filtrado' if filtrado else 'general'}_{marca}.pdf"


def _etiqueta_estado(estado: str) -> str:
    try:
        return EstadoGarantia(estado).etiqueta
    except ValueError:
        return "Todos"


class GenerarInformeUseCase:
    """Genera el PDF del subconjunto visible, con resumen IA opcional."""

    def __init__(
        self,
        asistente: AsistenteIAPort,
        generador: GeneradorPdfPuerto,
        *,
        logo_loader: Callable[[], bytes | None] | None = None,
        reloj: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._asistente = asistente
        self._generador = generador
        self._logo_loader = logo_loader
        self._reloj = reloj

    def construir_contenido(
        self, vista: VistaGarantias, filtro: FiltroGarantias, *, incluir_resumen: bool = True
    ) -> ContenidoInforme:
        if not vista.registros:
            raise ValidationError("No hay registros para exportar con los filtros actuales.")
        emitido = self._reloj()
        filtrado = es_informe_filtrado(vista, filtro)
        resumen = None
        if incluir_resumen and self._asistente.habilitado:
            texto = self._asistente.generar_resumen(vista.registros, construir_contexto_ia(filtro, emitido))
            if es_respuesta_fallida(texto):
                logger.warning("Resumen IA no disponible; el informe se genera sin análisis")
            else:
                resumen = texto
        return ContenidoInforme(
            titulo=TITULO_FILTRADO if filtrado else TITULO_GENERAL,
            metadatos=construir_metadatos(filtro, emitido),
            registros=tuple(vista.registros),
            estadisticas=vista.estadisticas,
            nombre_archivo=construir_nombre_archivo(filtrado, emitido),
            resumen=resumen,
            logo=self._cargar_logo(),
        )

    def ejecutar(
        self,
        vista: VistaGarantias,
        filtro: FiltroGarantias,
        destino: Path,
        *,
        incluir_resumen: bool = True,
    ) -> ResultadoInforme:
        """`destino` puede ser un directorio (se usa el nombre generado) o un fichero."""
        with OperationContext("generar_informe") as operation:
            contenido = self.construir_contenido(vista, filtro, incluir_resumen=incluir_resumen)
            ruta_destino = destino / contenido.nombre_archivo if destino.is_dir() else destino
            ruta = self._generador.generar_informe(contenido, ruta_destino)
            log_event(
                logger,
                "informe_generado",
                {
                    "ruta": str(ruta),
                    "registros": len(contenido.registros),
                    "con_resumen": contenido.resumen is not None,
                },
                operation.correlation_id,
            )
        return ResultadoInforme(
            ruta=ruta,
            filtrado=contenido.titulo == TITULO_FILTRADO,
            con_resumen=contenido.resumen is not None,
            registros=len(contenido.registros),
        )

    def _cargar_logo(self) -> bytes | None:
        if self._logo_loader is None:
            return None
        try:
            return self._logo_loader()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Logo no disponible: %s", exc)
            return None

from __future__ import annotations

import logging
import traceback
from pathlib import Path

from PySide6.QtCore import QObject, Signal, Slot

from garantias.application.carga_garantias import CargaGarantiasUseCase
from garantias.application.gestion_garantias import GestionGarantias, MutacionPendiente, VistaGarantias
from garantias.application.informe import GenerarInformeUseCase
from garantias.domain.models import FiltroGarantias, RegistroGarantia
from garantias.domain.ports import AsistenteIAPort

logger = logging.getLogger(__name__)


class CargaWorker(QObject):
    """Recorre la cadena de lectura; la colección se reemplaza al volver al hilo de la UI."""

    finished = Signal(object)
    failed = Signal(object)

    def __init__(self, carga: CargaGarantiasUseCase) -> None:
        super().__init__()
        self._carga = carga

    @Slot()
    def run(self) -> None:
        try:
            resultado = self._carga.ejecutar()
        except Exception as exc:
            logger.exception("Error durante la carga de garantías")
            self.failed.emit({"error": exc, "details": traceback.format_exc()})
            return
        self.finished.emit(resultado)


class MutacionWorker(QObject):
    finished = Signal(object)
    failed = Signal(object)

    def __init__(self, gestion: GestionGarantias, pendiente: MutacionPendiente) -> None:
        super().__init__()
        self._gestion = gestion
        self._pendiente = pendiente

    @Slot()
    def run(self) -> None:
        try:
            resultado = self._gestion.enviar(self._pendiente)
        except Exception as exc:
            logger.exception("Error enviando la mutación '%s'", self._pendiente.accion)
            self.failed.emit({"error": exc, "details": traceback.format_exc()})
            return
        self.finished.emit(resultado)


class InformeWorker(QObject):
    finished = Signal(object)
    failed = Signal(object)

    def __init__(
        self,
        informe: GenerarInformeUseCase,
        vista: VistaGarantias,
        filtro: FiltroGarantias,
        destino: Path,
    ) -> None:
        super().__init__()
        self._informe = informe
        self._vista = vista
        self._filtro = filtro
        self._destino = destino

    @Slot()
    def run(self) -> None:
        try:
            resultado = self._informe.ejecutar(self._vista, self._filtro, self._destino)
        except Exception as exc:
            logger.exception("Error generando el informe PDF")
            self.failed.emit({"error": exc, "details": traceback.format_exc()})
            return
        self.finished.emit(resultado)


class PreguntaWorker(QObject):
    finished = Signal(str)

    def __init__(self, asistente: AsistenteIAPort, registros: list[RegistroGarantia], pregunta: str) -> None:
        super().__init__()
        self._asistente = asistente
        self._registros = registros
        self._pregunta = pregunta

    @Slot()
    def run(self) -> None:
        self.finished.emit(self._asistente.responder_pregunta(self._registros, self._pregunta))

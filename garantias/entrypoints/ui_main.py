from __future__ import annotations

import logging
import sys
from types import TracebackType

from garantias.bootstrap.container import AppContainer, build_container
from garantias.bootstrap.exception_handler import manejar_excepcion_global

logger = logging.getLogger(__name__)


def construir_mensaje_error_ui(incident_id: str) -> str:
    return f"Ha ocurrido un error inesperado.\nID de incidente: {incident_id}"


def manejar_excepcion_ui(
    exc_type: type[BaseException],
    exc_value: BaseException,
    exc_traceback: TracebackType,
) -> str:
    from PySide6.QtWidgets import QApplication, QMessageBox

    incident_id = manejar_excepcion_global(exc_type, exc_value, exc_traceback)
    if QApplication.instance() is None:
        return incident_id
    try:
        QMessageBox.critical(None, "Error inesperado", construir_mensaje_error_ui(incident_id))
    except Exception:  # noqa: BLE001
        logger.exception("No se pudo mostrar el diálogo de error (incident_id=%s)", incident_id)
    return incident_id


def run_ui(container: AppContainer | None = None) -> int:
    from PySide6.QtWidgets import QApplication

    from garantias.ui.main_window import MainWindow
    from garantias.ui.style import build_stylesheet

    resolved_container = container or build_container()
    app = QApplication.instance() or QApplication([])
    app.setStyleSheet(build_stylesheet())

    try:
        window = MainWindow(
            resolved_container.gestion,
            resolved_container.informe,
            resolved_container.asistente,
        )
        window.show()
        window.cargar_datos()
        return app.exec()
    except Exception:  # noqa: BLE001
        exc_type, exc_value, exc_traceback = sys.exc_info()
        if exc_type is not None and exc_value is not None and exc_traceback is not None:
            manejar_excepcion_ui(exc_type, exc_value, exc_traceback)
        return 2

from __future__ import annotations

import threading
import time

import pytest

pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtWidgets import QMessageBox

from garantias.application.carga_garantias import CargaGarantiasUseCase
from garantias.application.coleccion import ColeccionGarantias
from garantias.application.gestion_garantias import GestionGarantias
from garantias.application.informe import GenerarInformeUseCase
from garantias.infrastructure.asistente_ia import AsistenteIA
from garantias.infrastructure.pdf.generador_pdf_reportlab import GeneradorPdfReportlab
from garantias.ui.main_window import MainWindow


class _MutacionesBloqueantes:
    """Script remoto que no responde hasta que el test lo libera."""

    configurado = True

    def __init__(self, window_ref: dict) -> None:
        self._window_ref = window_ref
        self.liberar = threading.Event()
        self.observado: dict[str, object] = {}

    def _esperar(self) -> bool:
        window = self._window_ref["window"]
        self.observado = {
            "filas_en_tabla": window.table_model.rowCount(),
            "hilo_principal": threading.current_thread() is threading.main_thread(),
        }
        self.liberar.wait(5)
        return True

    def crear(self, registro) -> bool:
        return self._esperar()

    def actualizar(self, registro, imei_original: str) -> bool:
        return self._esperar()

    def eliminar(self, registro) -> bool:
        return self._esperar()


class _TransporteBloqueante:
    nombre = "script"

    def __init__(self, filas: list[dict[str, str]]) -> None:
        self._filas = filas
        self.liberar = threading.Event()

    def obtener_filas(self, timeout: float) -> list[dict[str, str]]:
        self.liberar.wait(5)
        return list(self._filas)


class _ColeccionConHilo(ColeccionGarantias):
    def __init__(self, registros=()) -> None:
        super().__init__(registros)
        self.hilos_reemplazo: list[bool] = []

    def reemplazar(self, registros) -> None:
        self.hilos_reemplazo.append(threading.current_thread() is threading.main_thread())
        super().reemplazar(registros)


def _esperar(qapp, condicion, segundos: float = 5.0) -> None:
    limite = time.monotonic() + segundos
    while not condicion() and time.monotonic() < limite:
        qapp.processEvents()
        time.sleep(0.01)
    assert condicion()


def _window(gestion: GestionGarantias) -> MainWindow:
    asistente = AsistenteIA("", "modelo-test")
    return MainWindow(gestion, GenerarInformeUseCase(asistente, GeneradorPdfReportlab()), asistente)


@pytest.fixture
def mensajes(monkeypatch) -> list[tuple[str, str]]:
    registrados: list[tuple[str, str]] = []
    monkeypatch.setattr(QMessageBox, "question", lambda *args, **kwargs: QMessageBox.Yes)
    monkeypatch.setattr(QMessageBox, "information", lambda _p, _t, texto, *a: registrados.append(("info", texto)))
    monkeypatch.setattr(QMessageBox, "warning", lambda _p, _t, texto, *a: registrados.append(("warning", texto)))
    return registrados


def test_eliminar_refresca_antes_del_envio_y_no_bloquea_la_ui(qapp, registro_factory, mensajes) -> None:
    window_ref: dict = {}
    mutaciones = _MutacionesBloqueantes(window_ref)
    registros = [registro_factory(), registro_factory()]
    gestion = GestionGarantias(CargaGarantiasUseCase([]), mutaciones, ColeccionGarantias(registros))
    window = _window(gestion)
    window_ref["window"] = window
    window._refresh()
    window.table_view.selectRow(0)

    window._on_eliminar()

    assert window.table_model.rowCount() == 1
    assert not window.nuevo_button.isEnabled()
    assert not window.eliminar_button.isEnabled()
    _esperar(qapp, lambda: bool(mutaciones.observado))
    assert mutaciones.observado == {"filas_en_tabla": 1, "hilo_principal": False}

    mutaciones.liberar.set()
    _esperar(qapp, lambda: window._mut_thread is None and bool(mensajes))

    assert mensajes == [("info", "Registro eliminado correctamente de Google Sheets.")]
    assert window.eliminar_button.isEnabled()


def test_carga_reemplaza_la_coleccion_en_el_hilo_de_la_ui(qapp, registro_factory, fake_mutaciones, mensajes) -> None:
    transporte = _TransporteBloqueante(
        [
            {"FECHA": "2024-01-01", "NOMBRE DEL EQUIPO": "Moto G", "TIENDA": "K24 Sur"},
            {"FECHA": "2024-01-02", "NOMBRE DEL EQUIPO": "iPhone 13", "TIENDA": "K24 Norte"},
        ]
    )
    coleccion = _ColeccionConHilo([registro_factory()])
    gestion = GestionGarantias(CargaGarantiasUseCase([transporte]), fake_mutaciones(), coleccion)
    window = _window(gestion)
    window._show_banner("No se pudo conectar con la hoja de cálculo.")

    window.cargar_datos()

    assert not window.nuevo_button.isEnabled()
    assert not window.editar_button.isEnabled()
    window._on_nuevo()
    assert len(coleccion) == 1

    transporte.liberar.set()
    _esperar(qapp, lambda: window._load_thread is None and bool(coleccion.hilos_reemplazo))

    assert coleccion.hilos_reemplazo == [True]
    assert window.table_model.rowCount() == 2
    assert window.nuevo_button.isEnabled()
    assert window.banner_label.isHidden()
    assert window.statusBar().currentMessage().startswith("Aviso anterior resuelto")

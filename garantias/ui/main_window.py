from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtCore import QThread, Qt
from PySide6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QComboBox,
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QTableView,
    QVBoxLayout,
    QWidget,
)

from garantias.application.carga_garantias import ResultadoCarga
from garantias.application.gestion_garantias import GestionGarantias, MutacionPendiente, ResultadoMutacion
from garantias.application.informe import GenerarInformeUseCase, ResultadoInforme
from garantias.core.errors import ValidationError
from garantias.domain.models import EstadoGarantia, RegistroGarantia
from garantias.domain.ports import AsistenteIAPort
from garantias.ui.garantia_dialog import GarantiaDialog
from garantias.ui.ia_dialog import ConsultaIADialog
from garantias.ui.models_qt import GarantiasTableModel, formatear_precio
from garantias.ui.workers import CargaWorker, InformeWorker, MutacionWorker

logger = logging.getLogger(__name__)

TITULO_VENTANA = "Control de Garantías - Tiendas K24"


def _card(titulo: str) -> tuple[QFrame, QLabel]:
    frame = QFrame()
    frame.setProperty("role", "card")
    layout = QVBoxLayout(frame)
    title_label = QLabel(titulo)
    title_label.setProperty("role", "cardTitle")
    value_label = QLabel("-")
    value_label.setProperty("role", "cardValue")
    layout.addWidget(title_label)
    layout.addWidget(value_label)
    return frame, value_label


class MainWindow(QMainWindow):
    def __init__(
        self,
        gestion: GestionGarantias,
        informe: GenerarInformeUseCase,
        asistente: AsistenteIAPort,
    ) -> None:
        super().__init__()
        self._gestion = gestion
        self._informe = informe
        self._asistente = asistente
        self._load_thread: QThread | None = None
        self._load_worker: CargaWorker | None = None
        self._pdf_thread: QThread | None = None
        self._pdf_worker: InformeWorker | None = None
        self._mut_thread: QThread | None = None
        self._mut_worker: MutacionWorker | None = None
        self._tareas: set[str] = set()
        self._syncing_filters = False
        self.setWindowTitle(TITULO_VENTANA)
        self.resize(1280, 800)
        self._build_ui()

    def _build_ui(self) -> None:
        central = QWidget()
        layout = QVBoxLayout(central)

        header = QHBoxLayout()
        title = QLabel(TITULO_VENTANA)
        title.setStyleSheet("font-size: 18px; font-weight: bold;")
        header.addWidget(title)
        header.addStretch(1)
        self.historial_check = QCheckBox("Historial")
        self.historial_check.toggled.connect(self._on_historial_toggled)
        header.addWidget(self.historial_check)
        self.recargar_button = QPushButton("Recargar")
        self.recargar_button.clicked.connect(self.cargar_datos)
        header.addWidget(self.recargar_button)
        self.ia_button = QPushButton("Consultar IA")
        self.ia_button.clicked.connect(self._on_consultar_ia)
        header.addWidget(self.ia_button)
        self.pdf_button = QPushButton("Exportar PDF")
        self.pdf_button.clicked.connect(self._on_exportar_pdf)
        header.addWidget(self.pdf_button)
        self.nuevo_button = QPushButton("Nueva garantía")
        self.nuevo_button.setProperty("variant", "primary")
        self.nuevo_button.clicked.connect(self._on_nuevo)
        header.addWidget(self.nuevo_button)
        layout.addLayout(header)

        self.banner_label = QLabel()
        self.banner_label.setProperty("role", "banner")
        self.banner_label.setWordWrap(True)
        self.banner_label.setVisible(False)
        layout.addWidget(self.banner_label)

        cards = QHBoxLayout()
        total_card, self.total_value = _card("Total Garantías")
        valor_card, self.valor_value = _card("Valor Total")
        tienda_card, self.tienda_value = _card("Tienda Crítica")
        marca_card, self.marca_value = _card("Marca con más fallas")
        for card in (total_card, valor_card, tienda_card, marca_card):
            cards.addWidget(card)
        layout.addLayout(cards)

        layout.addLayout(self._build_filter_bar())

        self.table_model = GarantiasTableModel()
        self.table_view = QTableView()
        self.table_view.setModel(self.table_model)
        self.table_view.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table_view.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table_view.setWordWrap(True)
        self.table_view.horizontalHeader().setSectionResizeMode(QHeaderView.Interactive)
        self.table_view.horizontalHeader().setStretchLastSection(True)
        self.table_view.verticalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        self.table_view.doubleClicked.connect(lambda _index: self._on_editar())
        layout.addWidget(self.table_view, 1)

        footer = QHBoxLayout()
        self.footer_label = QLabel()
        footer.addWidget(self.footer_label)
        footer.addStretch(1)
        self.editar_button = QPushButton("Editar")
        self.editar_button.clicked.connect(self._on_editar)
        footer.addWidget(self.editar_button)
        self.eliminar_button = QPushButton("Eliminar")
        self.eliminar_button.setProperty("variant", "danger")
        self.eliminar_button.clicked.connect(self._on_eliminar)
        footer.addWidget(self.eliminar_button)
        layout.addLayout(footer)

        self.setCentralWidget(central)

    def _build_filter_bar(self) -> QHBoxLayout:
        bar = QHBoxLayout()
        self.desde_input = QLineEdit()
        self.desde_input.setPlaceholderText("Desde AAAA-MM-DD")
        self.hasta_input = QLineEdit()
        self.hasta_input.setPlaceholderText("Hasta AAAA-MM-DD")
        self.tienda_combo = QComboBox()
        self.tienda_combo.addItem("Todas las tiendas", "")
        self.estado_combo = QComboBox()
        self.estado_combo.addItem("Todos los estados", "")
        for estado in EstadoGarantia:
            self.estado_combo.addItem(estado.etiqueta, estado.value)
        self.busqueda_input = QLineEdit()
        self.busqueda_input.setPlaceholderText("Buscar equipo, marca o IMEI")
        self.limpiar_button = QPushButton("Limpiar")

        self.desde_input.editingFinished.connect(self._on_filtros_changed)
        self.hasta_input.editingFinished.connect(self._on_filtros_changed)
        self.tienda_combo.currentIndexChanged.connect(self._on_filtros_changed)
        self.estado_combo.currentIndexChanged.connect(self._on_filtros_changed)
        self.busqueda_input.textChanged.connect(self._on_filtros_changed)
        self.limpiar_button.clicked.connect(self._on_limpiar)

        for widget in (self.desde_input, self.hasta_input, self.tienda_combo, self.estado_combo):
            bar.addWidget(widget)
        bar.addWidget(self.busqueda_input, 1)
        bar.addWidget(self.limpiar_button)
        return bar

    def cargar_datos(self) -> None:
        if self._load_thread is not None or self._tareas:
            return
        self._set_busy("carga", True, "Cargando datos...")
        self._load_thread = QThread()
        self._load_worker = CargaWorker(self._gestion.carga)
        self._load_worker.moveToThread(self._load_thread)
        self._load_thread.started.connect(self._load_worker.run)
        self._load_worker.finished.connect(self._on_carga_finished)
        self._load_worker.failed.connect(self._on_carga_failed)
        self._load_worker.finished.connect(self._load_thread.quit)
        self._load_worker.failed.connect(self._load_thread.quit)
        self._load_worker.finished.connect(self._load_worker.deleteLater)
        self._load_thread.finished.connect(self._load_thread.deleteLater)
        self._load_thread.finished.connect(self._on_load_thread_done)
        self._load_thread.start()

    def _on_load_thread_done(self) -> None:
        self._load_thread = None
        self._load_worker = None

    def _on_carga_finished(self, resultado: ResultadoCarga) -> None:
        self._gestion.aplicar_carga(resultado)
        self._set_busy("carga", False)
        if resultado.es_respaldo:
            self._show_banner("No se pudo conectar con la hoja de cálculo. Se muestra un registro de respaldo.")
        elif not self._gestion.escritura_habilitada:
            self._show_banner("Sin URL de script: los cambios solo se guardarán en esta sesión.")
        elif not self.banner_label.isHidden():
            self.banner_label.setVisible(False)
            self.statusBar().showMessage(f"Aviso anterior resuelto: {self.banner_label.text()}")
        logger.info("Datos cargados desde '%s' (%s registros)", resultado.origen, len(resultado.registros))
        self._refresh()

    def _on_carga_failed(self, payload: object) -> None:
        self._set_busy("carga", False)
        details = payload.get("details") if isinstance(payload, dict) else None
        if details:
            logger.error("Detalle técnico de carga: %s", details)
        QMessageBox.critical(self, "Error de carga", "No se pudieron cargar los datos. Revise los logs.")

    def _on_filtros_changed(self, *_args: object) -> None:
        if self._syncing_filters:
            return
        self._gestion.actualizar_filtro(
            fecha_desde=self.desde_input.text().strip(),
            fecha_hasta=self.hasta_input.text().strip(),
            tienda=self.tienda_combo.currentData() or "",
            estado=self.estado_combo.currentData() or "",
            busqueda=self.busqueda_input.text(),
        )
        self._refresh()

    def _on_limpiar(self) -> None:
        self._gestion.limpiar_filtros()
        self._syncing_filters = True
        try:
            self.desde_input.clear()
            self.hasta_input.clear()
            self.tienda_combo.setCurrentIndex(0)
            self.estado_combo.setCurrentIndex(0)
            self.busqueda_input.clear()
        finally:
            self._syncing_filters = False
        self._refresh()

    def _on_historial_toggled(self, checked: bool) -> None:
        self._gestion.alternar_historial(checked)
        self._refresh()

    def _refresh(self) -> None:
        vista = self._gestion.vista()
        self.table_model.set_registros(vista.registros)
        self._sync_tiendas(vista.tiendas)
        stats = vista.estadisticas
        self.total_value.setText(str(stats.total_registros))
        self.valor_value.setText(formatear_precio(stats.valor_total))
        self.tienda_value.setText(stats.tienda_top or "N/A")
        self.marca_value.setText(stats.marca_top or "N/A")
        self.footer_label.setText(f"Mostrando {len(vista.registros)} de {vista.total_cargados} registros")
        self.pdf_button.setEnabled(bool(vista.registros) and self._pdf_thread is None)

    def _sync_tiendas(self, tiendas: list[str]) -> None:
        actual = self.tienda_combo.currentData() or ""
        existentes = [self.tienda_combo.itemData(i) for i in range(1, self.tienda_combo.count())]
        if existentes == tiendas:
            return
        self._syncing_filters = True
        try:
            self.tienda_combo.clear()
            self.tienda_combo.addItem("Todas las tiendas", "")
            for tienda in tiendas:
                self.tienda_combo.addItem(tienda, tienda)
            index = self.tienda_combo.findData(actual)
            self.tienda_combo.setCurrentIndex(max(index, 0))
        finally:
            self._syncing_filters = False

    def _selected_registro(self) -> RegistroGarantia | None:
        indexes = self.table_view.selectionModel().selectedRows()
        if not indexes:
            return None
        return self.table_model.registro_at(indexes[0].row())

    def _on_nuevo(self) -> None:
        if self._tareas:
            return
        dialog = GarantiaDialog(self._gestion.vista().tiendas, self)
        if not dialog.exec() or dialog.resultado is None:
            return
        try:
            pendiente = self._gestion.preparar_alta(dialog.resultado)
        except ValidationError as exc:
            QMessageBox.warning(self, "Campos obligatorios", str(exc))
            return
        self._enviar_mutacion(pendiente)

    def _on_editar(self) -> None:
        if self._tareas:
            return
        registro = self._selected_registro()
        if registro is None:
            QMessageBox.information(self, "Editar", "Seleccione un registro de la tabla.")
            return
        dialog = GarantiaDialog(self._gestion.vista().tiendas, self, registro=registro)
        if not dialog.exec() or dialog.resultado is None:
            return
        self._enviar_mutacion(self._gestion.preparar_edicion(dialog.resultado))

    def _on_eliminar(self) -> None:
        if self._tareas:
            return
        registro = self._selected_registro()
        if registro is None:
            QMessageBox.information(self, "Eliminar", "Seleccione un registro de la tabla.")
            return
        respuesta = QMessageBox.question(
            self,
            "Eliminar registro",
            f"¿Seguro que desea eliminar el registro con IMEI {registro.imei_malo}?",
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        if respuesta != QMessageBox.Yes:
            return
        self._enviar_mutacion(self._gestion.preparar_baja(registro))

    def _enviar_mutacion(self, pendiente: MutacionPendiente) -> None:
        self._refresh()
        self._set_busy("mutacion", True, "Guardando cambios en Google Sheets...")
        self._mut_thread = QThread()
        self._mut_worker = MutacionWorker(self._gestion, pendiente)
        self._mut_worker.moveToThread(self._mut_thread)
        self._mut_thread.started.connect(self._mut_worker.run)
        self._mut_worker.finished.connect(self._on_mutacion_finished)
        self._mut_worker.failed.connect(self._on_mutacion_failed)
        self._mut_worker.finished.connect(self._mut_thread.quit)
        self._mut_worker.failed.connect(self._mut_thread.quit)
        self._mut_worker.finished.connect(self._mut_worker.deleteLater)
        self._mut_thread.finished.connect(self._mut_thread.deleteLater)
        self._mut_thread.finished.connect(self._on_mut_thread_done)
        self._mut_thread.start()

    def _on_mut_thread_done(self) -> None:
        self._mut_thread = None
        self._mut_worker = None

    def _on_mutacion_finished(self, resultado: ResultadoMutacion) -> None:
        self._set_busy("mutacion", False)
        if resultado.remoto_ok:
            QMessageBox.information(self, "Garantías", resultado.mensaje)
            return
        self.statusBar().showMessage(resultado.mensaje)
        QMessageBox.warning(self, "Garantías", resultado.mensaje)

    def _on_mutacion_failed(self, payload: object) -> None:
        self._set_busy("mutacion", False)
        details = payload.get("details") if isinstance(payload, dict) else None
        if details:
            logger.error("Detalle técnico de mutación: %s", details)
        QMessageBox.warning(self, "Garantías", "El cambio se aplicó localmente, pero no se pudo enviar.")

    def _on_exportar_pdf(self) -> None:
        vista = self._gestion.vista()
        if not vista.registros:
            QMessageBox.information(self, "Exportar PDF", "No hay registros para exportar.")
            return
        directorio = QFileDialog.getExistingDirectory(self, "Carpeta de destino del PDF", str(Path.home()))
        if not directorio:
            return
        self.pdf_button.setEnabled(False)
        self._set_busy("pdf", True, "Generando PDF...")
        self._pdf_thread = QThread()
        self._pdf_worker = InformeWorker(self._informe, vista, self._gestion.filtro, Path(directorio))
        self._pdf_worker.moveToThread(self._pdf_thread)
        self._pdf_thread.started.connect(self._pdf_worker.run)
        self._pdf_worker.finished.connect(self._on_pdf_finished)
        self._pdf_worker.failed.connect(self._on_pdf_failed)
        self._pdf_worker.finished.connect(self._pdf_thread.quit)
        self._pdf_worker.failed.connect(self._pdf_thread.quit)
        self._pdf_worker.finished.connect(self._pdf_worker.deleteLater)
        self._pdf_thread.finished.connect(self._pdf_thread.deleteLater)
        self._pdf_thread.finished.connect(self._on_pdf_thread_done)
        self._pdf_thread.start()

    def _on_pdf_thread_done(self) -> None:
        self._pdf_thread = None
        self._pdf_worker = None
        self.pdf_button.setEnabled(bool(self._gestion.vista().registros))

    def _on_pdf_finished(self, resultado: ResultadoInforme) -> None:
        self._set_busy("pdf", False)
        detalle = "" if resultado.con_resumen else "\n(Sin análisis IA)"
        QMessageBox.information(self, "PDF generado", f"Informe guardado en:\n{resultado.ruta}{detalle}")

    def _on_pdf_failed(self, payload: object) -> None:
        self._set_busy("pdf", False)
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, ValidationError):
            QMessageBox.warning(self, "Exportar PDF", str(error))
            return
        QMessageBox.critical(self, "Exportar PDF", "No se pudo generar el PDF. Revise los logs.")

    def _on_consultar_ia(self) -> None:
        dialog = ConsultaIADialog(self._asistente, self._gestion.vista().registros, self)
        dialog.exec()

    def _set_busy(self, tarea: str, busy: bool, mensaje: str = "") -> None:
        if busy:
            self._tareas.add(tarea)
        else:
            self._tareas.discard(tarea)
        libre = not self._tareas
        # Recarga y mutaciones comparten la colección: nunca en paralelo.
        for boton in (self.recargar_button, self.nuevo_button, self.editar_button, self.eliminar_button):
            boton.setEnabled(libre)
        if busy:
            self.statusBar().showMessage(mensaje)
            self.setCursor(Qt.WaitCursor)
        elif libre:
            self.statusBar().clearMessage()
            self.unsetCursor()

    def _show_banner(self, texto: str) -> None:
        self.banner_label.setText(texto)
        self.banner_label.setVisible(True)

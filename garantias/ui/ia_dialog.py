from __future__ import annotations

from PySide6.QtCore import QThread
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from garantias.domain.models import RegistroGarantia
from garantias.domain.ports import AsistenteIAPort
from garantias.ui.workers import PreguntaWorker


class ConsultaIADialog(QDialog):
    def __init__(
        self,
        asistente: AsistenteIAPort,
        registros: list[RegistroGarantia],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._asistente = asistente
        self._registros = registros
        self._thread: QThread | None = None
        self._worker: PreguntaWorker | None = None
        self.setWindowTitle("Consultar IA")
        self.setMinimumSize(520, 360)
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        info = QLabel(f"Pregunta sobre los {len(self._registros)} registros visibles.")
        layout.addWidget(info)

        fila = QHBoxLayout()
        self.pregunta_input = QLineEdit()
        self.pregunta_input.setPlaceholderText("Ej.: ¿Qué marca falla más en K24 Norte?")
        self.pregunta_input.returnPressed.connect(self._on_preguntar)
        self.preguntar_button = QPushButton("Preguntar")
        self.preguntar_button.setProperty("variant", "primary")
        self.preguntar_button.clicked.connect(self._on_preguntar)
        fila.addWidget(self.pregunta_input, 1)
        fila.addWidget(self.preguntar_button)
        layout.addLayout(fila)

        self.respuesta_output = QPlainTextEdit()
        self.respuesta_output.setReadOnly(True)
        layout.addWidget(self.respuesta_output, 1)

        if not self._asistente.habilitado:
            self.respuesta_output.setPlainText("Configure ANTHROPIC_API_KEY para usar el asistente.")
            self.preguntar_button.setEnabled(False)

    def _on_preguntar(self) -> None:
        pregunta = self.pregunta_input.text().strip()
        if not pregunta or self._thread is not None:
            return
        self.preguntar_button.setEnabled(False)
        self.respuesta_output.setPlainText("Consultando...")
        self._thread = QThread()
        self._worker = PreguntaWorker(self._asistente, self._registros, pregunta)
        self._worker.moveToThread(self._thread)
        self._thread.started.connect(self._worker.run)
        self._worker.finished.connect(self._on_respuesta)
        self._worker.finished.connect(self._thread.quit)
        self._worker.finished.connect(self._worker.deleteLater)
        self._thread.finished.connect(self._thread.deleteLater)
        self._thread.start()

    def _on_respuesta(self, texto: str) -> None:
        self.respuesta_output.setPlainText(texto)
        self.preguntar_button.setEnabled(True)
        self._thread = None
        self._worker = None

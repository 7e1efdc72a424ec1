from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QLineEdit,
    QMessageBox,
    QPlainTextEdit,
    QSpinBox,
    QWidget,
)

from garantias.application.gestion_garantias import nuevo_registro, validar_registro
from garantias.domain.models import RegistroGarantia

PRECIO_MAXIMO = 1_000_000.0


class GarantiaDialog(QDialog):
    """Alta y edición de un registro.

    En modo edición se muestran además los campos del cambio (fecha, IMEI
    entregado y fecha en que se realiza) y no se exige completitud.
    """

    def __init__(
        self,
        tiendas: Sequence[str],
        parent: QWidget | None = None,
        registro: RegistroGarantia | None = None,
    ) -> None:
        super().__init__(parent)
        self._edicion = registro is not None
        self._base = registro or nuevo_registro(tiendas)
        self._resultado: RegistroGarantia | None = None
        self.setWindowTitle("Editar garantía" if self._edicion else "Nueva garantía")
        self.setMinimumWidth(480)
        self._build_ui(tiendas)
        self._load_registro(self._base)

    @property
    def resultado(self) -> RegistroGarantia | None:
        return self._resultado

    def _build_ui(self, tiendas: Sequence[str]) -> None:
        layout = QFormLayout(self)

        self.fecha_input = QLineEdit()
        self.fecha_input.setPlaceholderText("AAAA-MM-DD")
        self.tienda_input = QComboBox()
        self.tienda_input.setEditable(True)
        self.tienda_input.addItems(list(tiendas))
        self.nombre_input = QLineEdit()
        self.marca_input = QLineEdit()
        self.imei_malo_input = QLineEdit()
        self.proveedor_input = QLineEdit()
        self.falla_input = QLineEdit()
        self.cantidad_input = QSpinBox()
        self.cantidad_input.setRange(1, 999)
        self.precio_input = QDoubleSpinBox()
        self.precio_input.setRange(0.0, PRECIO_MAXIMO)
        self.precio_input.setDecimals(2)
        self.precio_input.setPrefix("$ ")
        self.observaciones_input = QPlainTextEdit()
        self.observaciones_input.setFixedHeight(70)
        self.procesado_check = QCheckBox("Equipo procesado (ya regresó del proveedor)")

        layout.addRow("Fecha de ingreso", self.fecha_input)
        layout.addRow("Tienda", self.tienda_input)
        layout.addRow("Nombre del equipo", self.nombre_input)
        layout.addRow("Marca", self.marca_input)
        layout.addRow("IMEI malo (ingreso)", self.imei_malo_input)
        layout.addRow("Proveedor", self.proveedor_input)
        layout.addRow("Falla reportada", self.falla_input)
        layout.addRow("Cantidad", self.cantidad_input)
        layout.addRow("Precio", self.precio_input)

        self.fecha_cambio_input = QLineEdit()
        self.imei_entregado_input = QLineEdit()
        self.fecha_realiza_cambio_input = QLineEdit()
        if self._edicion:
            layout.addRow("Fecha de cambio", self.fecha_cambio_input)
            layout.addRow("IMEI entregado", self.imei_entregado_input)
            layout.addRow("Fecha en que se realiza", self.fecha_realiza_cambio_input)

        layout.addRow("Observaciones", self.observaciones_input)
        layout.addRow("", self.procesado_check)

        buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    def _load_registro(self, registro: RegistroGarantia) -> None:
        self.fecha_input.setText(registro.fecha)
        self.tienda_input.setCurrentText(registro.tienda)
        self.nombre_input.setText(registro.nombre_equipo)
        self.marca_input.setText(registro.marca_equipo)
        self.imei_malo_input.setText(registro.imei_malo)
        self.proveedor_input.setText(registro.proveedor)
        self.falla_input.setText(registro.falla)
        self.cantidad_input.setValue(max(1, registro.cantidad))
        self.precio_input.setValue(min(registro.precio, PRECIO_MAXIMO))
        self.fecha_cambio_input.setText(registro.fecha_cambio)
        self.imei_entregado_input.setText(registro.imei_entregado)
        self.fecha_realiza_cambio_input.setText(registro.fecha_realiza_cambio)
        self.observaciones_input.setPlainText(registro.observaciones)
        self.procesado_check.setChecked(registro.equipo_procesado)

    def leer_registro(self) -> RegistroGarantia:
        return replace(
            self._base,
            fecha=self.fecha_input.text().strip(),
            tienda=self.tienda_input.currentText().strip(),
            nombre_equipo=self.nombre_input.text().strip(),
            marca_equipo=self.marca_input.text().strip(),
            imei_malo=self.imei_malo_input.text().strip(),
            proveedor=self.proveedor_input.text().strip(),
            falla=self.falla_input.text().strip(),
            cantidad=self.cantidad_input.value(),
            precio=self.precio_input.value(),
            fecha_cambio=self.fecha_cambio_input.text().strip(),
            imei_entregado=self.imei_entregado_input.text().strip(),
            fecha_realiza_cambio=self.fecha_realiza_cambio_input.text().strip(),
            observaciones=self.observaciones_input.toPlainText().strip(),
            equipo_procesado=self.procesado_check.isChecked(),
        )

    def _on_accept(self) -> None:
        registro = self.leer_registro()
        if not self._edicion:
            faltantes = validar_registro(registro)
            if faltantes:
                QMessageBox.warning(self, "Campos obligatorios", "Complete: " + ", ".join(faltantes))
                return
        self._resultado = registro
        self.accept()

from __future__ import annotations

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PySide6.QtGui import QColor

from garantias.domain.models import RegistroGarantia
from garantias.ui.style import COLORS, ESTADO_COLORS

REGISTRO_ROLE = Qt.UserRole + 1

CABECERAS = [
    "Fecha",
    "Equipo / IMEI",
    "Tienda",
    "Proveedor",
    "Falla",
    "Precio",
    "Estado",
    "Observaciones",
]


def formatear_precio(valor: float) -> str:
    return f"${valor:,.2f}"


class GarantiasTableModel(QAbstractTableModel):
    def __init__(self, registros: list[RegistroGarantia] | None = None) -> None:
        super().__init__()
        self._registros = registros or []

    def rowCount(self, parent: QModelIndex | None = None) -> int:
        return len(self._registros)

    def columnCount(self, parent: QModelIndex | None = None) -> int:
        return len(CABECERAS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):
        if not index.isValid():
            return None
        registro = self._registros[index.row()]
        if role == REGISTRO_ROLE:
            return registro
        if role == Qt.DisplayRole:
            return self._texto(registro, index.column())
        if role == Qt.ToolTipRole:
            return self._tooltip(registro, index.column())
        if role == Qt.ForegroundRole and index.column() == 6:
            return QColor(ESTADO_COLORS.get(registro.estado.value, COLORS["text_primary"]))
        if role == Qt.TextAlignmentRole and index.column() == 5:
            return Qt.AlignRight | Qt.AlignVCenter
        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole):
        if role != Qt.DisplayRole:
            return None
        if orientation == Qt.Horizontal:
            return CABECERAS[section]
        return str(section + 1)

    def set_registros(self, registros: list[RegistroGarantia]) -> None:
        self.beginResetModel()
        self._registros = list(registros)
        self.endResetModel()

    def registro_at(self, row: int) -> RegistroGarantia | None:
        if 0 <= row < len(self._registros):
            return self._registros[row]
        return None

    @staticmethod
    def _texto(registro: RegistroGarantia, column: int) -> str | None:
        if column == 0:
            return registro.fecha
        if column == 1:
            return f"{registro.nombre_equipo} ({registro.marca_equipo})\n{registro.imei_malo}"
        if column == 2:
            return registro.tienda
        if column == 3:
            return registro.proveedor
        if column == 4:
            return registro.falla
        if column == 5:
            return formatear_precio(registro.precio)
        if column == 6:
            return registro.estado.etiqueta
        if column == 7:
            return registro.observaciones
        return None

    @staticmethod
    def _tooltip(registro: RegistroGarantia, column: int) -> str | None:
        if column == 4:
            return registro.falla or None
        if column == 6 and registro.imei_entregado:
            return f"IMEI entregado: {registro.imei_entregado}"
        if column == 7:
            return registro.observaciones or None
        return None

from __future__ import annotations

from typing import Iterable

from garantias.domain.models import RegistroGarantia


class ColeccionGarantias:
    """Estado en memoria de los registros cargados.

    Concentra la política optimista: cada mutación se aplica aquí antes de
    enviarse al script remoto y nunca se revierte si el envío falla.
    """

    def __init__(self, registros: Iterable[RegistroGarantia] = ()) -> None:
        self._registros: list[RegistroGarantia] = list(registros)

    def __len__(self) -> int:
        return len(self._registros)

    def todos(self) -> list[RegistroGarantia]:
        return list(self._registros)

    def reemplazar(self, registros: Iterable[RegistroGarantia]) -> None:
        self._registros = list(registros)

    def insertar(self, registro: RegistroGarantia) -> None:
        self._registros.insert(0, registro)

    def actualizar(self, registro: RegistroGarantia) -> RegistroGarantia | None:
        for posicion, actual in enumerate(self._registros):
            if actual.id == registro.id:
                self._registros[posicion] = registro
                return actual
        return None

    def eliminar(self, registro_id: str) -> RegistroGarantia | None:
        for posicion, actual in enumerate(self._registros):
            if actual.id == registro_id:
                return self._registros.pop(posicion)
        return None

    def buscar(self, registro_id: str) -> RegistroGarantia | None:
        return next((registro for registro in self._registros if registro.id == registro_id), None)

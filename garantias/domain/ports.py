from __future__ import annotations

from pathlib import Path
from typing import Mapping, Protocol, Sequence

from garantias.domain.models import ConfiguracionGarantias, ContenidoInforme, RegistroGarantia

FilaCruda = Mapping[str, str]


class TransporteFilasPort(Protocol):
    """Una vía de lectura de filas crudas (script, gspread, CSV, relay)."""

    nombre: str

    def obtener_filas(self, timeout: float) -> list[FilaCruda]:
        ...


class MutacionesPort(Protocol):
    def crear(self, registro: RegistroGarantia) -> bool:
        ...

    def actualizar(self, registro: RegistroGarantia, imei_original: str) -> bool:
        ...

    def eliminar(self, registro: RegistroGarantia) -> bool:
        ...

    @property
    def configurado(self) -> bool:
        ...


class AsistenteIAPort(Protocol):
    @property
    def habilitado(self) -> bool:
        ...

    def generar_resumen(self, registros: Sequence[RegistroGarantia], contexto: str) -> str:
        ...

    def responder_pregunta(self, registros: Sequence[RegistroGarantia], pregunta: str) -> str:
        ...


class GeneradorPdfPuerto(Protocol):
    def generar_informe(self, contenido: ContenidoInforme, destino: Path) -> Path:
        ...


class ConfigStorePort(Protocol):
    def load(self) -> ConfiguracionGarantias | None:
        ...

    def save(self, config: ConfiguracionGarantias) -> ConfiguracionGarantias:
        ...

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EstadoGarantia(str, Enum):
    PENDIENTE = "pendiente"
    PROCESADO = "procesado"
    ENTREGADO = "entregado"

    @property
    def etiqueta(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class RegistroGarantia:
    """Un caso de ingreso/devolución de un equipo en garantía.

    `id` es un identificador local generado al normalizar la fila y no es
    estable entre recargas; la correlación con la hoja remota se hace siempre
    por `imei_malo`. `archivado` indica que la fila procede de la hoja de
    historial y no de la hoja activa.
    """

    id: str
    fecha: str
    nombre_equipo: str
    marca_equipo: str
    imei_malo: str
    tienda: str
    fecha_cambio: str = ""
    proveedor: str = ""
    imei_entregado: str = ""
    falla: str = ""
    cantidad: int = 1
    precio: float = 0.0
    fecha_realiza_cambio: str = ""
    equipo_procesado: bool = False
    observaciones: str = ""
    archivado: bool = False

    @property
    def estado(self) -> EstadoGarantia:
        if self.imei_entregado:
            return EstadoGarantia.ENTREGADO
        if self.equipo_procesado:
            return EstadoGarantia.PROCESADO
        return EstadoGarantia.PENDIENTE


@dataclass(frozen=True)
class FiltroGarantias:
    fecha_desde: str = ""
    fecha_hasta: str = ""
    tienda: str = ""
    busqueda: str = ""
    estado: str = ""

    def activo(self) -> bool:
        return any((self.fecha_desde, self.fecha_hasta, self.tienda, self.busqueda, self.estado))


@dataclass(frozen=True)
class Estadisticas:
    total_registros: int
    valor_total: float
    marca_top: str
    tienda_top: str


@dataclass(frozen=True)
class ConfiguracionGarantias:
    """Superficie de configuración de la aplicación.

    Sin `script_url` las escrituras (crear/actualizar/eliminar) quedan
    deshabilitadas y la lectura cae a las exportaciones CSV públicas.
    """

    script_url: str = ""
    spreadsheet_id: str = ""
    hoja: str = "BD"
    hoja_historial: str = ""
    credentials_path: str = ""
    timeout_segundos: float = 8.0
    logo_url: str = ""
    anthropic_api_key: str = ""
    modelo_ia: str = "claude-3-5-haiku-latest"

    @property
    def escritura_habilitada(self) -> bool:
        return bool(self.script_url)


@dataclass(frozen=True)
class ContenidoInforme:
    titulo: str
    metadatos: tuple[str, ...]
    registros: tuple[RegistroGarantia, ...]
    estadisticas: Estadisticas
    nombre_archivo: str
    resumen: str | None = None
    logo: bytes | None = None

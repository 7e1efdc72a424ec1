from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date
from typing import Sequence

from garantias.application.agregador import calcular_estadisticas, derivar_tiendas, filtrar_registros
from garantias.application.carga_garantias import CargaGarantiasUseCase, ResultadoCarga
from garantias.application.coleccion import ColeccionGarantias
from garantias.core.errors import ValidationError
from garantias.domain.models import Estadisticas, FiltroGarantias, RegistroGarantia
from garantias.domain.ports import MutacionesPort

logger = logging.getLogger(__name__)

CAMPOS_OBLIGATORIOS: dict[str, str] = {
    "fecha": "Fecha",
    "nombre_equipo": "Nombre del equipo",
    "marca_equipo": "Marca",
    "imei_malo": "IMEI malo",
    "tienda": "Tienda",
    "falla": "Falla",
}

MENSAJES = {
    ("crear", True): "Registro guardado exitosamente en Google Sheets.",
    ("crear", False): "El registro se guardó localmente, pero hubo un error conectando con Google Sheets.",
    ("actualizar", True): "Registro actualizado correctamente en Google Sheets.",
    ("actualizar", False): (
        "Actualización local. Error al conectar con Google Sheets "
        "(Verifique que el script soporte 'update')."
    ),
    ("eliminar", True): "Registro eliminado correctamente de Google Sheets.",
    ("eliminar", False): (
        "El registro se eliminó de la vista, pero hubo un error al eliminarlo en Google Sheets. "
        "Verifique el script."
    ),
}
MENSAJE_SIN_SCRIPT = "Cambio registrado solo localmente. Configure el Script para persistencia."


@dataclass(frozen=True)
class ResultadoMutacion:
    registro: RegistroGarantia
    remoto_ok: bool
    remoto_configurado: bool
    mensaje: str

    @property
    def solo_local(self) -> bool:
        return not self.remoto_ok


@dataclass(frozen=True)
class MutacionPendiente:
    """Cambio ya aplicado en la colección local que falta enviar al script."""

    accion: str
    registro: RegistroGarantia
    imei_original: str = ""


@dataclass(frozen=True)
class VistaGarantias:
    registros: list[RegistroGarantia]
    estadisticas: Estadisticas
    tiendas: list[str]
    total_cargados: int


def validar_registro(registro: RegistroGarantia) -> list[str]:
    """Nombres legibles de los campos obligatorios que faltan."""
    return [etiqueta for campo, etiqueta in CAMPOS_OBLIGATORIOS.items() if not str(getattr(registro, campo)).strip()]


def nuevo_registro(tiendas: Sequence[str] = (), **campos: object) -> RegistroGarantia:
    base = RegistroGarantia(
        id=f"new-{uuid.uuid4().hex[:10]}",
        fecha=date.today().isoformat(),
        nombre_equipo="",
        marca_equipo="",
        imei_malo="",
        tienda=tiendas[0] if tiendas else "",
    )
    return replace(base, **campos) if campos else base


class GestionGarantias:
    """Estado de la aplicación: registros cargados, filtro activo y mutaciones.

    La UI y la CLI trabajan solo contra esta clase; no hay estado global.
    """

    def __init__(
        self,
        carga: CargaGarantiasUseCase,
        mutaciones: MutacionesPort,
        coleccion: ColeccionGarantias | None = None,
    ) -> None:
        self._carga = carga
        self._mutaciones = mutaciones
        self._coleccion = coleccion if coleccion is not None else ColeccionGarantias()
        self._filtro = FiltroGarantias()
        self._ver_historial = False
        self._ultima_carga: ResultadoCarga | None = None

    @property
    def filtro(self) -> FiltroGarantias:
        return self._filtro

    @property
    def ver_historial(self) -> bool:
        return self._ver_historial

    @property
    def escritura_habilitada(self) -> bool:
        return self._mutaciones.configurado

    @property
    def ultima_carga(self) -> ResultadoCarga | None:
        return self._ultima_carga

    @property
    def carga(self) -> CargaGarantiasUseCase:
        return self._carga

    def cargar(self) -> ResultadoCarga:
        resultado = self._carga.ejecutar()
        self.aplicar_carga(resultado)
        return resultado

    def aplicar_carga(self, resultado: ResultadoCarga) -> None:
        self._coleccion.reemplazar(resultado.registros)
        self._ultima_carga = resultado

    def aplicar_filtro(self, filtro: FiltroGarantias) -> None:
        self._filtro = filtro

    def actualizar_filtro(self, **cambios: str) -> FiltroGarantias:
        self._filtro = replace(self._filtro, **cambios)
        return self._filtro

    def limpiar_filtros(self) -> None:
        self._filtro = FiltroGarantias()

    def alternar_historial(self, ver_historial: bool) -> None:
        self._ver_historial = ver_historial

    def registros_visibles(self) -> list[RegistroGarantia]:
        return [r for r in self._coleccion.todos() if r.archivado == self._ver_historial]

    def vista(self) -> VistaGarantias:
        visibles = self.registros_visibles()
        filtrados = filtrar_registros(visibles, self._filtro)
        return VistaGarantias(
            registros=filtrados,
            estadisticas=calcular_estadisticas(filtrados),
            tiendas=derivar_tiendas(self._coleccion.todos()),
            total_cargados=len(visibles),
        )

    def registrar(self, registro: RegistroGarantia) -> ResultadoMutacion:
        return self.enviar(self.preparar_alta(registro))

    def actualizar(self, registro: RegistroGarantia) -> ResultadoMutacion:
        return self.enviar(self.preparar_edicion(registro))

    def eliminar(self, registro: RegistroGarantia) -> ResultadoMutacion:
        return self.enviar(self.preparar_baja(registro))

    # Los preparar_* tocan la colección y deben llamarse desde el flujo principal.
    # enviar() solo habla con el script, así que puede correr en otro hilo.

    def preparar_alta(self, registro: RegistroGarantia) -> MutacionPendiente:
        self._exigir_completo(registro)
        self._coleccion.insertar(registro)
        return MutacionPendiente("crear", registro)

    def preparar_edicion(self, registro: RegistroGarantia) -> MutacionPendiente:
        anterior = self._coleccion.actualizar(registro)
        if anterior is None:
            logger.warning("Registro %s no estaba en la colección local; se inserta", registro.id)
            self._coleccion.insertar(registro)
        imei_original = anterior.imei_malo if anterior is not None else registro.imei_malo
        return MutacionPendiente("actualizar", registro, imei_original)

    def preparar_baja(self, registro: RegistroGarantia) -> MutacionPendiente:
        self._coleccion.eliminar(registro.id)
        return MutacionPendiente("eliminar", registro)

    def enviar(self, pendiente: MutacionPendiente) -> ResultadoMutacion:
        registro = pendiente.registro
        if not self._mutaciones.configurado:
            return ResultadoMutacion(registro, remoto_ok=False, remoto_configurado=False, mensaje=MENSAJE_SIN_SCRIPT)
        if pendiente.accion == "crear":
            remoto_ok = self._mutaciones.crear(registro)
        elif pendiente.accion == "actualizar":
            remoto_ok = self._mutaciones.actualizar(registro, pendiente.imei_original)
        else:
            remoto_ok = self._mutaciones.eliminar(registro)
        if not remoto_ok:
            logger.warning("Mutación '%s' aplicada solo localmente (imei=%s)", pendiente.accion, registro.imei_malo)
        return ResultadoMutacion(
            registro,
            remoto_ok=remoto_ok,
            remoto_configurado=True,
            mensaje=MENSAJES[(pendiente.accion, remoto_ok)],
        )

    @staticmethod
    def _exigir_completo(registro: RegistroGarantia) -> None:
        faltantes = validar_registro(registro)
        if faltantes:
            raise ValidationError(f"Faltan campos obligatorios: {', '.join(faltantes)}")

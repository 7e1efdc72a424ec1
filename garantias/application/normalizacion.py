from __future__ import annotations

import math
import re
import uuid
from datetime import datetime
from typing import Any, Iterable, Mapping

from garantias.domain.models import RegistroGarantia

# Cada campo semántico acepta varias cabeceras porque los nombres de columna
# de la hoja han cambiado con el tiempo y entre hojas. Gana la primera con valor.
COLUMNAS: dict[str, tuple[str, ...]] = {
    "fecha": ("FECHA", "FECHA DE INGRESO", "FECHA INGRESO"),
    "nombre_equipo": ("NOMBRE DEL EQUIPO", "NOMBRE EQUIPO", "EQUIPO", "NOMBREEQUIPO"),
    "marca_equipo": ("MARCA DEL EQUIPO", "MARCA EQUIPO", "MARCA", "MARCAEQUIPO"),
    "imei_malo": ("IMEI MALO", "IMEI DEFECTUOSO", "IMEI", "IMEIMALO"),
    "tienda": ("TIENDA", "SUCURSAL"),
    "fecha_cambio": ("FECHA QUE SE REALIZA EL CAMBIO", "FECHA CAMBIO", "FECHACAMBIO"),
    "proveedor": ("PROVEEDOR",),
    "imei_entregado": ("IMEI ENTREGADO AL CLIENTE", "IMEI ENTREGADO", "IMEIENTREGADO"),
    "falla": ("FALLA DEL EQUIPO EN CASO DE ACCESORIO", "FALLA DEL EQUIPO", "FALLA"),
    "cantidad": ("CANTIDAD",),
    "precio": ("PRECIO DEL EQUIPO", "PRECIO"),
    "fecha_realiza_cambio": (
        "FECHA EN QUE SE REALIZA EL CAMBIO",
        "FECHA REALIZA CAMBIO",
        "FECHAREALIZACAMBIO",
    ),
    "equipo_procesado": ("EQUIPO PROCESADO", "PROCESADO", "EQUIPOPROCESADO"),
    "observaciones": ("OBSERVACIONES", "NOTAS", "OBS"),
    "archivado": ("ARCHIVADO",),
}

ORIGEN_KEY = "_ORIGEN"
ORIGEN_HISTORICO = "HISTORICO"
_ORIGENES_HISTORICOS = frozenset({"HISTORICO", "HISTÓRICO", "HISTORIAL"})

TOKENS_VERDADEROS = frozenset({"SI", "SÍ", "TRUE", "YES", "S", "1"})

_NO_NUMERICO_RE = re.compile(r"[^0-9.\-]+")
_FORMATOS_FECHA = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%Y/%m/%d")


def normalizar_cabecera(cabecera: Any) -> str:
    return str(cabecera or "").strip().upper()


def indexar_fila(fila: Mapping[str, Any]) -> dict[str, Any]:
    return {normalizar_cabecera(clave): valor for clave, valor in fila.items()}


def resolver_columna(fila: Mapping[str, Any], campo: str) -> str:
    """Devuelve el valor del primer sinónimo de `campo` presente y no vacío.

    `fila` puede venir ya indexada por `indexar_fila`; indexarla de nuevo es
    idempotente.
    """
    indice = indexar_fila(fila)
    for variante in COLUMNAS[campo]:
        valor = _texto(indice.get(variante))
        if valor:
            return valor
    return ""


def es_verdadero(valor: Any) -> bool:
    return _texto(valor).upper() in TOKENS_VERDADEROS


def parsear_precio(valor: Any) -> float:
    if isinstance(valor, bool):
        return 0.0
    if isinstance(valor, (int, float)):
        numero = float(valor)
    else:
        limpio = _NO_NUMERICO_RE.sub("", _texto(valor))
        try:
            numero = float(limpio)
        except ValueError:
            return 0.0
    if math.isnan(numero) or math.isinf(numero) or numero < 0:
        return 0.0
    return numero


def parsear_cantidad(valor: Any) -> int:
    texto = _texto(valor)
    try:
        cantidad = int(float(texto)) if texto else 1
    except ValueError:
        return 1
    return cantidad if cantidad >= 1 else 1


def normalizar_fecha(valor: str) -> str:
    if not valor:
        return ""
    for formato in _FORMATOS_FECHA:
        try:
            return datetime.strptime(valor, formato).strftime("%Y-%m-%d")
        except ValueError:
            continue
    return valor


def generar_id_local(indice: int) -> str:
    return f"row-{indice}-{uuid.uuid4().hex[:6]}"


def normalizar_fila(fila: Mapping[str, Any], indice: int) -> RegistroGarantia | None:
    """Convierte una fila cruda en un registro tipado, o None si es ruido.

    Una fila se descarta cuando no tiene fecha, ni nombre de equipo, ni IMEI
    malo. Fecha y nombre de un solo carácter se tratan como vacíos.
    """
    fila = indexar_fila(fila)
    fecha = _descartar_ruido(resolver_columna(fila, "fecha"))
    nombre_equipo = _descartar_ruido(resolver_columna(fila, "nombre_equipo"))
    imei_malo = resolver_columna(fila, "imei_malo")
    if not fecha and not nombre_equipo and not imei_malo:
        return None

    return RegistroGarantia(
        id=generar_id_local(indice),
        fecha=normalizar_fecha(fecha),
        nombre_equipo=nombre_equipo,
        marca_equipo=resolver_columna(fila, "marca_equipo"),
        imei_malo=imei_malo,
        tienda=resolver_columna(fila, "tienda"),
        fecha_cambio=normalizar_fecha(resolver_columna(fila, "fecha_cambio")),
        proveedor=resolver_columna(fila, "proveedor"),
        imei_entregado=resolver_columna(fila, "imei_entregado"),
        falla=resolver_columna(fila, "falla"),
        cantidad=parsear_cantidad(resolver_columna(fila, "cantidad")),
        precio=parsear_precio(resolver_columna(fila, "precio")),
        fecha_realiza_cambio=normalizar_fecha(resolver_columna(fila, "fecha_realiza_cambio")),
        equipo_procesado=es_verdadero(resolver_columna(fila, "equipo_procesado")),
        observaciones=resolver_columna(fila, "observaciones"),
        archivado=_es_archivado(fila),
    )


def normalizar_filas(filas: Iterable[Mapping[str, Any]]) -> list[RegistroGarantia]:
    """Normaliza un lote y lo invierte: la hoja añade filas al final."""
    registros: list[RegistroGarantia] = []
    for indice, fila in enumerate(filas):
        registro = normalizar_fila(fila, indice)
        if registro is not None:
            registros.append(registro)
    registros.reverse()
    return registros


def marcar_historico(filas: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [{**fila, ORIGEN_KEY: ORIGEN_HISTORICO} for fila in filas]


def _es_archivado(fila: Mapping[str, Any]) -> bool:
    if ORIGEN_KEY in fila:
        return _texto(fila[ORIGEN_KEY]).upper() in _ORIGENES_HISTORICOS
    return es_verdadero(resolver_columna(fila, "archivado"))


def _descartar_ruido(valor: str) -> str:
    return valor if len(valor) > 1 else ""


def _texto(valor: Any) -> str:
    if valor is None:
        return ""
    if isinstance(valor, bool):
        return "TRUE" if valor else "FALSE"
    if isinstance(valor, float) and valor.is_integer():
        return str(int(valor))
    return str(valor).strip()

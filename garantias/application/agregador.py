from __future__ import annotations

from typing import Iterable, Sequence

from garantias.domain.models import Estadisticas, EstadoGarantia, FiltroGarantias, RegistroGarantia

TIENDAS_POR_DEFECTO: tuple[str, ...] = ("K24 Central", "K24 Norte", "K24 Sur", "K24 Este")


def cumple_estado(registro: RegistroGarantia, estado: str) -> bool:
    if not estado:
        return True
    try:
        return registro.estado is EstadoGarantia(estado.strip().lower())
    except ValueError:
        return True


def cumple_busqueda(registro: RegistroGarantia, busqueda: str) -> bool:
    if not busqueda:
        return True
    texto = busqueda.lower()
    return (
        texto in registro.nombre_equipo.lower()
        or texto in registro.marca_equipo.lower()
        or texto in registro.imei_malo.lower()
    )


def cumple_filtro(registro: RegistroGarantia, filtro: FiltroGarantias) -> bool:
    if filtro.fecha_desde and registro.fecha < filtro.fecha_desde:
        return False
    if filtro.fecha_hasta and registro.fecha > filtro.fecha_hasta:
        return False
    if filtro.tienda and registro.tienda != filtro.tienda:
        return False
    return cumple_estado(registro, filtro.estado) and cumple_busqueda(registro, filtro.busqueda)


def filtrar_registros(
    registros: Sequence[RegistroGarantia], filtro: FiltroGarantias
) -> list[RegistroGarantia]:
    return [registro for registro in registros if cumple_filtro(registro, filtro)]


def derivar_tiendas(registros: Iterable[RegistroGarantia]) -> list[str]:
    tiendas = {registro.tienda for registro in registros if registro.tienda}
    if not tiendas:
        return list(TIENDAS_POR_DEFECTO)
    return sorted(tiendas)


def mas_frecuente(valores: Iterable[str]) -> str:
    """Valor con más apariciones; en empate gana el primero encontrado."""
    conteo: dict[str, int] = {}
    for valor in valores:
        if valor:
            conteo[valor] = conteo.get(valor, 0) + 1
    ganador = ""
    maximo = 0
    for valor, veces in conteo.items():
        if veces > maximo:
            ganador, maximo = valor, veces
    return ganador


def calcular_estadisticas(registros: Sequence[RegistroGarantia]) -> Estadisticas:
    return Estadisticas(
        total_registros=len(registros),
        valor_total=sum(registro.precio for registro in registros),
        marca_top=mas_frecuente(registro.marca_equipo for registro in registros),
        tienda_top=mas_frecuente(registro.tienda for registro in registros),
    )

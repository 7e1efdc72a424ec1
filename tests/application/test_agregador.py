from __future__ import annotations

from garantias.application.agregador import (
    TIENDAS_POR_DEFECTO,
    calcular_estadisticas,
    derivar_tiendas,
    filtrar_registros,
    mas_frecuente,
)
from garantias.domain.models import FiltroGarantias


def test_filtro_por_tienda_y_estadisticas_del_subconjunto(registro_factory) -> None:
    registros = [
        registro_factory(tienda="K24 Norte", precio=100.0, marca_equipo="Apple"),
        registro_factory(tienda="K24 Sur", precio=500.0, marca_equipo="Samsung"),
        registro_factory(tienda="K24 Norte", precio=50.0, marca_equipo="Apple"),
    ]

    filtrados = filtrar_registros(registros, FiltroGarantias(tienda="K24 Norte"))
    stats = calcular_estadisticas(filtrados)

    assert {registro.tienda for registro in filtrados} == {"K24 Norte"}
    assert stats.total_registros == 2
    assert stats.valor_total == 150.0
    assert stats.tienda_top == "K24 Norte"
    assert stats.marca_top == "Apple"


def test_filtro_vacio_devuelve_todo(registro_factory) -> None:
    registros = [registro_factory(), registro_factory(tienda="K24 Sur")]

    assert filtrar_registros(registros, FiltroGarantias()) == registros


def test_rango_de_fechas_inclusivo(registro_factory) -> None:
    registros = [
        registro_factory(fecha="2024-01-01"),
        registro_factory(fecha="2024-01-15"),
        registro_factory(fecha="2024-02-01"),
    ]

    filtrados = filtrar_registros(registros, FiltroGarantias(fecha_desde="2024-01-01", fecha_hasta="2024-01-15"))

    assert [registro.fecha for registro in filtrados] == ["2024-01-01", "2024-01-15"]


def test_busqueda_sin_distinguir_mayusculas(registro_factory) -> None:
    registros = [
        registro_factory(nombre_equipo="Galaxy A54", marca_equipo="Samsung", imei_malo="111"),
        registro_factory(nombre_equipo="Redmi 12", marca_equipo="Xiaomi", imei_malo="222"),
        registro_factory(nombre_equipo="iPhone 13", marca_equipo="Apple", imei_malo="3334"),
    ]

    assert len(filtrar_registros(registros, FiltroGarantias(busqueda="SAMS"))) == 1
    assert len(filtrar_registros(registros, FiltroGarantias(busqueda="redmi"))) == 1
    assert len(filtrar_registros(registros, FiltroGarantias(busqueda="333"))) == 1


def test_estados_son_particion(registro_factory) -> None:
    registros = [
        registro_factory(),
        registro_factory(equipo_procesado=True),
        registro_factory(imei_entregado="999", equipo_procesado=True),
        registro_factory(imei_entregado="998"),
    ]

    pendientes = filtrar_registros(registros, FiltroGarantias(estado="pendiente"))
    procesados = filtrar_registros(registros, FiltroGarantias(estado="procesado"))
    entregados = filtrar_registros(registros, FiltroGarantias(estado="entregado"))

    assert len(pendientes) == 1
    assert len(procesados) == 1
    assert len(entregados) == 2
    assert len(pendientes) + len(procesados) + len(entregados) == len(registros)


def test_filtros_se_combinan_con_and(registro_factory) -> None:
    registros = [
        registro_factory(tienda="K24 Norte", equipo_procesado=True),
        registro_factory(tienda="K24 Norte"),
        registro_factory(tienda="K24 Sur", equipo_procesado=True),
    ]

    filtrados = filtrar_registros(registros, FiltroGarantias(tienda="K24 Norte", estado="procesado"))

    assert len(filtrados) == 1


def test_estadisticas_de_conjunto_vacio() -> None:
    stats = calcular_estadisticas([])

    assert stats.total_registros == 0
    assert stats.valor_total == 0
    assert stats.marca_top == ""
    assert stats.tienda_top == ""


def test_mas_frecuente_en_empate_gana_el_primero() -> None:
    assert mas_frecuente(["Sur", "Norte", "Norte", "Sur"]) == "Sur"
    assert mas_frecuente(["", "", "Este"]) == "Este"


def test_derivar_tiendas_ordenadas_y_por_defecto(registro_factory) -> None:
    registros = [registro_factory(tienda="K24 Sur"), registro_factory(tienda="K24 Este"), registro_factory(tienda="")]

    assert derivar_tiendas(registros) == ["K24 Este", "K24 Sur"]
    assert derivar_tiendas([]) == list(TIENDAS_POR_DEFECTO)

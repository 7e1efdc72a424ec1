from __future__ import annotations

import pytest

from garantias.application.normalizacion import (
    es_verdadero,
    marcar_historico,
    normalizar_fecha,
    normalizar_fila,
    normalizar_filas,
    parsear_cantidad,
    parsear_precio,
    resolver_columna,
)
from garantias.domain.models import EstadoGarantia


def test_fila_procesada_sin_imei_entregado_queda_en_procesado() -> None:
    fila = {"FECHA": "2024-01-05", "NOMBRE DEL EQUIPO": "iPhone 13", "EQUIPO PROCESADO": "SI", "PRECIO": "$750"}

    registro = normalizar_fila(fila, 0)

    assert registro is not None
    assert registro.fecha == "2024-01-05"
    assert registro.nombre_equipo == "iPhone 13"
    assert registro.equipo_procesado is True
    assert registro.precio == 750
    assert registro.estado is EstadoGarantia.PROCESADO


def test_imei_entregado_gana_sobre_flag_procesado() -> None:
    fila = {
        "FECHA": "2024-01-05",
        "NOMBRE DEL EQUIPO": "iPhone 13",
        "EQUIPO PROCESADO": "SI",
        "PRECIO": "$750",
        "IMEI ENTREGADO AL CLIENTE": "123",
    }

    registro = normalizar_fila(fila, 0)

    assert registro is not None
    assert registro.estado is EstadoGarantia.ENTREGADO


@pytest.mark.parametrize("valor", ["SI", "sí", " true ", "Yes", "s", "1"])
def test_tokens_verdaderos(valor: str) -> None:
    assert es_verdadero(valor) is True


@pytest.mark.parametrize("valor", ["NO", "", "0", "false", "procesado", None])
def test_tokens_falsos(valor) -> None:
    assert es_verdadero(valor) is False


@pytest.mark.parametrize(
    ("valor", "esperado"),
    [
        ("$1,250.50", 1250.5),
        ("750", 750.0),
        ("", 0.0),
        ("N/A", 0.0),
        ("-20", 0.0),
        ("1.2.3", 0.0),
        (99, 99.0),
        (float("nan"), 0.0),
    ],
)
def test_parsear_precio(valor, esperado: float) -> None:
    assert parsear_precio(valor) == esperado


@pytest.mark.parametrize(("valor", "esperado"), [("", 1), ("3", 3), ("abc", 1), ("0", 1), ("2.0", 2)])
def test_parsear_cantidad_por_defecto_uno(valor: str, esperado: int) -> None:
    assert parsear_cantidad(valor) == esperado


def test_resolver_columna_ignora_mayusculas_y_espacios() -> None:
    fila = {"  nombre del equipo ": "Galaxy A54", "Marca": "Samsung"}

    assert resolver_columna(fila, "nombre_equipo") == "Galaxy A54"
    assert resolver_columna(fila, "marca_equipo") == "Samsung"


def test_resolver_columna_usa_primer_sinonimo_con_valor() -> None:
    fila = {"FALLA DEL EQUIPO EN CASO DE ACCESORIO": "", "FALLA": "No enciende"}

    assert resolver_columna(fila, "falla") == "No enciende"


def test_fila_sin_fecha_nombre_ni_imei_se_descarta() -> None:
    assert normalizar_fila({"TIENDA": "K24 Sur", "PRECIO": "100"}, 0) is None


def test_valores_de_un_caracter_cuentan_como_ruido() -> None:
    assert normalizar_fila({"FECHA": "-", "NOMBRE DEL EQUIPO": "x"}, 0) is None


def test_fila_solo_con_imei_se_conserva() -> None:
    registro = normalizar_fila({"IMEI MALO": "356789"}, 4)

    assert registro is not None
    assert registro.imei_malo == "356789"
    assert registro.cantidad == 1
    assert registro.precio == 0.0


def test_normalizar_filas_invierte_orden() -> None:
    filas = [
        {"FECHA": "2024-01-01", "NOMBRE DEL EQUIPO": "Primero"},
        {"TIENDA": "ruido"},
        {"FECHA": "2024-01-02", "NOMBRE DEL EQUIPO": "Segundo"},
    ]

    registros = normalizar_filas(filas)

    assert [registro.nombre_equipo for registro in registros] == ["Segundo", "Primero"]
    assert len({registro.id for registro in registros}) == 2


@pytest.mark.parametrize(
    ("valor", "esperado"),
    [
        ("2024-01-05", "2024-01-05"),
        ("05/01/2024", "2024-01-05"),
        ("05-01-2024", "2024-01-05"),
        ("2024/01/05", "2024-01-05"),
        ("ayer", "ayer"),
        ("", ""),
    ],
)
def test_normalizar_fecha(valor: str, esperado: str) -> None:
    assert normalizar_fecha(valor) == esperado


def test_marcar_historico_archiva_registros() -> None:
    filas = marcar_historico([{"FECHA": "2023-05-01", "NOMBRE DEL EQUIPO": "Moto G"}])

    registros = normalizar_filas(filas)

    assert registros[0].archivado is True


def test_columna_archivado_en_la_propia_hoja() -> None:
    registro = normalizar_fila({"FECHA": "2023-05-01", "NOMBRE DEL EQUIPO": "Moto G", "ARCHIVADO": "SI"}, 0)

    assert registro is not None
    assert registro.archivado is True

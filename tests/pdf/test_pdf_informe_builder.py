from __future__ import annotations

from pathlib import Path

import pytest

from garantias.application.agregador import calcular_estadisticas
from garantias.domain.models import ContenidoInforme
from garantias.infrastructure.pdf.generador_pdf_reportlab import GeneradorPdfReportlab
from garantias.pdf.pdf_builder import _build_table_data, construir_pdf_informe, formatear_moneda


def _contenido(registros, resumen=None, logo=None) -> ContenidoInforme:
    return ContenidoInforme(
        titulo="Reporte General de Garantías - Tiendas K24",
        metadatos=("Fecha de emisión: 01/03/2024 10:30", "Filtro Tienda: Todas"),
        registros=tuple(registros),
        estadisticas=calcular_estadisticas(registros),
        nombre_archivo="reporte.pdf",
        resumen=resumen,
        logo=logo,
    )


def test_genera_pdf_con_resumen(registro_factory, tmp_path: Path) -> None:
    registros = [registro_factory(precio=750.0, observaciones="<b>sin tapa</b> & cargador")]

    ruta = GeneradorPdfReportlab().generar_informe(
        _contenido(registros, resumen="Primer párrafo.\n\nSegundo párrafo."),
        tmp_path / "informe",
    )

    assert ruta.suffix == ".pdf"
    assert ruta.read_bytes().startswith(b"%PDF")


def test_logo_invalido_se_ignora(registro_factory, tmp_path: Path) -> None:
    ruta = construir_pdf_informe(_contenido([registro_factory()], logo=b"no es imagen"), tmp_path / "x.pdf")

    assert ruta.exists()


def test_sin_registros_no_genera(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        construir_pdf_informe(_contenido([]), tmp_path / "vacio.pdf")


def test_filas_de_tabla(registro_factory) -> None:
    filas = _build_table_data(
        [registro_factory(fecha="2024-01-05", imei_malo="111", equipo_procesado=True, precio=1250.5)]
    )

    assert filas == [["2024-01-05", "iPhone 13 (Apple)", "K24 Norte", "111", "Procesado", "SI", "-", "$1,250.50"]]
    assert formatear_moneda(0) == "$0.00"

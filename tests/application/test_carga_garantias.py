from __future__ import annotations

from garantias.application.carga_garantias import MENSAJE_SIN_DATOS, CargaGarantiasUseCase
from garantias.domain.transport_errors import RespuestaHtmlError, TransporteTimeoutError

FILAS = [
    {"FECHA": "2024-01-01", "NOMBRE DEL EQUIPO": "Moto G", "TIENDA": "K24 Sur"},
    {"FECHA": "2024-01-02", "NOMBRE DEL EQUIPO": "iPhone 13", "TIENDA": "K24 Norte"},
]


def test_primer_transporte_con_datos_gana(fake_transporte) -> None:
    script = fake_transporte("script", FILAS)
    csv = fake_transporte("csv_directo", [{"FECHA": "2024-03-03", "NOMBRE DEL EQUIPO": "Otro"}])

    resultado = CargaGarantiasUseCase([script, csv], timeout=5.0).ejecutar()

    assert resultado.origen == "script"
    assert [registro.nombre_equipo for registro in resultado.registros] == ["iPhone 13", "Moto G"]
    assert csv.llamadas == []
    assert script.llamadas == [5.0]


def test_fallos_avanzan_al_siguiente_transporte(fake_transporte) -> None:
    transportes = [
        fake_transporte("script", error=TransporteTimeoutError("timeout")),
        fake_transporte("csv_directo", error=RespuestaHtmlError("html")),
        fake_transporte("csv_corsproxy", FILAS),
    ]

    resultado = CargaGarantiasUseCase(transportes).ejecutar()

    assert resultado.origen == "csv_corsproxy"
    assert [intento.ok for intento in resultado.intentos] == [False, False, True]
    assert resultado.intentos[0].error == "timeout"


def test_transporte_sin_registros_utiles_no_cuenta_como_exito(fake_transporte) -> None:
    transportes = [
        fake_transporte("script", [{"TIENDA": "solo ruido"}]),
        fake_transporte("csv_directo", FILAS),
    ]

    resultado = CargaGarantiasUseCase(transportes).ejecutar()

    assert resultado.origen == "csv_directo"
    assert resultado.intentos[0].ok is False
    assert resultado.intentos[0].filas == 1


def test_todo_falla_devuelve_un_registro_de_respaldo(fake_transporte) -> None:
    transportes = [
        fake_transporte("script", error=RuntimeError("boom")),
        fake_transporte("csv_directo", []),
    ]

    resultado = CargaGarantiasUseCase(transportes).ejecutar()

    assert resultado.es_respaldo is True
    assert len(resultado.registros) == 1
    assert resultado.registros[0].falla == MENSAJE_SIN_DATOS
    assert "script: boom" in resultado.registros[0].observaciones


def test_sin_transportes_tambien_devuelve_respaldo() -> None:
    resultado = CargaGarantiasUseCase([]).ejecutar()

    assert resultado.es_respaldo is True
    assert len(resultado.registros) == 1


def test_historial_se_anexa_archivado(fake_transporte) -> None:
    historial = fake_transporte("csv_directo", [{"FECHA": "2022-06-01", "NOMBRE DEL EQUIPO": "Viejo"}])

    resultado = CargaGarantiasUseCase(
        [fake_transporte("script", FILAS)],
        transportes_historial=[historial],
    ).ejecutar()

    archivados = [registro for registro in resultado.registros if registro.archivado]
    activos = [registro for registro in resultado.registros if not registro.archivado]
    assert [registro.nombre_equipo for registro in archivados] == ["Viejo"]
    assert len(activos) == 2


def test_fallo_del_historial_no_rompe_la_carga(fake_transporte) -> None:
    resultado = CargaGarantiasUseCase(
        [fake_transporte("script", FILAS)],
        transportes_historial=[fake_transporte("csv_directo", error=RuntimeError("404"))],
    ).ejecutar()

    assert resultado.origen == "script"
    assert len(resultado.registros) == 2

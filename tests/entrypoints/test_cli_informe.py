from __future__ import annotations

import json
from pathlib import Path

from garantias.application.carga_garantias import CargaGarantiasUseCase
from garantias.application.gestion_garantias import GestionGarantias
from garantias.application.informe import GenerarInformeUseCase
from garantias.bootstrap.container import AppContainer
from garantias.domain.models import ConfiguracionGarantias
from garantias.entrypoints import cli_informe
from garantias.infrastructure.asistente_ia import AsistenteIA
from garantias.infrastructure.pdf.generador_pdf_reportlab import GeneradorPdfReportlab

FILAS = [
    {"FECHA": "2024-01-05", "NOMBRE DEL EQUIPO": "iPhone 13", "MARCA": "Apple", "TIENDA": "K24 Norte", "PRECIO": "750"},
    {"FECHA": "2024-01-06", "NOMBRE DEL EQUIPO": "Galaxy A54", "MARCA": "Samsung", "TIENDA": "K24 Sur", "PRECIO": "300"},
]


def _container(fake_transporte, fake_mutaciones) -> AppContainer:
    asistente = AsistenteIA("", "modelo-test")
    return AppContainer(
        configuracion=ConfiguracionGarantias(),
        gestion=GestionGarantias(CargaGarantiasUseCase([fake_transporte("script", FILAS)]), fake_mutaciones()),
        asistente=asistente,
        informe=GenerarInformeUseCase(asistente, GeneradorPdfReportlab()),
        config_store=None,  # type: ignore[arg-type]
    )


def test_cli_resume_y_genera_pdf(fake_transporte, fake_mutaciones, tmp_path: Path, capsys, monkeypatch) -> None:
    monkeypatch.setenv("GARANTIAS_LOG_DIR", str(tmp_path / "logs"))

    exit_code = cli_informe.main(
        ["--tienda", "K24 Norte", "--pdf", str(tmp_path)],
        container=_container(fake_transporte, fake_mutaciones),
    )

    salida = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert salida["origen"] == "script"
    assert salida["registros"] == 1
    assert salida["valor_total"] == 750.0
    assert Path(salida["pdf"]).name.startswith("reporte_garantias_filtrado_")
    assert salida["pdf_con_resumen"] is False


def test_cli_pdf_sin_registros(fake_transporte, fake_mutaciones, tmp_path: Path, capsys, monkeypatch) -> None:
    monkeypatch.setenv("GARANTIAS_LOG_DIR", str(tmp_path / "logs"))

    exit_code = cli_informe.main(
        ["--buscar", "nokia", "--pdf", str(tmp_path)],
        container=_container(fake_transporte, fake_mutaciones),
    )

    salida = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert "pdf_error" in salida

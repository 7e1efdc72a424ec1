from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import requests

from garantias.application.carga_garantias import CargaGarantiasUseCase
from garantias.application.gestion_garantias import GestionGarantias
from garantias.application.informe import GenerarInformeUseCase
from garantias.bootstrap.settings import cargar_configuracion
from garantias.domain.models import ConfiguracionGarantias
from garantias.domain.ports import ConfigStorePort
from garantias.infrastructure.asistente_ia import AsistenteIA
from garantias.infrastructure.local_config import ConfigStore
from garantias.infrastructure.pdf.generador_pdf_reportlab import GeneradorPdfReportlab
from garantias.infrastructure.pdf.logo import DescargadorLogo
from garantias.infrastructure.script_client import ScriptMutacionesClient
from garantias.infrastructure.transportes import construir_cadena_lectura


@dataclass
class AppContainer:
    configuracion: ConfiguracionGarantias
    gestion: GestionGarantias
    asistente: AsistenteIA
    informe: GenerarInformeUseCase
    config_store: ConfigStorePort


def build_container(
    config_store: ConfigStorePort | None = None,
    environ: Mapping[str, str] | None = None,
    session: requests.Session | None = None,
) -> AppContainer:
    store = config_store or ConfigStore()
    configuracion = cargar_configuracion(store, environ)
    http = session or requests.Session()

    transportes = construir_cadena_lectura(configuracion, session=http)
    transportes_historial = (
        construir_cadena_lectura(
            configuracion,
            hoja=configuracion.hoja_historial,
            incluir_script=False,
            session=http,
        )
        if configuracion.hoja_historial
        else []
    )
    carga = CargaGarantiasUseCase(
        transportes,
        transportes_historial=transportes_historial,
        timeout=configuracion.timeout_segundos,
    )
    mutaciones = ScriptMutacionesClient(configuracion.script_url, session=http)
    gestion = GestionGarantias(carga, mutaciones)

    asistente = AsistenteIA(configuracion.anthropic_api_key, configuracion.modelo_ia)
    informe = GenerarInformeUseCase(
        asistente,
        GeneradorPdfReportlab(),
        logo_loader=DescargadorLogo(configuracion.logo_url, session=http),
    )

    return AppContainer(
        configuracion=configuracion,
        gestion=gestion,
        asistente=asistente,
        informe=informe,
        config_store=store,
    )

from __future__ import annotations

import logging
from typing import Any, Callable

import requests

from garantias.core.observability import vincular
from garantias.domain.models import ConfiguracionGarantias
from garantias.domain.ports import FilaCruda, TransporteFilasPort
from garantias.domain.transport_errors import (
    PayloadInvalidoError,
    TransporteError,
    TransporteTimeoutError,
)
from garantias.infrastructure.sheets_client import SheetsLecturaClient
from garantias.infrastructure.transportes_puros import (
    RELAY_ALLORIGINS,
    RELAY_CORSPROXY,
    construir_url_export,
    construir_url_gviz,
    envolver_en_relay,
    parsear_csv,
    validar_cuerpo_texto,
    validar_payload_script,
)

logger = logging.getLogger(__name__)


def _get(session: requests.Session, url: str, timeout: float) -> requests.Response:
    try:
        response = session.get(url, timeout=timeout)
    except requests.Timeout as exc:
        raise TransporteTimeoutError(f"Timeout tras {timeout}s en {url}") from exc
    except requests.RequestException as exc:
        raise TransporteError(f"Error de red en {url}: {exc}") from exc
    if not response.ok:
        raise TransporteError(f"Error de red: {response.status_code} en {url}")
    return response


class TransporteScriptJson:
    """Lee la hoja a través del endpoint de Apps Script (lista JSON de filas)."""

    def __init__(self, script_url: str, session: requests.Session) -> None:
        self.nombre = "script"
        self._script_url = script_url
        self._session = session

    def obtener_filas(self, timeout: float) -> list[FilaCruda]:
        response = _get(self._session, self._script_url, timeout)
        validar_cuerpo_texto(response.text)
        try:
            payload = response.json()
        except ValueError as exc:
            raise PayloadInvalidoError("El script no devolvió JSON válido.") from exc
        return validar_payload_script(payload)


class TransporteCsv:
    def __init__(self, nombre: str, url: str, session: requests.Session) -> None:
        self.nombre = nombre
        self._url = url
        self._session = session

    @property
    def url(self) -> str:
        return self._url

    def obtener_filas(self, timeout: float) -> list[FilaCruda]:
        response = _get(self._session, self._url, timeout)
        response.encoding = response.encoding or "utf-8"
        return parsear_csv(response.text)


class TransporteGspread:
    """Lectura autenticada con cuenta de servicio, acotada por el timeout del intento."""

    def __init__(self, client: SheetsLecturaClient, credentials_path: str, spreadsheet_id: str, hoja: str) -> None:
        self.nombre = "gspread"
        self._client = client
        self._credentials_path = credentials_path
        self._spreadsheet_id = spreadsheet_id
        self._hoja = hoja

    def obtener_filas(self, timeout: float) -> list[FilaCruda]:
        vincular(hoja=self._hoja)
        try:
            return self._client.leer_filas(
                self._credentials_path, self._spreadsheet_id, self._hoja, timeout=timeout
            )
        except requests.Timeout as exc:
            raise TransporteTimeoutError(f"Timeout tras {timeout}s leyendo la hoja con gspread") from exc


def construir_transportes_csv(spreadsheet_id: str, hoja: str, session: requests.Session) -> list[TransporteFilasPort]:
    """Vías CSV en orden fijo: directa, relay A, relay B, export alternativo vía relay A."""
    url_gviz = construir_url_gviz(spreadsheet_id, hoja)
    url_export = construir_url_export(spreadsheet_id, hoja)
    return [
        TransporteCsv("csv_directo", url_gviz, session),
        TransporteCsv("csv_corsproxy", envolver_en_relay(RELAY_CORSPROXY, url_gviz), session),
        TransporteCsv("csv_allorigins", envolver_en_relay(RELAY_ALLORIGINS, url_gviz), session),
        TransporteCsv("csv_export_corsproxy", envolver_en_relay(RELAY_CORSPROXY, url_export), session),
    ]


def construir_cadena_lectura(
    config: ConfiguracionGarantias,
    *,
    hoja: str | None = None,
    incluir_script: bool = True,
    session: requests.Session | None = None,
    sheets_client_factory: Callable[[], SheetsLecturaClient] = SheetsLecturaClient,
) -> list[TransporteFilasPort]:
    resolved_session: Any = session or requests.Session()
    hoja_objetivo = hoja or config.hoja
    transportes: list[TransporteFilasPort] = []
    if incluir_script and config.script_url:
        transportes.append(TransporteScriptJson(config.script_url, resolved_session))
    if config.spreadsheet_id and config.credentials_path:
        transportes.append(
            TransporteGspread(
                sheets_client_factory(),
                config.credentials_path,
                config.spreadsheet_id,
                hoja_objetivo,
            )
        )
    if config.spreadsheet_id:
        transportes.extend(construir_transportes_csv(config.spreadsheet_id, hoja_objetivo, resolved_session))
    logger.debug("Cadena de lectura para '%s': %s", hoja_objetivo, [t.nombre for t in transportes])
    return transportes

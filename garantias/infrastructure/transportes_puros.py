from __future__ import annotations

import csv
import io
from typing import Any
from urllib.parse import quote

from garantias.domain.transport_errors import PayloadInvalidoError, RespuestaHtmlError

RELAY_CORSPROXY = "https://corsproxy.io/?"
RELAY_ALLORIGINS = "https://api.allorigins.win/raw?url="

_MARCADORES_HTML = ("<!doctype", "<html")


def construir_url_gviz(spreadsheet_id: str, hoja: str) -> str:
    return (
        f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}"
        f"/gviz/tq?tqx=out:csv&sheet={quote(hoja)}"
    )


def construir_url_export(spreadsheet_id: str, hoja: str) -> str:
    return (
        f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}"
        f"/export?format=csv&sheet={quote(hoja)}"
    )


def envolver_en_relay(relay: str, url: str) -> str:
    return f"{relay}{quote(url, safe='')}"


def es_respuesta_html(cuerpo: str) -> bool:
    inicio = cuerpo.lstrip()[:20].lower()
    return inicio.startswith(_MARCADORES_HTML)


def validar_cuerpo_texto(cuerpo: str) -> str:
    if es_respuesta_html(cuerpo):
        raise RespuestaHtmlError("El origen devolvió HTML en lugar de datos.")
    return cuerpo


def parsear_csv(cuerpo: str) -> list[dict[str, str]]:
    """Parsea un CSV con cabecera; normaliza cabeceras y omite líneas vacías."""
    validar_cuerpo_texto(cuerpo)
    try:
        lector = csv.reader(io.StringIO(cuerpo.lstrip("\ufeff")), strict=True)
        filas = [fila for fila in lector if any(celda.strip() for celda in fila)]
    except csv.Error as exc:
        raise PayloadInvalidoError(f"CSV mal formado: {exc}") from exc
    if not filas:
        return []
    cabeceras = [celda.strip().upper() for celda in filas[0]]
    registros: list[dict[str, str]] = []
    for fila in filas[1:]:
        registro: dict[str, str] = {}
        for posicion, cabecera in enumerate(cabeceras):
            if not cabecera:
                continue
            registro[cabecera] = fila[posicion].strip() if posicion < len(fila) else ""
        registros.append(registro)
    return registros


def validar_payload_script(payload: Any) -> list[dict[str, Any]]:
    """Acepta solo una lista de objetos sin marcador de error."""
    if isinstance(payload, dict):
        if "error" in payload:
            raise PayloadInvalidoError(f"El script devolvió un error: {payload['error']}")
        payload = payload.get("data", payload.get("rows"))
    if not isinstance(payload, list):
        raise PayloadInvalidoError("El script no devolvió una lista de filas.")
    filas: list[dict[str, Any]] = []
    for elemento in payload:
        if not isinstance(elemento, dict):
            raise PayloadInvalidoError("El script devolvió una fila que no es un objeto.")
        if "error" in elemento:
            raise PayloadInvalidoError(f"El script devolvió un error: {elemento['error']}")
        filas.append(elemento)
    return filas


def filas_desde_valores(valores: list[list[Any]]) -> list[dict[str, str]]:
    """Convierte la matriz de `get_all_values` en filas con cabecera normalizada."""
    if not valores:
        return []
    cabeceras = [str(celda or "").strip().upper() for celda in valores[0]]
    filas: list[dict[str, str]] = []
    for valores_fila in valores[1:]:
        celdas = ["" if celda is None else str(celda).strip() for celda in valores_fila]
        if not any(celdas):
            continue
        fila = {
            cabecera: celdas[posicion] if posicion < len(celdas) else ""
            for posicion, cabecera in enumerate(cabeceras)
            if cabecera
        }
        filas.append(fila)
    return filas


def calcular_backoff_lectura(intento: int, base_segundos: float = 1) -> float:
    return base_segundos * (2 ** (intento - 1))

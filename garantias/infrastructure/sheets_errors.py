from __future__ import annotations

import json
from typing import Optional

import gspread
from google.auth.exceptions import DefaultCredentialsError

from garantias.domain.transport_errors import (
    SheetsApiDisabledError,
    SheetsConfigError,
    SheetsCredentialsError,
    SheetsNotFoundError,
    SheetsPermissionError,
    SheetsRateLimitError,
)


def extract_response_status_code(ex: Exception) -> int | None:
    response = getattr(ex, "response", None)
    return getattr(response, "status_code", None)


def _extract_api_error_text(ex: gspread.exceptions.APIError) -> str:
    response = getattr(ex, "response", None)
    if response is not None:
        text = getattr(response, "text", "")
        if text:
            return text
    return str(ex)


def _credentials_not_found_message(path: Optional[str]) -> str:
    if path:
        return f"No se encuentra el archivo de credenciales en {path}."
    return "No se encuentra el archivo de credenciales."


def _is_rate_limited_api_error(text_lower: str, status_code: int | None) -> bool:
    if status_code in {429, 500, 503}:
        return True
    return any(
        token in text_lower
        for token in (
            "[429]",
            "resource_exhausted",
            "rate_limit_exceeded",
            "quota exceeded",
        )
    )


def classify_api_error(text_lower: str, status_code: int | None) -> Exception:
    if _is_rate_limited_api_error(text_lower, status_code):
        return SheetsRateLimitError("Límite de Google Sheets alcanzado. Espera 1 minuto y reintenta.")
    if "google sheets api has not been used" in text_lower or "it is disabled" in text_lower:
        return SheetsApiDisabledError("La API de Google Sheets no está habilitada en tu proyecto de Google Cloud.")
    if status_code == 404 or "[404]" in text_lower or "requested entity was not found" in text_lower:
        return SheetsNotFoundError("El Spreadsheet ID no es válido o la hoja no existe.")
    if status_code == 403 or "[403]" in text_lower or "permission_denied" in text_lower:
        return SheetsPermissionError("La hoja no está compartida con la cuenta de servicio.")
    return SheetsConfigError(text_lower)


def map_gspread_exception(ex: Exception) -> Exception:
    if isinstance(ex, SheetsRateLimitError | SheetsConfigError):
        return ex
    if isinstance(ex, gspread.exceptions.WorksheetNotFound):
        return SheetsNotFoundError(f"No existe la hoja '{ex}'.")
    if isinstance(ex, gspread.exceptions.APIError):
        text = _extract_api_error_text(ex)
        return classify_api_error(text.strip().lower(), extract_response_status_code(ex))
    if isinstance(ex, FileNotFoundError):
        return SheetsCredentialsError(_credentials_not_found_message(getattr(ex, "filename", None)))
    if isinstance(ex, json.JSONDecodeError | DefaultCredentialsError | ValueError):
        return SheetsCredentialsError("El archivo de credenciales no es válido. Revisa su contenido.")
    return SheetsConfigError(str(ex))

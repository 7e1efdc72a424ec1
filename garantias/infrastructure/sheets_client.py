from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, TypeVar

import gspread
from google.auth.exceptions import DefaultCredentialsError

from garantias.bootstrap.logging import log_operational_error
from garantias.domain.transport_errors import SheetsPermissionError, SheetsRateLimitError
from garantias.infrastructure.sheets_errors import map_gspread_exception
from garantias.infrastructure.transportes_puros import calcular_backoff_lectura, filas_desde_valores

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_BASE_BACKOFF_SECONDS = 1

T = TypeVar("T")


class SheetsLecturaClient:
    """Lectura de una hoja con cuenta de servicio.

    Solo lee: las escrituras pasan siempre por el endpoint de Apps Script.
    """

    def __init__(
        self,
        *,
        service_account: Callable[..., Any] = gspread.service_account,
        sleep: Callable[[float], None] = time.sleep,
        reloj: Callable[[], float] = time.monotonic,
    ) -> None:
        self._service_account = service_account
        self._sleep = sleep
        self._reloj = reloj
        self._clientes: dict[str, Any] = {}
        self._spreadsheets: dict[tuple[str, str], gspread.Spreadsheet] = {}

    def leer_filas(
        self,
        credentials_path: str,
        spreadsheet_id: str,
        hoja: str,
        *,
        timeout: float | None = None,
    ) -> list[dict[str, str]]:
        """Lee todos los valores de `hoja`.

        Con `timeout` cada petición HTTP de gspread queda acotada y los
        reintentos por rate limit no pueden superar ese plazo total.
        """
        limite = None if timeout is None else self._reloj() + timeout
        client = self._cliente(credentials_path)
        client.set_timeout(timeout)
        spreadsheet = self._abrir(client, credentials_path, spreadsheet_id, limite)
        worksheet = self._with_rate_limit_retry(
            f"spreadsheet.worksheet({hoja})",
            lambda: spreadsheet.worksheet(hoja),
            spreadsheet_id=spreadsheet_id,
            limite=limite,
        )
        valores = self._with_rate_limit_retry(
            f"worksheet.get_all_values({hoja})",
            worksheet.get_all_values,
            spreadsheet_id=spreadsheet_id,
            limite=limite,
        )
        return filas_desde_valores(valores)

    def _cliente(self, credentials_path: str) -> Any:
        if credentials_path in self._clientes:
            return self._clientes[credentials_path]
        logger.info("Conectando a Google Sheets con cuenta de servicio")
        try:
            client = self._service_account(filename=credentials_path)
        except (FileNotFoundError, json.JSONDecodeError, DefaultCredentialsError, ValueError, OSError) as exc:
            raise map_gspread_exception(exc) from exc
        self._clientes[credentials_path] = client
        return client

    def _abrir(
        self, client: Any, credentials_path: str, spreadsheet_id: str, limite: float | None
    ) -> gspread.Spreadsheet:
        # La hoja abierta comparte el cliente HTTP, así que hereda su timeout actual.
        clave = (credentials_path, spreadsheet_id)
        if clave not in self._spreadsheets:
            self._spreadsheets[clave] = self._with_rate_limit_retry(
                "open_by_key",
                lambda: client.open_by_key(spreadsheet_id),
                spreadsheet_id=spreadsheet_id,
                limite=limite,
            )
        return self._spreadsheets[clave]

    def _with_rate_limit_retry(
        self,
        operation_name: str,
        operation: Callable[[], T],
        *,
        spreadsheet_id: str | None = None,
        limite: float | None = None,
    ) -> T:
        for attempt in range(1, _MAX_RETRIES + 1):
            try:
                return operation()
            except (gspread.exceptions.APIError, gspread.exceptions.WorksheetNotFound) as exc:
                mapped_error = map_gspread_exception(exc)
                if not isinstance(mapped_error, SheetsRateLimitError):
                    if isinstance(mapped_error, SheetsPermissionError):
                        self._log_permission_error(mapped_error, spreadsheet_id=spreadsheet_id)
                    raise mapped_error from exc
                if attempt >= _MAX_RETRIES:
                    logger.error(
                        "Google Sheets rate limit persistente en %s tras %s intentos.",
                        operation_name,
                        attempt,
                    )
                    raise mapped_error from exc
                backoff_seconds = calcular_backoff_lectura(attempt, _BASE_BACKOFF_SECONDS)
                if limite is not None and self._reloj() + backoff_seconds > limite:
                    logger.warning("Rate limit en %s; el reintento excede el timeout del intento", operation_name)
                    raise mapped_error from exc
                logger.warning(
                    "Rate limit en Google Sheets (%s). intento=%s/%s backoff=%.3fs",
                    operation_name,
                    attempt,
                    _MAX_RETRIES,
                    backoff_seconds,
                )
                self._sleep(backoff_seconds)
        raise RuntimeError("No se pudo completar la operación de Google Sheets.")

    @staticmethod
    def _log_permission_error(error: SheetsPermissionError, *, spreadsheet_id: str | None = None) -> None:
        log_operational_error(
            logger,
            "Lectura fallida: permisos insuficientes en Google Sheets",
            exc=error,
            extra={
                "operation": "sheets_permission_check",
                "spreadsheet_id": spreadsheet_id,
            },
        )

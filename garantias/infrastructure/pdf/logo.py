from __future__ import annotations

import logging

import requests

logger = logging.getLogger(__name__)

TIMEOUT_LOGO_SEGUNDOS = 3.0


class DescargadorLogo:
    """Obtiene el logo del informe; cualquier fallo equivale a informe sin logo."""

    def __init__(
        self,
        url: str,
        session: requests.Session | None = None,
        timeout: float = TIMEOUT_LOGO_SEGUNDOS,
    ) -> None:
        self._url = url.strip()
        self._session = session or requests.Session()
        self._timeout = timeout

    def __call__(self) -> bytes | None:
        if not self._url:
            return None
        try:
            response = self._session.get(self._url, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.warning("No se pudo descargar el logo (%s): %s", self._url, exc)
            return None
        if not response.ok or not response.content:
            logger.warning("Logo no disponible (%s): HTTP %s", self._url, response.status_code)
            return None
        return response.content

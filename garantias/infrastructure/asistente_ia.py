from __future__ import annotations

import json
import logging
from typing import Any, Callable, Sequence

import anthropic

from garantias.bootstrap.logging import log_operational_error
from garantias.domain.mensajes_ia import (
    MENSAJE_ERROR_CONSULTA,
    MENSAJE_IA_NO_DISPONIBLE,
    MENSAJE_SIN_ANALISIS,
    MENSAJE_SIN_RESPUESTA,
)
from garantias.domain.models import RegistroGarantia

logger = logging.getLogger(__name__)

MUESTRA_RESUMEN = 50
MUESTRA_PREGUNTA = 30
MAX_TOKENS = 1024


PROMPT_RESUMEN = """Actúa como un analista de datos experto para una tienda de celulares llamada K24.
Analiza los siguientes datos de garantías (muestra de hasta {limite} registros):
{datos}

Contexto del reporte: {contexto}

Genera un resumen ejecutivo breve (máximo 2 párrafos) en español, destacando:
1. Fallas más comunes.
2. Tiendas con más incidencias.
3. Recomendaciones breves para reducir garantías.

Usa un tono profesional. Texto plano, sin markdown."""

PROMPT_PREGUNTA = """Tienes acceso a una lista de garantías de celulares:
{datos}

Responde la siguiente pregunta del usuario basándote SOLAMENTE en estos datos:
"{pregunta}"

Sé conciso y directo."""


def muestra_resumen(registros: Sequence[RegistroGarantia]) -> list[dict[str, Any]]:
    return [
        {
            "equipo": registro.nombre_equipo,
            "falla": registro.falla,
            "tienda": registro.tienda,
            "precio": registro.precio,
        }
        for registro in registros[:MUESTRA_RESUMEN]
    ]


def muestra_pregunta(registros: Sequence[RegistroGarantia]) -> list[str]:
    return [
        f"{registro.nombre_equipo} ({registro.marca_equipo}): {registro.falla} en {registro.tienda}"
        for registro in registros[:MUESTRA_PREGUNTA]
    ]


class AsistenteIA:
    """Resúmenes y preguntas sobre los datos mediante la API de Anthropic.

    Ningún error sale de aquí: sin API key o ante cualquier fallo se devuelve
    un texto fijo de disculpa.
    """

    def __init__(
        self,
        api_key: str,
        modelo: str,
        *,
        client_factory: Callable[..., Any] = anthropic.Anthropic,
    ) -> None:
        self._api_key = api_key.strip()
        self._modelo = modelo
        self._client_factory = client_factory
        self._client: Any | None = None

    @property
    def habilitado(self) -> bool:
        return bool(self._api_key)

    def generar_resumen(self, registros: Sequence[RegistroGarantia], contexto: str) -> str:
        if not self.habilitado:
            return MENSAJE_IA_NO_DISPONIBLE
        prompt = PROMPT_RESUMEN.format(
            limite=MUESTRA_RESUMEN,
            datos=json.dumps(muestra_resumen(registros), ensure_ascii=False),
            contexto=contexto,
        )
        try:
            texto = self._completar(prompt)
        except Exception as exc:  # noqa: BLE001
            log_operational_error(logger, "Error generando el resumen con IA", exc=exc)
            return MENSAJE_IA_NO_DISPONIBLE
        return texto or MENSAJE_SIN_ANALISIS

    def responder_pregunta(self, registros: Sequence[RegistroGarantia], pregunta: str) -> str:
        if not self.habilitado:
            return MENSAJE_ERROR_CONSULTA
        prompt = PROMPT_PREGUNTA.format(
            datos=json.dumps(muestra_pregunta(registros), ensure_ascii=False),
            pregunta=pregunta.strip(),
        )
        try:
            texto = self._completar(prompt)
        except Exception as exc:  # noqa: BLE001
            log_operational_error(logger, "Error consultando a la IA", exc=exc)
            return MENSAJE_ERROR_CONSULTA
        return texto or MENSAJE_SIN_RESPUESTA

    def _completar(self, prompt: str) -> str:
        if self._client is None:
            self._client = self._client_factory(api_key=self._api_key)
        response = self._client.messages.create(
            model=self._modelo,
            max_tokens=MAX_TOKENS,
            messages=[{"role": "user", "content": prompt}],
        )
        partes = [getattr(bloque, "text", "") for bloque in getattr(response, "content", []) or []]
        return "".join(partes).strip()

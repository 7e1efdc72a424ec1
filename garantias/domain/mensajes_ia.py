from __future__ import annotations

MENSAJE_IA_NO_DISPONIBLE = "El servicio de IA no está disponible en este momento. Verifique su API Key."
MENSAJE_ERROR_CONSULTA = "Error al consultar la IA."
MENSAJE_SIN_ANALISIS = "No se pudo generar el análisis."
MENSAJE_SIN_RESPUESTA = "No encontré una respuesta clara."

MENSAJES_DE_FALLO = frozenset(
    {MENSAJE_IA_NO_DISPONIBLE, MENSAJE_ERROR_CONSULTA, MENSAJE_SIN_ANALISIS, MENSAJE_SIN_RESPUESTA}
)


def es_respuesta_fallida(texto: str | None) -> bool:
    return not texto or texto.strip() in MENSAJES_DE_FALLO

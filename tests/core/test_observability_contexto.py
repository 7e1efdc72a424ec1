from __future__ import annotations

import logging

from garantias.core.errors import AppError, ExternalServiceError, TransientExternalError, ValidationError
from garantias.core.observability import OperationContext, get_correlation_id, log_event, traza_actual, vincular
from garantias.domain.transport_errors import TransporteTimeoutError


def test_operation_context_restablece_correlation_id() -> None:
    previo = get_correlation_id()

    with OperationContext("carga") as operation:
        assert get_correlation_id() == operation.correlation_id
        with OperationContext("interna") as interna:
            assert get_correlation_id() == interna.correlation_id
        assert get_correlation_id() == operation.correlation_id

    assert get_correlation_id() == previo


def test_log_event_usa_correlation_id_del_contexto() -> None:
    logger = logging.getLogger("garantias.test")

    with OperationContext("informe") as operation:
        evento = log_event(logger, "informe_generado", {"registros": 3})

    assert evento["event"] == "informe_generado"
    assert evento["operacion"] == "informe"
    assert evento["correlation_id"] == operation.correlation_id
    assert evento["payload"] == {"registros": 3}


def test_taxonomia_de_errores() -> None:
    assert issubclass(ValidationError, AppError)
    assert issubclass(TransporteTimeoutError, ExternalServiceError)
    assert issubclass(TransporteTimeoutError, TransientExternalError)


def test_vincular_acumula_campos_de_la_garantia() -> None:
    with OperationContext("carga_garantias", hoja="BD"):
        vincular(transporte="script")
        vincular(transporte="csv_directo", desconocido="x", imei="")
        traza = traza_actual()
        assert traza is not None
        assert traza.campos == {"hoja": "BD", "transporte": "csv_directo"}

        with OperationContext("interna"):
            assert traza_actual().campos == {}

        assert traza_actual().campos == {"hoja": "BD", "transporte": "csv_directo"}


def test_vincular_fuera_de_operacion_no_hace_nada() -> None:
    antes = traza_actual()

    vincular(transporte="script")

    assert traza_actual() is antes

from __future__ import annotations

from garantias.core.errors import ExternalServiceError, InfraError, TransientExternalError


class TransporteError(ExternalServiceError):
    pass


class TransporteTimeoutError(TransporteError, TransientExternalError):
    pass


class RespuestaHtmlError(TransporteError):
    """El relay devolvió una página HTML de error en lugar de datos."""


class PayloadInvalidoError(TransporteError):
    pass


class SheetsConfigError(InfraError):
    pass


class SheetsApiDisabledError(SheetsConfigError):
    pass


class SheetsPermissionError(SheetsConfigError):
    pass


class SheetsNotFoundError(SheetsConfigError):
    pass


class SheetsCredentialsError(SheetsConfigError):
    pass


class SheetsRateLimitError(TransientExternalError):
    pass

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from garantias.domain.models import ConfiguracionGarantias

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEGUNDOS = ConfiguracionGarantias().timeout_segundos


def resolve_appdata_dir() -> Path:
    env_dir = os.environ.get("LOCALAPPDATA")
    if env_dir:
        base_dir = Path(env_dir)
    else:
        base_dir = Path.home() / ".local" / "share"
    return base_dir / "GarantiasK24"


class ConfigStore:
    """Persistencia de la configuración en `config.json` del perfil de usuario.

    La API key de IA no se guarda nunca en disco; solo llega por entorno.
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        self._base_dir = base_dir or resolve_appdata_dir()
        self._config_path = self._base_dir / "config.json"

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(self) -> ConfiguracionGarantias | None:
        if not self._config_path.exists():
            return None
        try:
            payload = json.loads(self._config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.exception("No se pudo leer config.json: %s", exc)
            return None
        if not isinstance(payload, dict):
            logger.error("config.json no contiene un objeto JSON")
            return None
        defaults = ConfiguracionGarantias()
        return ConfiguracionGarantias(
            script_url=str(payload.get("script_url", "")).strip(),
            spreadsheet_id=str(payload.get("spreadsheet_id", "")).strip(),
            hoja=str(payload.get("hoja", "")).strip() or defaults.hoja,
            hoja_historial=str(payload.get("hoja_historial", "")).strip(),
            credentials_path=str(payload.get("credentials_path", "")).strip(),
            timeout_segundos=_parse_timeout(payload.get("timeout_segundos")),
            logo_url=str(payload.get("logo_url", "")).strip(),
            modelo_ia=str(payload.get("modelo_ia", "")).strip() or defaults.modelo_ia,
        )

    def save(self, config: ConfiguracionGarantias) -> ConfiguracionGarantias:
        payload = {
            "script_url": config.script_url,
            "spreadsheet_id": config.spreadsheet_id,
            "hoja": config.hoja,
            "hoja_historial": config.hoja_historial,
            "credentials_path": config.credentials_path,
            "timeout_segundos": config.timeout_segundos,
            "logo_url": config.logo_url,
            "modelo_ia": config.modelo_ia,
        }
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("Configuración guardada en %s", self._config_path)
        return config


def _parse_timeout(value: object) -> float:
    try:
        timeout = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT_SEGUNDOS
    return timeout if timeout > 0 else DEFAULT_TIMEOUT_SEGUNDOS

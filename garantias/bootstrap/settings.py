from __future__ import annotations

import os
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Mapping

from garantias.domain.models import ConfiguracionGarantias
from garantias.domain.ports import ConfigStorePort

_ENV_CAMPOS: dict[str, str] = {
    "GARANTIAS_SCRIPT_URL": "script_url",
    "GARANTIAS_SHEET_ID": "spreadsheet_id",
    "GARANTIAS_HOJA": "hoja",
    "GARANTIAS_HOJA_HISTORIAL": "hoja_historial",
    "GARANTIAS_CREDENTIALS": "credentials_path",
    "GARANTIAS_LOGO_URL": "logo_url",
    "ANTHROPIC_API_KEY": "anthropic_api_key",
    "GARANTIAS_MODELO_IA": "modelo_ia",
}


def project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def resolve_log_dir() -> Path:
    candidates: list[Path] = []
    env_dir = os.environ.get("GARANTIAS_LOG_DIR")
    if env_dir:
        candidates.append(Path(env_dir))
    candidates.append(project_root() / "logs")
    candidates.append(Path(tempfile.gettempdir()) / "GarantiasK24" / "logs")

    for candidate in candidates:
        try:
            candidate.mkdir(parents=True, exist_ok=True)
            test_file = candidate / "_write_test.tmp"
            test_file.write_text("ok", encoding="utf-8")
            test_file.unlink(missing_ok=True)
            return candidate
        except OSError:
            continue

    fallback = project_root()
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def cargar_configuracion(
    store: ConfigStorePort | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConfiguracionGarantias:
    """Entorno > config.json > valores por defecto."""
    env = os.environ if environ is None else environ
    config = (store.load() if store is not None else None) or ConfiguracionGarantias()

    cambios: dict[str, object] = {}
    for variable, campo in _ENV_CAMPOS.items():
        valor = env.get(variable, "").strip()
        if valor:
            cambios[campo] = valor

    timeout_raw = env.get("GARANTIAS_TIMEOUT_SEGUNDOS", "").strip()
    if timeout_raw:
        try:
            timeout = float(timeout_raw)
        except ValueError:
            timeout = 0.0
        if timeout > 0:
            cambios["timeout_segundos"] = timeout

    return replace(config, **cambios) if cambios else config

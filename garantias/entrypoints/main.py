from __future__ import annotations

import argparse
import faulthandler
import logging
import sys
from pathlib import Path

from garantias.bootstrap.logging import configure_logging, install_exception_hook
from garantias.bootstrap.settings import cargar_configuracion, resolve_log_dir
from garantias.domain.models import ConfiguracionGarantias
from garantias.entrypoints.ui_main import run_ui
from garantias.infrastructure.local_config import ConfigStore


def _run_selfcheck(config: ConfiguracionGarantias, log_dir: Path) -> int:
    logger = logging.getLogger(__name__)
    errors = 0

    if not config.script_url and not config.spreadsheet_id:
        logger.error("No hay fuente de datos: configure GARANTIAS_SCRIPT_URL o GARANTIAS_SHEET_ID")
        errors += 1
    if config.credentials_path and not Path(config.credentials_path).exists():
        logger.error("No se encontró el fichero de credenciales: %s", config.credentials_path)
        errors += 1
    if not config.escritura_habilitada:
        logger.warning("Sin URL de script: los cambios solo se aplicarán localmente")
    if not config.anthropic_api_key:
        logger.warning("Sin ANTHROPIC_API_KEY: el asistente IA estará deshabilitado")

    if errors:
        crash_path = log_dir / "crash.log"
        logger.error("Selfcheck fallo con %s error(es). crash.log=%s", errors, crash_path)
        return 1
    logger.info("Selfcheck OK.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Control de Garantías - Tiendas K24")
    parser.add_argument("--selfcheck", action="store_true", help="Valida la configuración sin abrir UI")
    args = parser.parse_args(argv)

    log_dir = resolve_log_dir()
    configure_logging(log_dir)
    install_exception_hook(log_dir)
    faulthandler.enable()

    logger = logging.getLogger(__name__)
    logger.info("Log dir: %s", log_dir)
    logger.info("Python: %s", sys.version)
    logger.info("CWD: %s", Path.cwd())

    if args.selfcheck:
        return _run_selfcheck(cargar_configuracion(ConfigStore()), log_dir)
    return run_ui()

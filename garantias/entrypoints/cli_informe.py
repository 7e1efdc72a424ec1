from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from garantias.bootstrap.container import AppContainer, build_container
from garantias.bootstrap.logging import configure_logging
from garantias.bootstrap.settings import resolve_log_dir
from garantias.core.errors import ValidationError
from garantias.domain.models import FiltroGarantias


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Resumen e informe PDF de garantías K24")
    parser.add_argument("--desde", default="", help="Fecha mínima (YYYY-MM-DD)")
    parser.add_argument("--hasta", default="", help="Fecha máxima (YYYY-MM-DD)")
    parser.add_argument("--tienda", default="", help="Tienda exacta")
    parser.add_argument("--estado", default="", choices=["", "pendiente", "procesado", "entregado"])
    parser.add_argument("--buscar", default="", help="Texto libre sobre equipo, marca o IMEI")
    parser.add_argument("--historial", action="store_true", help="Consulta los registros archivados")
    parser.add_argument("--pdf", type=Path, default=None, metavar="DEST", help="Genera el PDF en DEST")
    parser.add_argument("--ia", action="store_true", help="Incluye el resumen IA en el PDF")
    parser.add_argument("--pregunta", default="", help="Pregunta libre al asistente IA")
    return parser


def main(argv: list[str] | None = None, container: AppContainer | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(resolve_log_dir())
    logger = logging.getLogger("garantias.cli_informe")

    resolved = container or build_container()
    gestion = resolved.gestion
    carga = gestion.cargar()
    gestion.alternar_historial(args.historial)
    filtro = FiltroGarantias(
        fecha_desde=args.desde,
        fecha_hasta=args.hasta,
        tienda=args.tienda,
        busqueda=args.buscar,
        estado=args.estado,
    )
    gestion.aplicar_filtro(filtro)
    vista = gestion.vista()

    salida: dict[str, object] = {
        "origen": carga.origen,
        "intentos": [{"transporte": i.transporte, "ok": i.ok, "filas": i.filas} for i in carga.intentos],
        "registros": vista.estadisticas.total_registros,
        "valor_total": round(vista.estadisticas.valor_total, 2),
        "marca_top": vista.estadisticas.marca_top,
        "tienda_top": vista.estadisticas.tienda_top,
    }

    exit_code = 0
    if args.pdf is not None:
        try:
            resultado = resolved.informe.ejecutar(vista, filtro, args.pdf, incluir_resumen=args.ia)
        except ValidationError as exc:
            salida["pdf_error"] = str(exc)
            exit_code = 1
        except OSError:
            logger.exception("No se pudo escribir el PDF en %s", args.pdf)
            salida["pdf_error"] = f"No se pudo escribir el PDF en {args.pdf}"
            exit_code = 3
        else:
            salida["pdf"] = str(resultado.ruta)
            salida["pdf_con_resumen"] = resultado.con_resumen

    if args.pregunta.strip():
        salida["respuesta_ia"] = resolved.asistente.responder_pregunta(vista.registros, args.pregunta)

    sys.stdout.write(json.dumps(salida, ensure_ascii=False, indent=2) + "\n")
    logger.info("Informe CLI finalizado", extra={"extra": salida})
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())

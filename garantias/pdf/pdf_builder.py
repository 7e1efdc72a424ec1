from __future__ import annotations

import io
from pathlib import Path
from typing import Iterable
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import (
    Image,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from garantias.domain.models import ContenidoInforme, RegistroGarantia

CABECERAS = ["Fecha", "Equipo", "Tienda", "IMEI Malo", "Estado", "Procesado", "Obs", "Precio"]
COLUMNAS_CM = [2.4, 4.6, 3.2, 3.8, 2.6, 2.2, 5.2, 2.6]
COLOR_CABECERA = colors.HexColor("#1E293B")
COLOR_FILA_ALTERNA = colors.HexColor("#F1F5F9")
LOGO_MAX_ALTO = 2.0 * cm
LOGO_MAX_ANCHO = 6.0 * cm


def formatear_moneda(valor: float) -> str:
    return f"${valor:,.2f}"


def construir_pdf_informe(contenido: ContenidoInforme, destino: Path) -> Path:
    if not contenido.registros:
        raise ValueError("No hay registros para generar el PDF.")

    destino = _ensure_pdf_extension(destino)
    destino.parent.mkdir(parents=True, exist_ok=True)

    doc = SimpleDocTemplate(
        str(destino),
        pagesize=landscape(A4),
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
        leftMargin=1.5 * cm,
        rightMargin=1.5 * cm,
        title=contenido.titulo,
    )
    styles = _estilos()

    story: list = []
    logo = _logo_flowable(contenido.logo)
    if logo is not None:
        story.extend([logo, Spacer(1, 0.3 * cm)])
    story.append(Paragraph(escape(contenido.titulo), styles["Titulo"]))
    for linea in contenido.metadatos:
        story.append(Paragraph(escape(linea), styles["Meta"]))
    story.append(Spacer(1, 0.4 * cm))

    if contenido.resumen:
        story.append(Paragraph("Análisis Inteligente (IA)", styles["Seccion"]))
        for parrafo in _parrafos(contenido.resumen):
            story.append(Paragraph(escape(parrafo), styles["Body"]))
        story.append(Spacer(1, 0.3 * cm))

    story.append(_construir_tabla(contenido.registros, styles))
    story.append(Spacer(1, 0.5 * cm))
    story.append(Paragraph(f"Registros en este reporte: {len(contenido.registros)}", styles["Pie"]))
    story.append(
        Paragraph(
            f"Valor Inventario (Filtrado): {formatear_moneda(contenido.estadisticas.valor_total)}",
            styles["Pie"],
        )
    )

    doc.build(story)
    return destino


def _estilos():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="Titulo", parent=styles["Title"], fontSize=16, spaceAfter=8))
    styles.add(ParagraphStyle(name="Meta", parent=styles["BodyText"], fontSize=9, leading=12, textColor=colors.grey))
    styles.add(ParagraphStyle(name="Seccion", parent=styles["Heading3"], spaceBefore=4, spaceAfter=4))
    styles.add(ParagraphStyle(name="Body", parent=styles["BodyText"], leading=14, spaceAfter=6))
    styles.add(ParagraphStyle(name="Celda", parent=styles["BodyText"], fontSize=8, leading=10))
    styles.add(ParagraphStyle(name="Pie", parent=styles["BodyText"], fontName="Helvetica-Bold", fontSize=10))
    return styles


def _construir_tabla(registros: Iterable[RegistroGarantia], styles) -> Table:
    data: list[list] = [CABECERAS]
    for fila in _build_table_data(registros):
        data.append([Paragraph(escape(valor), styles["Celda"]) for valor in fila])

    table = Table(data, repeatRows=1, colWidths=[ancho * cm for ancho in COLUMNAS_CM])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), COLOR_CABECERA),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, 0), 9),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, COLOR_FILA_ALTERNA]),
            ]
        )
    )
    return table


def _build_table_data(registros: Iterable[RegistroGarantia]) -> list[list[str]]:
    filas: list[list[str]] = []
    for registro in registros:
        filas.append(
            [
                registro.fecha,
                f"{registro.nombre_equipo} ({registro.marca_equipo})" if registro.marca_equipo else registro.nombre_equipo,
                registro.tienda,
                registro.imei_malo,
                registro.estado.etiqueta,
                "SI" if registro.equipo_procesado else "NO",
                registro.observaciones or "-",
                formatear_moneda(registro.precio),
            ]
        )
    return filas


def _parrafos(texto: str) -> list[str]:
    return [bloque.strip() for bloque in texto.split("\n\n") if bloque.strip()]


def _logo_flowable(logo: bytes | None) -> Image | None:
    if not logo:
        return None
    try:
        reader = ImageReader(io.BytesIO(logo))
        ancho, alto = reader.getSize()
    except Exception:  # noqa: BLE001
        return None
    if not ancho or not alto:
        return None
    escala = min(LOGO_MAX_ANCHO / ancho, LOGO_MAX_ALTO / alto)
    imagen = Image(io.BytesIO(logo), width=ancho * escala, height=alto * escala)
    imagen.hAlign = "LEFT"
    return imagen


def _ensure_pdf_extension(path: Path) -> Path:
    if path.suffix.lower() != ".pdf":
        return path.with_suffix(".pdf")
    return path

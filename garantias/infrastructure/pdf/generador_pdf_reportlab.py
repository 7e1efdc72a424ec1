from __future__ import annotations

from pathlib import Path

from garantias.domain.models import ContenidoInforme
from garantias.domain.ports import GeneradorPdfPuerto
from garantias.pdf import pdf_builder


class GeneradorPdfReportlab(GeneradorPdfPuerto):
    def generar_informe(self, contenido: ContenidoInforme, destino: Path) -> Path:
        return pdf_builder.construir_pdf_informe(contenido, destino)

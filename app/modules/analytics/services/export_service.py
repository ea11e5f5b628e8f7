# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/services/export_service.py

Exportación del overview de analytics a CSV, XLSX y PDF.

- CSV: secciones separadas por línea en blanco (csv.writer, sin línea final)
- XLSX: openpyxl, una hoja por bloque
- PDF: ReportLab (canvas) con KPIs, categorías y listas críticas

El render de XLSX/PDF corre en un hilo (asyncio.to_thread) para no bloquear
el event loop. Los errores de render se propagan (500).

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

import asyncio
import csv
import io
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from ..filters import OverviewFilters
from ..schemas.analytics_schemas import ExportFormat, OverviewResponse
from .analytics_service import AnalyticsService

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "pdf": "application/pdf",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

WORKBOOK_CREATOR = "Instituto Move Marias"


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    media_type: str
    content: bytes


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════

def format_percentage(value: Optional[float]) -> str:
    """0.8512 → "85.12"; None/NaN → ""."""
    if value is None:
        return ""
    number = float(value)
    if math.isnan(number):
        return ""
    return f"{number * 100:.2f}"


def export_filename(ext: str, today: Optional[date] = None) -> str:
    day = today or datetime.now(timezone.utc).date()
    return f"analytics-{day.isoformat()}.{ext}"


def _cell(value) -> str:
    return "" if value is None else str(value)


# ═══════════════════════════════════════════════════════════════════════════════
# CSV
# ═══════════════════════════════════════════════════════════════════════════════

def build_csv(overview: OverviewResponse) -> str:
    """
    CSV multi-sección. Los valores con coma, comillas o salto de línea van
    entre comillas dobles (comillas internas duplicadas).
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    def section(title: Optional[str], header: Sequence[str], rows: Iterable[Sequence[str]], *, last: bool = False):
        if title:
            writer.writerow([title])
        writer.writerow(header)
        writer.writerows(rows)
        if not last:
            writer.writerow([])

    kpis = overview.kpis
    series = overview.series
    cat = overview.categorias
    listas = overview.listas

    section(None, ["Indicador", "Valor"], [
        ["Beneficiarias ativas", kpis.beneficiarias_ativas],
        ["Novas beneficiarias", kpis.novas_beneficiarias],
        ["Matriculas ativas", kpis.matriculas_ativas],
        ["Assiduidade media", format_percentage(kpis.assiduidade_media)],
        ["Consentimentos pendentes", kpis.consentimentos_pendentes],
    ])
    section("Serie novas beneficiarias", ["Data", "Quantidade"],
            ([p.t, _cell(p.v)] for p in series.novas_beneficiarias))
    section("Serie novas matriculas", ["Data", "Quantidade"],
            ([p.t, _cell(p.v)] for p in series.novas_matriculas))
    section("Assiduidade media", ["Data", "Taxa"],
            ([p.t, format_percentage(p.v)] for p in series.assiduidade_media))
    section("Assiduidade por projeto", ["Projeto", "Assiduidade"],
            ([i.projeto, format_percentage(i.valor)] for i in cat.assiduidade_por_projeto))
    section("Vulnerabilidades", ["Tipo", "Quantidade"],
            ([i.tipo, i.qtd] for i in cat.vulnerabilidades))
    section("Faixa etaria", ["Faixa", "Quantidade"],
            ([i.faixa, i.qtd] for i in cat.faixa_etaria))
    section("Bairros", ["Bairro", "Quantidade"],
            ([i.bairro, i.qtd] for i in cat.bairros))
    section("Capacidade por projeto", ["Projeto", "Ocupadas", "Capacidade"],
            ([i.projeto, i.ocupadas, i.capacidade] for i in cat.capacidade_projeto))
    section("Plano de acao por status", ["Status", "Quantidade"],
            ([i.status, i.qtd] for i in cat.plano_acao_status))
    section("Risco de evasao", ["Beneficiaria", "Projeto", "Turma", "Assiduidade"],
            ([i.beneficiaria, i.projeto, i.turma, format_percentage(i.assiduidade)] for i in listas.risco_evasao))
    section("Consentimentos pendentes ou revogados", ["Beneficiaria", "Tipo", "Desde"],
            ([i.beneficiaria, i.tipo, i.desde] for i in listas.consentimentos_pendentes),
            last=True)

    content = buffer.getvalue()
    return content[:-1] if content.endswith("\n") else content


# ═══════════════════════════════════════════════════════════════════════════════
# XLSX
# ═══════════════════════════════════════════════════════════════════════════════

def _add_sheet(wb: Workbook, title: str, columns: Sequence[tuple[str, int]], rows: Iterable[Sequence]):
    ws = wb.create_sheet(title=title)
    ws.append([name for name, _ in columns])
    for idx, (_, width) in enumerate(columns, start=1):
        ws.column_dimensions[ws.cell(row=1, column=idx).column_letter].width = width
        ws.cell(row=1, column=idx).font = Font(bold=True)
    for row in rows:
        ws.append(list(row))
    return ws


def build_xlsx(overview: OverviewResponse) -> bytes:
    """Libro con hojas KPIs, series, categorías y listas críticas."""
    wb = Workbook()
    wb.remove(wb.active)
    wb.properties.creator = WORKBOOK_CREATOR

    kpis = overview.kpis
    series = overview.series
    cat = overview.categorias
    listas = overview.listas

    _add_sheet(wb, "KPIs", [("Indicador", 40), ("Valor", 20)], [
        ("Beneficiárias ativas", kpis.beneficiarias_ativas),
        ("Novas beneficiárias", kpis.novas_beneficiarias),
        ("Matrículas ativas", kpis.matriculas_ativas),
        ("Assiduidade média", format_percentage(kpis.assiduidade_media)),
        ("Consentimentos pendentes", kpis.consentimentos_pendentes),
    ])
    _add_sheet(wb, "Série beneficiárias", [("Data", 18), ("Quantidade", 18)],
               ((p.t, p.v) for p in series.novas_beneficiarias))
    _add_sheet(wb, "Série matrículas", [("Data", 18), ("Quantidade", 18)],
               ((p.t, p.v) for p in series.novas_matriculas))
    _add_sheet(wb, "Assiduidade média", [("Data", 18), ("Taxa", 18)],
               ((p.t, format_percentage(p.v)) for p in series.assiduidade_media))

    categorias: List[tuple] = []
    categorias += [("Assiduidade por projeto", i.projeto, format_percentage(i.valor), None) for i in cat.assiduidade_por_projeto]
    categorias += [("Vulnerabilidades", i.tipo, i.qtd, None) for i in cat.vulnerabilidades]
    categorias += [("Faixa etária", i.faixa, i.qtd, None) for i in cat.faixa_etaria]
    categorias += [("Bairros", i.bairro, i.qtd, None) for i in cat.bairros]
    categorias += [("Capacidade por projeto", i.projeto, i.ocupadas, i.capacidade) for i in cat.capacidade_projeto]
    categorias += [("Plano de ação por status", i.status, i.qtd, None) for i in cat.plano_acao_status]
    _add_sheet(wb, "Categorias", [("Categoria", 30), ("Chave", 32), ("Valor", 24), ("Extra", 24)], categorias)

    criticas: List[tuple] = []
    criticas += [
        ("Risco de evasão", i.beneficiaria, i.projeto, i.turma, format_percentage(i.assiduidade))
        for i in listas.risco_evasao
    ]
    criticas += [
        ("Consentimentos", i.beneficiaria, i.tipo, i.desde, "")
        for i in listas.consentimentos_pendentes
    ]
    _add_sheet(
        wb,
        "Listas críticas",
        [("Lista", 32), ("Beneficiária", 32), ("Projeto", 26), ("Turma/Tipo", 26), ("Indicador", 18)],
        criticas,
    )

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


# ═══════════════════════════════════════════════════════════════════════════════
# PDF
# ═══════════════════════════════════════════════════════════════════════════════

def build_pdf(overview: OverviewResponse, generated_at: Optional[datetime] = None) -> bytes:
    """Resumen de una sola pieza: KPIs, tablas de categorías y listas críticas."""
    generated_at = generated_at or datetime.now(timezone.utc)

    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle("Resumo analítico")
    c.setAuthor(WORKBOOK_CREATOR)
    width, height = A4

    left_margin = 50
    bottom_margin = 50
    line_height = 15
    y = height - 50

    def ensure_space(lines: int = 1):
        nonlocal y
        if y - lines * line_height < bottom_margin:
            c.showPage()
            y = height - 50

    def draw_line(text: str, size: int = 10, indent: int = 0):
        nonlocal y
        ensure_space()
        c.setFont("Helvetica", size)
        c.drawString(left_margin + indent, y, text)
        y -= line_height

    def draw_heading(text: str):
        nonlocal y
        ensure_space(3)
        y -= 6
        c.setStrokeColorRGB(0.7, 0.7, 0.7)
        c.line(left_margin, y + line_height - 2, width - left_margin, y + line_height - 2)
        c.setFont("Helvetica-Bold", 12)
        c.drawString(left_margin, y, text)
        y -= line_height + 2

    def draw_table(header: Sequence[str], rows: Iterable[Sequence], col_width: float):
        nonlocal y
        ensure_space(2)
        c.setFont("Helvetica-Bold", 9)
        for idx, name in enumerate(header):
            c.drawString(left_margin + idx * col_width, y, name)
        y -= line_height
        empty = True
        for row in rows:
            empty = False
            ensure_space()
            c.setFont("Helvetica", 9)
            for idx, value in enumerate(row):
                c.drawString(left_margin + idx * col_width, y, _cell(value)[:40])
            y -= line_height
        if empty:
            draw_line("Sem dados no período.", size=9)

    # === ENCABEZADO ===
    c.setFont("Helvetica-Bold", 16)
    c.drawString(left_margin, y, "Resumo analítico")
    y -= 22
    c.setFillColorRGB(0.4, 0.4, 0.4)
    draw_line(f"{WORKBOOK_CREATOR} · gerado em {generated_at.strftime('%Y-%m-%d %H:%M UTC')}", size=9)
    c.setFillColorRGB(0, 0, 0)

    kpis = overview.kpis
    draw_heading("Indicadores")
    draw_table(["Indicador", "Valor"], [
        ("Beneficiárias ativas", kpis.beneficiarias_ativas),
        ("Novas beneficiárias", kpis.novas_beneficiarias),
        ("Matrículas ativas", kpis.matriculas_ativas),
        ("Assiduidade média (%)", format_percentage(kpis.assiduidade_media)),
        ("Consentimentos pendentes", kpis.consentimentos_pendentes),
    ], col_width=220)

    cat = overview.categorias
    draw_heading("Assiduidade por projeto")
    draw_table(["Projeto", "Assiduidade (%)"],
               ((i.projeto, format_percentage(i.valor)) for i in cat.assiduidade_por_projeto), col_width=220)
    draw_heading("Vulnerabilidades")
    draw_table(["Tipo", "Quantidade"], ((i.tipo, i.qtd) for i in cat.vulnerabilidades), col_width=220)
    draw_heading("Faixa etária")
    draw_table(["Faixa", "Quantidade"], ((i.faixa, i.qtd) for i in cat.faixa_etaria), col_width=220)
    draw_heading("Bairros")
    draw_table(["Bairro", "Quantidade"], ((i.bairro, i.qtd) for i in cat.bairros), col_width=220)
    draw_heading("Capacidade por projeto")
    draw_table(["Projeto", "Ocupadas", "Capacidade"],
               ((i.projeto, i.ocupadas, i.capacidade) for i in cat.capacidade_projeto), col_width=160)
    draw_heading("Plano de ação por status")
    draw_table(["Status", "Quantidade"], ((i.status, i.qtd) for i in cat.plano_acao_status), col_width=220)

    listas = overview.listas
    draw_heading("Risco de evasão")
    draw_table(["Beneficiária", "Projeto", "Turma", "Assiduidade (%)"],
               ((i.beneficiaria, i.projeto, i.turma, format_percentage(i.assiduidade)) for i in listas.risco_evasao),
               col_width=125)
    draw_heading("Consentimentos pendentes ou revogados")
    draw_table(["Beneficiária", "Tipo", "Desde"],
               ((i.beneficiaria, i.tipo, i.desde) for i in listas.consentimentos_pendentes), col_width=160)

    c.showPage()
    c.save()
    return buffer.getvalue()


# ═══════════════════════════════════════════════════════════════════════════════
# Exportador
# ═══════════════════════════════════════════════════════════════════════════════

class AnalyticsExporter:
    def __init__(self, service: AnalyticsService):
        self.service = service

    async def export(self, filters: OverviewFilters, fmt: ExportFormat = "csv") -> ExportArtifact:
        overview = await self.service.get_overview(filters)

        if fmt == "pdf":
            content = await asyncio.to_thread(build_pdf, overview)
        elif fmt == "xlsx":
            content = await asyncio.to_thread(build_xlsx, overview)
        else:
            fmt = "csv"
            content = build_csv(overview).encode("utf-8")

        artifact = ExportArtifact(
            filename=export_filename(fmt),
            media_type=MEDIA_TYPES[fmt],
            content=content,
        )
        logger.info(
            "analytics_export format=%s bytes=%d scope=%s",
            fmt,
            len(content),
            filters.scope_key,
        )
        return artifact


__all__ = [
    "MEDIA_TYPES",
    "ExportArtifact",
    "format_percentage",
    "export_filename",
    "build_csv",
    "build_xlsx",
    "build_pdf",
    "AnalyticsExporter",
]

# Fin del archivo backend/app/modules/analytics/services/export_service.py

# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/services/__init__.py
"""

from .analytics_service import (
    AnalyticsService,
    overview_cache_key,
    timeseries_cache_key,
    rank_at_risk,
)
from .export_service import (
    AnalyticsExporter,
    ExportArtifact,
    build_csv,
    build_pdf,
    build_xlsx,
    export_filename,
    format_percentage,
)

__all__ = [
    "AnalyticsService",
    "overview_cache_key",
    "timeseries_cache_key",
    "rank_at_risk",
    "AnalyticsExporter",
    "ExportArtifact",
    "build_csv",
    "build_pdf",
    "build_xlsx",
    "export_filename",
    "format_percentage",
]

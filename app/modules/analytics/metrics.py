# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/metrics.py

Coleccionistas Prometheus del módulo analytics:
- Eventos de caché (hit/miss/error/bypass)
- Latencia de cómputo por operación (overview/timeseries)

Autor: Equipo IMM
Fecha: 2025-10-24
"""
from prometheus_client import Counter, Histogram

SUBSYSTEM = "analytics"

analytics_cache_events_total = Counter(
    f"{SUBSYSTEM}_cache_events_total",
    "Eventos de caché de analytics",
    labelnames=("event",),  # hit|miss|error|bypass
)

analytics_compute_seconds = Histogram(
    f"{SUBSYSTEM}_compute_seconds",
    "Tiempo de cómputo de agregados en la base (segundos)",
    labelnames=("operation",),
)

__all__ = [
    "analytics_cache_events_total",
    "analytics_compute_seconds",
]

# Fin del archivo backend/app/modules/analytics/metrics.py

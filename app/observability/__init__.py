# -*- coding: utf-8 -*-
"""
backend/app/observability/__init__.py

Observabilidad (Prometheus) del backend IMM.
"""

from .prom import setup_observability, mount_metrics, PrometheusMiddleware

__all__ = ["setup_observability", "mount_metrics", "PrometheusMiddleware"]

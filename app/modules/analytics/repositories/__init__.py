# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/repositories/__init__.py
"""

from .analytics_repository import AnalyticsRepository, AT_RISK_LIMIT

__all__ = ["AnalyticsRepository", "AT_RISK_LIMIT"]

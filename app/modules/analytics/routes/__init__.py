# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/routes/__init__.py
"""

from .analytics_routes import router

__all__ = ["router"]

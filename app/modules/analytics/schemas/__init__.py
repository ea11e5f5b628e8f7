# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/schemas/__init__.py
"""

from .analytics_schemas import *  # noqa: F401,F403
from .analytics_schemas import __all__  # noqa: F401

# -*- coding: utf-8 -*-
"""
backend/app/shared/__init__.py

Infraestructura compartida: config, base de datos, Redis, middlewares y
excepciones HTTP. No inicializa nada en import-time.
"""

# -*- coding: utf-8 -*-
"""
backend/app/__init__.py

Paquete principal 'app' del backend de analytics IMM.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

# Fin del archivo backend/app/__init__.py

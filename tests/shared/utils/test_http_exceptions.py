# -*- coding: utf-8 -*-
"""
Tests de las excepciones HTTP compartidas.

Cubre:
- Código de estado y detalle dict de cada excepción
- API pública del paquete utils
"""

import pytest

from app.shared.utils import BadRequestException, ForbiddenException, UnauthorizedException


@pytest.mark.parametrize(
    "exc_cls,status_code",
    [
        (BadRequestException, 400),
        (UnauthorizedException, 401),
        (ForbiddenException, 403),
    ],
)
def test_status_and_detail(exc_cls, status_code):
    """Cada excepción fija su código y conserva el detalle."""
    exc = exc_cls(detail={"error": "x", "message": "y"})
    assert exc.status_code == status_code
    assert exc.detail == {"error": "x", "message": "y"}


def test_package_exports():
    """utils expone solo las excepciones usadas por la API."""
    import app.shared.utils as utils_pkg

    assert sorted(utils_pkg.__all__) == [
        "BadRequestException",
        "ForbiddenException",
        "UnauthorizedException",
    ]
    assert not hasattr(utils_pkg, "NotFoundException")

# -*- coding: utf-8 -*-
"""
Tests de las rutas /analytics/*.

Cubre:
- 401 sin token, 403 sin permiso o fuera de alcance
- 400 con field_errors para fechas/uuids inválidos, rango invertido y métrica faltante
- 200 para overview, timeseries, export y projects/{id}
- Restricción efectiva por alcance (educadora) y por proyecto del path
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.modules.analytics.cache import AnalyticsCache
from app.modules.analytics.filters import RestrictionKind
from app.modules.analytics.routes import router as analytics_router
from app.modules.analytics.routes.deps import get_analytics_service
from app.modules.analytics.services.analytics_service import AnalyticsService

PROJECT_A = "11111111-1111-1111-1111-111111111111"
PROJECT_B = "22222222-2222-2222-2222-222222222222"
PROJECT_C = "33333333-3333-3333-3333-333333333333"


@pytest.fixture
def app(fake_repository):
    """App mínima con el router de analytics y servicio sobre repositorio falso."""
    app = FastAPI()
    app.include_router(analytics_router)
    app.dependency_overrides[get_analytics_service] = lambda: AnalyticsService(
        fake_repository, AnalyticsCache(None)
    )
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def educadora_headers(make_token):
    token = make_token(
        roles=["educadora"],
        permissions=["analytics:read:project"],
        project_scopes=[PROJECT_A, PROJECT_B],
    )
    return {"Authorization": f"Bearer {token}"}


# ═══════════════════════════════════════════════════════════════════════════════
# Auth
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize(
    "path",
    ["/analytics/overview", "/analytics/timeseries?metric=beneficiarias", "/analytics/export", f"/analytics/projects/{PROJECT_A}"],
)
def test_requires_token(client, path):
    """Sin Bearer token → 401."""
    response = client.get(path)
    assert response.status_code == 401
    assert response.json()["detail"]["error"] == "invalid_token"


def test_requires_analytics_permission(client, make_token):
    """Token sin permisos de analytics → 403."""
    headers = {"Authorization": f"Bearer {make_token(permissions=['beneficiarias:read'])}"}
    response = client.get("/analytics/overview", headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"]["error"] == "forbidden"


def test_role_without_access_denied(client, make_token, fake_repository):
    """Permiso presente pero rol sin acceso → 403, sin consultas."""
    headers = {"Authorization": f"Bearer {make_token(roles=['voluntaria'])}"}
    response = client.get("/analytics/overview", headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"] == {"error": "forbidden", "message": "Analytics access denied"}
    assert fake_repository.calls == []


def test_educadora_without_scope_denied(client, make_token):
    headers = {"Authorization": f"Bearer {make_token(roles=['educadora'], project_scopes=[])}"}
    response = client.get(f"/analytics/overview?projectId={PROJECT_A}", headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"]["message"] == "Educadora sem escopo de projeto definido"


# ═══════════════════════════════════════════════════════════════════════════════
# Validación (400)
# ═══════════════════════════════════════════════════════════════════════════════

def test_invalid_date_format(client, auth_headers):
    response = client.get("/analytics/overview?from=01-02-2024", headers=auth_headers)
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["error"] == "invalid_query"
    assert "from" in detail["field_errors"]


def test_inverted_range(client, auth_headers, fake_repository):
    response = client.get("/analytics/overview?from=2024-02-01&to=2024-01-01", headers=auth_headers)
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["message"] == "Invalid date range: `from` must be before `to`."
    assert "from" in detail["field_errors"]
    assert fake_repository.calls == []


@pytest.mark.parametrize("param", ["projectId", "cohortId"])
def test_invalid_uuid(client, auth_headers, param):
    response = client.get(f"/analytics/overview?{param}=abc", headers=auth_headers)
    assert response.status_code == 400
    assert param in response.json()["detail"]["field_errors"]


def test_timeseries_requires_metric(client, auth_headers):
    response = client.get("/analytics/timeseries", headers=auth_headers)
    assert response.status_code == 400
    assert "metric" in response.json()["detail"]["field_errors"]


@pytest.mark.parametrize("query", ["metric=visitas", "metric=beneficiarias&interval=year"])
def test_timeseries_rejects_unknown_values(client, auth_headers, query):
    response = client.get(f"/analytics/timeseries?{query}", headers=auth_headers)
    assert response.status_code == 400


def test_export_rejects_unknown_format(client, auth_headers):
    response = client.get("/analytics/export?format=docx", headers=auth_headers)
    assert response.status_code == 400
    assert "format" in response.json()["detail"]["field_errors"]


def test_project_path_must_be_uuid(client, auth_headers):
    response = client.get("/analytics/projects/not-a-uuid", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Invalid request"


# ═══════════════════════════════════════════════════════════════════════════════
# Éxito
# ═══════════════════════════════════════════════════════════════════════════════

def test_overview_ok(client, auth_headers):
    response = client.get(
        "/analytics/overview?from=2024-03-01&to=2024-03-31&unknown=1", headers=auth_headers
    )
    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"kpis", "series", "categorias", "listas"}
    assert body["kpis"]["beneficiarias_ativas"] == 12
    assert body["listas"]["risco_evasao"][0]["beneficiaria"] == "Bia"
    assert body["series"]["novas_beneficiarias"][0] == {"t": "2024-03-01", "v": 2}


def test_overview_educadora_scoped(client, educadora_headers, fake_repository):
    """educadora sin projectId → consultas restringidas a su alcance."""
    response = client.get("/analytics/overview", headers=educadora_headers)
    assert response.status_code == 200
    _, restriction, _ = fake_repository.called("count_active_beneficiaries")[0]
    assert restriction.kind is RestrictionKind.SCOPED
    assert restriction.project_ids == (PROJECT_A, PROJECT_B)


def test_overview_educadora_out_of_scope(client, educadora_headers):
    response = client.get(f"/analytics/overview?projectId={PROJECT_C}", headers=educadora_headers)
    assert response.status_code == 403
    assert response.json()["detail"]["message"] == "Projeto fora do escopo do usuário"


def test_timeseries_ok(client, auth_headers):
    response = client.get(
        "/analytics/timeseries?metric=assiduidade&interval=week", headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json() == {
        "data": [{"t": "2024-03-01", "v": 0.5}, {"t": "2024-03-02", "v": None}]
    }


def test_export_csv(client, auth_headers):
    response = client.get("/analytics/export", headers=auth_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="analytics-')
    assert disposition.endswith('.csv"')
    assert response.text.startswith("Indicador,Valor")


def test_export_xlsx(client, auth_headers):
    response = client.get("/analytics/export?format=xlsx", headers=auth_headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert response.content[:2] == b"PK"


def test_project_analytics_admin(client, auth_headers, fake_repository):
    response = client.get(f"/analytics/projects/{PROJECT_C}", headers=auth_headers)
    assert response.status_code == 200
    _, restriction, _ = fake_repository.called("count_active_enrollments")[0]
    assert restriction.kind is RestrictionKind.SINGLE
    assert restriction.project_ids == (PROJECT_C,)


def test_project_analytics_out_of_scope(client, educadora_headers, fake_repository):
    response = client.get(f"/analytics/projects/{PROJECT_C}", headers=educadora_headers)
    assert response.status_code == 403
    assert response.json()["detail"]["message"] == "Projeto fora do escopo do usuário"
    assert fake_repository.calls == []


def test_project_analytics_in_scope(client, educadora_headers, fake_repository):
    response = client.get(f"/analytics/projects/{PROJECT_B}", headers=educadora_headers)
    assert response.status_code == 200
    _, restriction, _ = fake_repository.called("count_active_enrollments")[0]
    assert restriction.project_ids == (PROJECT_B,)


@pytest.fixture
def educadora_tecnica_headers(make_token):
    token = make_token(
        roles=["educadora", "tecnica"],
        permissions=["analytics:read:project"],
        project_scopes=[PROJECT_A],
    )
    return {"Authorization": f"Bearer {token}"}


def test_project_analytics_mixed_roles_out_of_scope(client, educadora_tecnica_headers, fake_repository):
    """Educadora con rol elevado sigue limitada a su alcance en projects/{id}."""
    response = client.get(f"/analytics/projects/{PROJECT_C}", headers=educadora_tecnica_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == {
        "error": "forbidden",
        "message": "Projeto fora do escopo do usuário",
    }
    assert fake_repository.calls == []


def test_project_analytics_mixed_roles_in_scope(client, educadora_tecnica_headers, fake_repository):
    response = client.get(f"/analytics/projects/{PROJECT_A}", headers=educadora_tecnica_headers)
    assert response.status_code == 200
    _, restriction, _ = fake_repository.called("count_active_enrollments")[0]
    assert restriction.project_ids == (PROJECT_A,)


def test_project_analytics_query_project_must_match_path(client, educadora_tecnica_headers, fake_repository):
    """Un projectId en query distinto del path → 400, sin consultas."""
    response = client.get(
        f"/analytics/projects/{PROJECT_C}?projectId={PROJECT_A}",
        headers=educadora_tecnica_headers,
    )
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["error"] == "invalid_query"
    assert "projectId" in detail["field_errors"]
    assert fake_repository.calls == []


def test_project_analytics_query_project_equal_to_path(client, auth_headers, fake_repository):
    response = client.get(
        f"/analytics/projects/{PROJECT_B}?projectId={PROJECT_B}", headers=auth_headers
    )
    assert response.status_code == 200
    _, restriction, _ = fake_repository.called("count_active_enrollments")[0]
    assert restriction.project_ids == (PROJECT_B,)

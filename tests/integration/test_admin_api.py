"""
Integration tests for the system admin organization endpoints.
"""

import uuid
from datetime import date

import pytest

from models import Appointment, Holiday, Member, Organization, Patient
from tests.factories import (
    auth_headers, create_appointment, create_member, create_organization, create_patient, create_professional,
)

ADMIN_EMAIL = "admin@clinicos.test"


@pytest.fixture
def admin_headers(monkeypatch):
    monkeypatch.setattr("auth.dependencies.SYSTEM_ADMIN_EMAILS", [ADMIN_EMAIL])
    return auth_headers("user-admin", email=ADMIN_EMAIL)


def test_non_admin_is_forbidden(client):
    response = client.get("/api/admin/organizations", headers=auth_headers("user-a"))

    assert response.status_code == 403


def test_create_organization_seeds_owner_and_holidays(client, db_session, admin_headers):
    response = client.post(
        "/api/admin/organizations", json={"name": "Clínica Sorriso", "slug": "Clinica-Sorriso"}, headers=admin_headers
    )

    assert response.status_code == 201
    data = response.json()
    assert data["slug"] == "clinica-sorriso"
    organization_id = uuid.UUID(data["id"])

    members = db_session.query(Member).filter(Member.organization_id == organization_id).all()
    assert [(m.user_id, m.role) for m in members] == [("user-admin", "owner")]
    holidays = db_session.query(Holiday).filter(Holiday.organization_id == organization_id).all()
    assert len(holidays) == 26
    assert {h.type for h in holidays} == {"national"}


@pytest.mark.parametrize("slug", ["com espaço", "acento-é", "-inicio", ""])
def test_malformed_slug_returns_400(client, db_session, admin_headers, slug):
    response = client.post("/api/admin/organizations", json={"name": "X", "slug": slug}, headers=admin_headers)

    assert response.status_code == 400
    assert db_session.query(Organization).count() == 0


def test_blank_name_returns_400(client, db_session, admin_headers):
    response = client.post("/api/admin/organizations", json={"name": "   ", "slug": "sorriso"}, headers=admin_headers)

    assert response.status_code == 400
    assert db_session.query(Organization).count() == 0


def test_duplicate_slug_returns_400(client, db_session, admin_headers):
    create_organization(db_session, slug="sorriso")

    response = client.post(
        "/api/admin/organizations", json={"name": "Outra", "slug": "sorriso"}, headers=admin_headers
    )

    assert response.status_code == 400
    assert db_session.query(Organization).count() == 1


def test_list_organizations(client, db_session, admin_headers):
    create_organization(db_session, name="A", slug="a")
    create_organization(db_session, name="B", slug="b")

    response = client.get("/api/admin/organizations", headers=admin_headers)

    assert response.status_code == 200
    assert {o["slug"] for o in response.json()} == {"a", "b"}


def test_delete_organization_cascades(client, db_session, admin_headers):
    organization = create_organization(db_session)
    survivor = create_organization(db_session, name="Outra")
    create_member(db_session, organization, "user-a", role="owner")
    professional = create_professional(db_session, organization)
    patient = create_patient(db_session, organization)
    create_appointment(db_session, organization, patient, professional, on=date(2026, 3, 3))
    create_patient(db_session, survivor)

    response = client.delete(f"/api/admin/organizations/{organization.id}", headers=admin_headers)

    assert response.status_code == 200
    db_session.expire_all()
    assert [o.id for o in db_session.query(Organization).all()] == [survivor.id]
    assert db_session.query(Member).count() == 0
    assert db_session.query(Appointment).count() == 0
    assert db_session.query(Patient).count() == 1


def test_delete_unknown_organization_returns_404(client, admin_headers):
    response = client.delete(f"/api/admin/organizations/{uuid.uuid4()}", headers=admin_headers)

    assert response.status_code == 404

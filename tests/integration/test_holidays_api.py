"""
Integration tests for the holiday calendar API.
"""

from datetime import date

import pytest

from models import Holiday
from services.holiday_service import HolidayService
from tests.factories import auth_headers, create_member, create_organization


@pytest.fixture
def organization(db_session):
    organization = create_organization(db_session)
    create_member(db_session, organization, "user-owner", role="owner")
    create_member(db_session, organization, "user-member", role="member")
    return organization


def test_duplicate_holiday_returns_409_and_keeps_one_row(client, db_session, organization):
    headers = auth_headers("user-owner", organization)
    body = {"date": "2026-01-25", "name": "Aniversário da cidade"}

    first = client.post("/api/holidays", json=body, headers=headers)
    second = client.post("/api/holidays", json={**body, "name": "Outro"}, headers=headers)

    assert first.status_code == 201
    assert first.json()["type"] == "local"
    assert second.status_code == 409
    assert db_session.query(Holiday).filter(Holiday.organization_id == organization.id).count() == 1


def test_year_listing_is_scoped_to_organization(client, db_session, organization):
    other = create_organization(db_session, name="Outra")
    create_member(db_session, other, "user-outra", role="owner")
    HolidayService.seed_national_holidays(db_session, organization.id, years=[2026])
    HolidayService.seed_national_holidays(db_session, other.id, years=[2026])

    own = client.get("/api/holidays", params={"year": 2026}, headers=auth_headers("user-member", organization))
    foreign = client.get("/api/holidays", params={"year": 2026}, headers=auth_headers("user-outra", other))

    assert own.status_code == 200
    assert foreign.status_code == 200
    assert len(own.json()) == len(foreign.json()) == 13
    # Same calendar, separate rows
    assert [h["date"] for h in own.json()] == [h["date"] for h in foreign.json()]
    assert {h["id"] for h in own.json()}.isdisjoint({h["id"] for h in foreign.json()})
    assert {h["organization_id"] for h in own.json()} == {str(organization.id)}
    assert {h["organization_id"] for h in foreign.json()} == {str(other.id)}


def test_local_holiday_is_not_visible_to_other_organization(client, db_session, organization):
    other = create_organization(db_session, name="Outra")
    create_member(db_session, other, "user-outra", role="owner")
    HolidayService.create_holiday(db_session, other.id, date(2026, 7, 9), "Feriado estadual")

    own = client.get("/api/holidays", params={"year": 2026}, headers=auth_headers("user-member", organization))
    foreign = client.get("/api/holidays", params={"year": 2026}, headers=auth_headers("user-outra", other))

    assert own.json() == []
    assert [h["name"] for h in foreign.json()] == ["Feriado estadual"]


@pytest.mark.parametrize("name", ["", "   "])
def test_blank_name_returns_400(client, db_session, organization, name):
    response = client.post(
        "/api/holidays", json={"date": "2026-01-25", "name": name}, headers=auth_headers("user-owner", organization)
    )

    assert response.status_code == 400
    assert db_session.query(Holiday).count() == 0


def test_listing_is_ordered_by_date(client, db_session, organization):
    HolidayService.seed_national_holidays(db_session, organization.id, years=[2027])

    response = client.get("/api/holidays", params={"year": 2027}, headers=auth_headers("user-member", organization))

    dates = [h["date"] for h in response.json()]
    assert dates == sorted(dates)
    assert dates[0] == "2027-01-01"
    assert "2027-03-26" in dates  # Good Friday


def test_invalid_year_returns_400(client, organization):
    response = client.get("/api/holidays", params={"year": 12}, headers=auth_headers("user-member", organization))

    assert response.status_code == 400


def test_members_cannot_change_holidays(client, db_session, organization):
    headers = auth_headers("user-member", organization)
    holiday = HolidayService.create_holiday(db_session, organization.id, date(2026, 1, 25), "Feriado")

    assert client.post("/api/holidays", json={"date": "2026-02-02", "name": "X"}, headers=headers).status_code == 403
    assert client.delete(f"/api/holidays/{holiday.id}", headers=headers).status_code == 403
    assert client.post("/api/holidays/seed", headers=headers).status_code == 403


def test_seed_endpoint(client, organization):
    headers = auth_headers("user-owner", organization)

    assert client.post("/api/holidays/seed", headers=headers).json() == {"inserted": 26}
    assert client.post("/api/holidays/seed", headers=headers).json() == {"inserted": 0}
    assert client.post("/api/holidays/seed", json={"years": [2028]}, headers=headers).json() == {"inserted": 13}


def test_national_holiday_cannot_be_deleted(client, db_session, organization):
    HolidayService.seed_national_holidays(db_session, organization.id, years=[2026])
    national = HolidayService.list_holidays(db_session, organization.id)[0]

    response = client.delete(f"/api/holidays/{national.id}", headers=auth_headers("user-owner", organization))

    assert response.status_code == 400


def test_delete_local_holiday(client, db_session, organization):
    created = client.post(
        "/api/holidays", json={"date": "2026-01-25", "name": "Feriado"}, headers=auth_headers("user-owner", organization)
    ).json()

    response = client.delete(f"/api/holidays/{created['id']}", headers=auth_headers("user-owner", organization))

    assert response.status_code == 200
    assert db_session.query(Holiday).count() == 0

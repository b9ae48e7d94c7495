"""
Integration tests for the conversations API.
"""

import pytest

from models import Conversation, OutboxEvent
from tests.factories import auth_headers, create_member, create_organization, create_professional


@pytest.fixture
def team(db_session):
    organization = create_organization(db_session)
    for user_id in ("user-ana", "user-bruno", "user-carla"):
        create_member(db_session, organization, user_id)
    ana = create_professional(db_session, organization, name="Ana", user_id="user-ana")
    bruno = create_professional(db_session, organization, name="Bruno", user_id="user-bruno")
    carla = create_professional(db_session, organization, name="Carla", user_id="user-carla")
    return organization, ana, bruno, carla


def test_direct_conversation_flow(client, db_session, team):
    organization, ana, bruno, _ = team
    ana_headers = auth_headers("user-ana", organization)
    bruno_headers = auth_headers("user-bruno", organization)

    conversation = client.post("/api/conversations/direct", json={"recipient_id": bruno.id}, headers=ana_headers)
    assert conversation.status_code == 200
    conversation_id = conversation.json()["id"]
    again = client.post("/api/conversations/direct", json={"recipient_id": ana.id}, headers=bruno_headers)
    assert again.json()["id"] == conversation_id

    sent = client.post(
        f"/api/conversations/{conversation_id}/messages", json={"content": "Bom dia"}, headers=ana_headers
    )
    assert sent.status_code == 201
    assert sent.json()["sender_id"] == ana.id

    [listing] = client.get("/api/conversations/me", headers=bruno_headers).json()
    assert listing["id"] == conversation_id
    assert listing["unread_count"] == 1

    messages = client.get(f"/api/conversations/{conversation_id}/messages", headers=bruno_headers).json()
    assert [m["content"] for m in messages] == ["Bom dia"]

    read = client.post(f"/api/conversations/{conversation_id}/read", headers=bruno_headers)
    assert read.json() == {"updated": 1}

    # No socket is connected, but the event is still marked published
    db_session.expire_all()
    assert db_session.query(OutboxEvent).filter(OutboxEvent.published_at.is_(None)).count() == 0


def test_group_is_hidden_from_non_members(client, team):
    organization, _, bruno, _ = team

    group = client.post(
        "/api/conversations/group",
        json={"name": "Recepção", "participants": [bruno.id]},
        headers=auth_headers("user-ana", organization)
    )
    assert group.status_code == 201
    group_id = group.json()["id"]

    carla_headers = auth_headers("user-carla", organization)
    assert client.get("/api/conversations/me", headers=carla_headers).json() == []
    assert client.get(f"/api/conversations/{group_id}/messages", headers=carla_headers).status_code == 404
    assert client.post(
        f"/api/conversations/{group_id}/messages", json={"content": "Oi"}, headers=carla_headers
    ).status_code == 404


def test_user_without_professional_profile_is_forbidden(client, db_session, team):
    organization, _, _, _ = team
    create_member(db_session, organization, "user-sem-perfil")

    response = client.get("/api/conversations/me", headers=auth_headers("user-sem-perfil", organization))

    assert response.status_code == 403


def test_blank_message_returns_400(client, team):
    organization, _, bruno, _ = team
    headers = auth_headers("user-ana", organization)
    conversation_id = client.post(
        "/api/conversations/direct", json={"recipient_id": bruno.id}, headers=headers
    ).json()["id"]

    assert client.post(
        f"/api/conversations/{conversation_id}/messages", json={"content": "   "}, headers=headers
    ).status_code == 400
    assert client.post(
        f"/api/conversations/{conversation_id}/messages", json={}, headers=headers
    ).status_code == 400


def test_delete_conversation(client, team):
    organization, _, bruno, _ = team
    headers = auth_headers("user-ana", organization)
    conversation_id = client.post(
        "/api/conversations/direct", json={"recipient_id": bruno.id}, headers=headers
    ).json()["id"]

    assert client.delete(f"/api/conversations/{conversation_id}", headers=headers).status_code == 200
    assert client.get("/api/conversations/me", headers=headers).json() == []


def test_blank_group_name_returns_400(client, db_session, team):
    organization, _, bruno, _ = team

    response = client.post(
        "/api/conversations/group",
        json={"name": "   ", "participants": [bruno.id]},
        headers=auth_headers("user-ana", organization)
    )

    assert response.status_code == 400
    assert db_session.query(Conversation).count() == 0

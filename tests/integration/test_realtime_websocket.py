"""
Integration tests for the realtime WebSocket endpoint.

Every socket first receives an ack for "connected". Acks for client events
arrive after the broadcasts they cause, so reading up to the ack makes the
expected broadcasts observable without sleeping.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from core.constants import WS_CLOSE_FORBIDDEN, WS_CLOSE_UNAUTHORIZED
from models import OutboxEvent, Professional
from services.conversation_service import ConversationService
from tests.factories import auth_headers, create_member, create_organization, create_professional, create_token


def _ws_url(user_id, organization):
    return f"/ws?token={create_token(user_id)}&organization_id={organization.id}"


def _connect(client, user_id, organization):
    return client.websocket_connect(_ws_url(user_id, organization))


def _expect_connected(websocket, user_id):
    assert websocket.receive_json() == {"event": "ack", "data": {"event": "connected", "room": user_id}}


@pytest.fixture
def live_client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def two_clinics(db_session):
    clinic_a = create_organization(db_session, name="Clínica A")
    clinic_b = create_organization(db_session, name="Clínica B")
    for organization, user_ids in ((clinic_a, ("user-ana", "user-bruno")), (clinic_b, ("user-beatriz",))):
        for user_id in user_ids:
            create_member(db_session, organization, user_id)
            create_professional(db_session, organization, name=user_id, user_id=user_id)
    return clinic_a, clinic_b


def test_presence_stays_inside_the_organization(live_client, db_session, two_clinics):
    clinic_a, clinic_b = two_clinics

    with _connect(live_client, "user-ana", clinic_a) as ana, \
            _connect(live_client, "user-bruno", clinic_a) as bruno, \
            _connect(live_client, "user-beatriz", clinic_b) as beatriz:
        _expect_connected(ana, "user-ana")
        _expect_connected(bruno, "user-bruno")
        _expect_connected(beatriz, "user-beatriz")

        ana.send_json({"event": "update_status", "data": {"status": "busy"}})
        own = ana.receive_json()
        assert own["event"] == "status_change"
        assert own["data"]["user_id"] == "user-ana"
        assert own["data"]["status"] == "busy"
        assert ana.receive_json() == {"event": "ack", "data": {"event": "update_status", "status": "busy"}}
        assert bruno.receive_json()["data"]["user_id"] == "user-ana"

        beatriz.send_json({"event": "update_status", "data": {"status": "online"}})
        # Ana's change never reached the other organization
        first = beatriz.receive_json()
        assert first["event"] == "status_change"
        assert first["data"]["user_id"] == "user-beatriz"

    db_session.expire_all()
    ana_profile = db_session.query(Professional).filter(Professional.user_id == "user-ana").one()
    assert ana_profile.chat_status == "busy"


def test_invalid_status_returns_error_event(live_client, two_clinics):
    clinic_a, _ = two_clinics

    with _connect(live_client, "user-ana", clinic_a) as ana:
        _expect_connected(ana, "user-ana")
        ana.send_json({"event": "update_status", "data": {"status": "ausente"}})

        error = ana.receive_json()
        assert error["event"] == "error"
        assert error["data"]["event"] == "update_status"
        assert error["data"]["status"] == 400


def test_send_message_reaches_every_member(live_client, db_session, two_clinics):
    clinic_a, _ = two_clinics
    ana_profile, bruno_profile = db_session.query(Professional).filter(
        Professional.organization_id == clinic_a.id
    ).order_by(Professional.id).all()
    conversation, _ = ConversationService.get_or_create_direct(
        db_session, clinic_a.id, ana_profile, bruno_profile.id
    )

    with _connect(live_client, "user-ana", clinic_a) as ana, _connect(live_client, "user-bruno", clinic_a) as bruno:
        _expect_connected(ana, "user-ana")
        _expect_connected(bruno, "user-bruno")

        ana.send_json({"event": "send_message", "data": {"conversation_id": conversation.id, "content": "Olá"}})

        echoed = ana.receive_json()
        assert echoed["event"] == "receive_message"
        assert echoed["data"]["content"] == "Olá"
        ack = ana.receive_json()
        assert ack["event"] == "ack"
        assert ack["data"]["message_id"] == echoed["data"]["id"]

        delivered = bruno.receive_json()
        assert delivered["event"] == "receive_message"
        assert delivered["data"]["id"] == echoed["data"]["id"]

    db_session.expire_all()
    event = db_session.query(OutboxEvent).one()
    assert event.published_at is not None


def test_http_message_is_pushed_to_connected_member(live_client, db_session, two_clinics):
    clinic_a, _ = two_clinics
    bruno_profile = db_session.query(Professional).filter(Professional.user_id == "user-bruno").one()
    headers = auth_headers("user-ana", clinic_a)
    conversation_id = live_client.post(
        "/api/conversations/direct", json={"recipient_id": bruno_profile.id}, headers=headers
    ).json()["id"]

    with _connect(live_client, "user-bruno", clinic_a) as bruno:
        _expect_connected(bruno, "user-bruno")

        sent = live_client.post(
            f"/api/conversations/{conversation_id}/messages", json={"content": "Paciente chegou"}, headers=headers
        )

        assert sent.status_code == 201
        pushed = bruno.receive_json()
        assert pushed["event"] == "receive_message"
        assert pushed["data"]["id"] == sent.json()["id"]


def test_send_message_to_foreign_conversation_is_not_found(live_client, db_session, two_clinics):
    clinic_a, clinic_b = two_clinics
    ana_profile, bruno_profile = db_session.query(Professional).filter(
        Professional.organization_id == clinic_a.id
    ).order_by(Professional.id).all()
    conversation, _ = ConversationService.get_or_create_direct(
        db_session, clinic_a.id, ana_profile, bruno_profile.id
    )

    with _connect(live_client, "user-beatriz", clinic_b) as beatriz:
        _expect_connected(beatriz, "user-beatriz")
        beatriz.send_json({"event": "send_message", "data": {"conversation_id": conversation.id, "content": "?"}})

        error = beatriz.receive_json()
        assert error["event"] == "error"
        assert error["data"]["status"] == 404


def test_cannot_join_another_users_room(live_client, two_clinics):
    clinic_a, _ = two_clinics

    with _connect(live_client, "user-ana", clinic_a) as ana:
        _expect_connected(ana, "user-ana")

        ana.send_json({"event": "join_room", "data": {"room": "user-bruno"}})
        error = ana.receive_json()
        assert error["event"] == "error"
        assert error["data"]["status"] == 403

        ana.send_json({"event": "join_room", "data": {}})
        assert ana.receive_json() == {"event": "ack", "data": {"event": "join_room", "room": "user-ana"}}


def test_malformed_frames_return_errors(live_client, two_clinics):
    clinic_a, _ = two_clinics

    with _connect(live_client, "user-ana", clinic_a) as ana:
        _expect_connected(ana, "user-ana")

        ana.send_text("not json")
        assert ana.receive_json()["data"]["status"] == 400

        ana.send_json({"event": "shout", "data": {}})
        assert ana.receive_json()["data"]["detail"] == "Unknown event: shout"


def test_invalid_token_is_closed_with_auth_code(live_client, two_clinics):
    clinic_a, _ = two_clinics

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with live_client.websocket_connect(f"/ws?token=invalid&organization_id={clinic_a.id}"):
            pass

    assert exc_info.value.code == WS_CLOSE_UNAUTHORIZED


def test_foreign_organization_is_closed_with_tenant_code(live_client, two_clinics):
    _, clinic_b = two_clinics

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with live_client.websocket_connect(_ws_url("user-ana", clinic_b)):
            pass

    assert exc_info.value.code == WS_CLOSE_FORBIDDEN

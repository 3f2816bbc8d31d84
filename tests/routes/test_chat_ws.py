"""
Tests for the chat WebSocket at /api/v1/chat/ws.
"""

from fastapi.testclient import TestClient
from fastapi.websockets import WebSocketDisconnect
import pytest

from campuschat.core.config import settings
from campuschat.services.messaging.rooms import room_name_for

WS = "/api/v1/chat/ws"


class FailingBroadcaster:
    async def broadcast_message(self, room, payload):
        raise ConnectionError("relay down")


def _join(ws, room):
    ws.send_json({"event": "join_room", "data": room})
    return ws.receive_json()


class TestConnection:
    def test_missing_token_is_refused(self, client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(WS):
                pass

        assert exc_info.value.code == 1008

    def test_invalid_token_is_refused(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(f"{WS}?token=garbage"):
                pass

    def test_inactive_user_is_refused(self, client, db, student, issue_token):
        token = issue_token(student)
        student.is_active = False
        db.commit()

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(f"{WS}?token={token}"):
                pass

        assert exc_info.value.code == 1008

    def test_deleted_user_is_refused(self, client, db, student, issue_token):
        token = issue_token(student)
        db.delete(student)
        db.commit()

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(f"{WS}?token={token}"):
                pass

        assert exc_info.value.code == 1008

    def test_disconnect_leaves_all_rooms(self, client, room_registry, student, issue_token):
        with client.websocket_connect(f"{WS}?token={issue_token(student)}") as ws:
            _join(ws, "room-1")
            _join(ws, "room-2")
            assert room_registry.stats() == {"connections": 1, "rooms": 2}

        assert room_registry.stats() == {"connections": 0, "rooms": 0}


class TestRoomEvents:
    def test_join_and_leave_are_acknowledged(self, client, student, issue_token):
        with client.websocket_connect(f"{WS}?token={issue_token(student)}") as ws:
            assert _join(ws, "a-b") == {"event": "joined_room", "data": "a-b"}

            ws.send_json({"event": "leave_room", "data": "a-b"})
            assert ws.receive_json() == {"event": "left_room", "data": "a-b"}

    def test_unknown_event_gets_error(self, client, student, issue_token):
        with client.websocket_connect(f"{WS}?token={issue_token(student)}") as ws:
            ws.send_json({"event": "shout", "data": "hello"})

            reply = ws.receive_json()

        assert reply["event"] == "error"
        assert reply["data"]["detail"] == "Unknown event"

    def test_join_without_room_gets_error(self, client, student, issue_token):
        with client.websocket_connect(f"{WS}?token={issue_token(student)}") as ws:
            ws.send_json({"event": "join_room", "data": ""})

            assert ws.receive_json()["event"] == "error"

    def test_non_json_frame_gets_error(self, client, student, issue_token):
        with client.websocket_connect(f"{WS}?token={issue_token(student)}") as ws:
            ws.send_text("{not json")

            assert ws.receive_json()["event"] == "error"

    def test_binary_frame_gets_error_and_socket_stays_open(self, client, student, issue_token):
        with client.websocket_connect(f"{WS}?token={issue_token(student)}") as ws:
            ws.send_bytes(b"\x00\x01")
            assert ws.receive_json()["event"] == "error"

            assert _join(ws, "a-b") == {"event": "joined_room", "data": "a-b"}

    def test_failed_relay_gets_error_and_socket_stays_open(
        self, client, app, student, issue_token
    ):
        app.state.room_broadcaster = FailingBroadcaster()

        with client.websocket_connect(f"{WS}?token={issue_token(student)}") as ws:
            ws.send_json(
                {"event": "send_message", "data": {"room": "a-b", "message": {"content": "hi"}}}
            )
            reply = ws.receive_json()

            assert reply["event"] == "error"
            assert reply["data"]["detail"] == "Message could not be delivered"
            assert _join(ws, "a-b") == {"event": "joined_room", "data": "a-b"}

    def test_send_message_relays_to_room_members(
        self, client, student, advisor, issue_token
    ):
        room = room_name_for(student.id, advisor.id)
        message = {"content": "typing from the socket"}

        with client.websocket_connect(f"{WS}?token={issue_token(student)}") as sender:
            with client.websocket_connect(f"{WS}?token={issue_token(advisor)}") as receiver:
                _join(sender, room)
                _join(receiver, room)

                sender.send_json({"event": "send_message", "data": {"room": room, "message": message}})

                expected = {"event": "receive_message", "data": message}
                assert receiver.receive_json() == expected
                assert sender.receive_json() == expected


class TestRestBroadcast:
    def test_sent_message_reaches_both_participants(
        self, client, student, advisor, issue_token, auth_headers_student
    ):
        room = room_name_for(student.id, advisor.id)

        with client.websocket_connect(f"{WS}?token={issue_token(student)}") as sender_ws:
            with client.websocket_connect(f"{WS}?token={issue_token(advisor)}") as receiver_ws:
                _join(sender_ws, room)
                _join(receiver_ws, room)

                response = client.post(
                    "/api/v1/chat/messages",
                    json={"receiver_id": advisor.id, "content": "Office hours moved to 4pm"},
                    headers=auth_headers_student,
                )
                assert response.status_code == 201

                frame = receiver_ws.receive_json()
                assert frame["event"] == "receive_message"
                assert frame["data"]["id"] == response.json()["id"]
                assert frame["data"]["content"] == "Office hours moved to 4pm"
                assert frame["data"]["sender_name"] == student.name
                assert sender_ws.receive_json()["data"]["id"] == response.json()["id"]

    def test_message_with_no_listeners_is_still_stored(
        self, client, advisor, auth_headers_student
    ):
        response = client.post(
            "/api/v1/chat/messages",
            json={"receiver_id": advisor.id, "content": "Nobody is online"},
            headers=auth_headers_student,
        )

        assert response.status_code == 201


class TestRelayedDelivery:
    def test_relay_configured_app_delivers_once(
        self, app, monkeypatch, student, advisor, issue_token, auth_headers_student
    ):
        monkeypatch.setattr(settings, "realtime_relay_url", "memory://")
        room = room_name_for(student.id, advisor.id)

        with TestClient(app) as relay_client:
            with relay_client.websocket_connect(f"{WS}?token={issue_token(advisor)}") as ws:
                _join(ws, room)

                response = relay_client.post(
                    "/api/v1/chat/messages",
                    json={"receiver_id": advisor.id, "content": "via the relay"},
                    headers=auth_headers_student,
                )
                assert response.status_code == 201

                frame = ws.receive_json()
                assert frame["data"]["content"] == "via the relay"

                ws.send_json({"event": "join_room", "data": "probe"})
                assert ws.receive_json() == {"event": "joined_room", "data": "probe"}

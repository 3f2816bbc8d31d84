"""
Tests for the admin-only service timing endpoints.
"""

OPS = "/api/v1/ops/performance"


def _send(client, receiver, headers, content="Is the form due Friday?"):
    response = client.post(
        "/api/v1/chat/messages",
        json={"receiver_id": receiver.id, "content": content},
        headers=headers,
    )
    assert response.status_code == 201


class TestPerformanceMetrics:
    def test_admin_sees_recorded_operations(
        self, client, advisor, auth_headers_student, auth_headers_admin
    ):
        _send(client, advisor, auth_headers_student)
        _send(client, advisor, auth_headers_student, content="Also, which room?")
        client.get("/api/v1/chat/conversations", headers=auth_headers_student)

        response = client.get(OPS, headers=auth_headers_admin)

        assert response.status_code == 200
        services = response.json()["services"]
        create = services["MessageService"]["create_message"]
        assert create["count"] == 2
        assert create["success_rate"] == 1.0
        assert services["ConversationService"]["get_conversations"]["count"] == 1
        assert services["ReadStateService"] == {}

    def test_failures_lower_success_rate(
        self, client, student, auth_headers_student, auth_headers_admin
    ):
        response = client.post(
            "/api/v1/chat/messages",
            json={"receiver_id": student.id, "content": "note to self"},
            headers=auth_headers_student,
        )
        assert response.status_code == 400

        create = client.get(OPS, headers=auth_headers_admin).json()["services"]["MessageService"][
            "create_message"
        ]
        assert create["failure_count"] == 1
        assert create["success_rate"] == 0.0

    def test_reset_clears_operations(
        self, client, advisor, auth_headers_student, auth_headers_admin
    ):
        _send(client, advisor, auth_headers_student)

        response = client.post(f"{OPS}/reset", headers=auth_headers_admin)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Service metrics reset"}
        services = client.get(OPS, headers=auth_headers_admin).json()["services"]
        assert services["MessageService"] == {}

    def test_non_admin_is_forbidden(self, client, auth_headers_advisor):
        response = client.get(OPS, headers=auth_headers_advisor)

        assert response.status_code == 403
        body = response.json()
        assert body["code"] == "ADMIN_REQUIRED"
        assert body["title"] == "Forbidden"

    def test_reset_requires_admin(self, client, auth_headers_student):
        assert client.post(f"{OPS}/reset", headers=auth_headers_student).status_code == 403

    def test_requires_authentication(self, client):
        assert client.get(OPS).status_code == 401

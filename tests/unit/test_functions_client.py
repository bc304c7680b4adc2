"""
Serverless 函数客户端单元测试
"""

import json

import pytest

from fleetpulse.core.errors import OperationError
from fleetpulse.infrastructure.functions import EdgeFunctionClient, FunctionResponse


class FakeResponse:
    def __init__(self, status, body):
        self.status = status
        self._text = body if isinstance(body, str) else json.dumps(body)

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []
        self.closed = False

    def post(self, url, json=None, headers=None):
        self.calls.append({"url": url, "json": json, "headers": headers})
        return self.response

    async def close(self):
        self.closed = True


def make_client(status, body, api_key="anon"):
    session = FakeSession(FakeResponse(status, body))
    client = EdgeFunctionClient("https://proj.supabase.co/", api_key=api_key, session=session)
    return client, session


class TestInvoke:
    @pytest.mark.asyncio
    async def test_success_response(self):
        client, session = make_client(200, {"success": True, "message": "done", "alreadyExists": True})

        response = await client.invoke("assign-device-to-group", {"deviceId": "d", "groupId": "g"})

        assert response.success is True
        assert response.message == "done"
        assert response.data["alreadyExists"] is True
        [call] = session.calls
        assert call["url"] == "https://proj.supabase.co/functions/v1/assign-device-to-group"
        assert call["json"] == {"deviceId": "d", "groupId": "g"}
        assert call["headers"]["Authorization"] == "Bearer anon"

    @pytest.mark.asyncio
    async def test_no_auth_header_without_key(self):
        client, session = make_client(200, {"success": True}, api_key=None)
        await client.invoke("delete-device")
        assert "Authorization" not in session.calls[0]["headers"]
        assert session.calls[0]["json"] == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,code",
        [
            (401, "UNAUTHORIZED"),
            (403, "UNAUTHORIZED"),
            (404, "NOT_FOUND"),
            (429, "RATE_LIMIT_EXCEEDED"),
            (500, "NETWORK_ERROR"),
        ],
    )
    async def test_status_mapping(self, status, code):
        client, _ = make_client(status, {"success": False, "error": "nope"})

        with pytest.raises(OperationError) as exc_info:
            await client.invoke("send-notification", {})

        assert exc_info.value.code == code
        assert exc_info.value.message == "nope"
        assert exc_info.value.context["status"] == status

    @pytest.mark.asyncio
    async def test_long_text_error_truncated(self):
        client, _ = make_client(502, "x" * 150)

        with pytest.raises(OperationError) as exc_info:
            await client.invoke("send-notification")

        assert exc_info.value.message == "x" * 100 + "..."

    @pytest.mark.asyncio
    async def test_non_json_success_body(self):
        client, _ = make_client(200, "<html>oops</html>")

        with pytest.raises(OperationError) as exc_info:
            await client.invoke("delete-device")

        assert exc_info.value.code == "NETWORK_ERROR"

    @pytest.mark.asyncio
    async def test_injected_session_not_closed(self):
        client, session = make_client(200, {"success": True})
        async with client:
            pass
        assert session.closed is False


class TestFunctionResponse:
    def test_from_non_dict_payload(self):
        response = FunctionResponse.from_payload(["unexpected"])
        assert response.success is False
        assert response.error == "Malformed function response"

"""End-to-end: the example client talks to the example FastAPI app in-process."""

import pytest
from httpx import ASGITransport, AsyncClient

from apicontract import ListenerError, RequestValidationError, TransportError
from apicontract.config.schema import ApiContractConfig
from examples.user_api.client import build_api_client
from examples.user_api.definition import User
from examples.user_api.server import create_app

pytestmark = pytest.mark.e2e


@pytest.fixture
async def api_client():
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield build_api_client("http://test", http_client=http)


@pytest.mark.asyncio
async def test_get_user_before_create_returns_none(api_client):
    assert await api_client.call("getUser", {"id": 1}) is None


@pytest.mark.asyncio
async def test_create_then_get_user(api_client):
    created = await api_client.call("createUser", {"name": "Alice", "email": "alice@test.com"})
    assert created == User(id=1, name="Alice", email="alice@test.com")

    fetched = await api_client.call("getUser", {"id": 1})
    assert fetched == created


@pytest.mark.asyncio
async def test_handler_error_message_reaches_client(api_client):
    failed = []
    api_client.failed.subscribe(failed.append)
    with pytest.raises(TransportError) as exc_info:
        await api_client.call("getUser", {"id": -1})
    assert str(exc_info.value) == "Invalid user ID"
    assert exc_info.value.status_code == 500
    assert [m.operation for m in failed] == ["getUser"]


@pytest.mark.asyncio
async def test_invalid_email_is_rejected_before_sending(api_client):
    failed = []
    api_client.failed.subscribe(failed.append)
    with pytest.raises(RequestValidationError) as exc_info:
        await api_client.call("createUser", {"name": "Bob", "email": "not-an-email"})
    assert exc_info.value.issues[0].path == ("email",)
    assert failed == []
    assert await api_client.call("getUser", {"id": 1}) is None


@pytest.mark.asyncio
async def test_success_notifications_carry_validated_values(api_client):
    succeeded = []
    api_client.succeeded.subscribe(succeeded.append)
    await api_client.call("createUser", {"name": "Carol", "email": "carol@test.com"})
    message = succeeded[0]
    assert message.operation == "createUser"
    assert message.request.name == "Carol"
    assert message.response.id == 1


@pytest.mark.asyncio
async def test_client_options_come_from_config():
    config = ApiContractConfig()
    config.client.base_url = "http://test"
    config.topics.isolate_listener_errors = False
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport) as http:
        client = build_api_client(http_client=http, config=config)

        def boom(message):
            raise RuntimeError("listener failed")

        client.succeeded.subscribe(boom)
        with pytest.raises(ListenerError) as exc_info:
            await client.call("getUser", {"id": 1})
    assert exc_info.value.response is None
    assert isinstance(exc_info.value.__cause__, RuntimeError)

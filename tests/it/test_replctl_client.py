import asyncio
import pytest
import pytest_asyncio

from replctl.core.client import ReplClient
from sockrepl.core.eval.context import EvaluationContext
from sockrepl.core.eval.interpreter import CommandInterpreter
from sockrepl.core.models.config import ServerConfig
from sockrepl.core.transport.server import ReplServer
from sockrepl.core.transport.session import SessionHandler


@pytest_asyncio.fixture
async def server(socket_path, serializer):
    interpreter = CommandInterpreter(EvaluationContext(), serializer)
    server = ReplServer(ServerConfig(
        handler=SessionHandler(interpreter),
        socket_path=socket_path,
        timeout_graceful_shutdown=1.0,
    ))
    await server.start()
    try:
        yield server
    finally:
        await server.shutdown()


@pytest.mark.it
@pytest.mark.asyncio
async def test_client_round_trip(server, serializer):
    def session():
        with ReplClient(server.path, serializer) as client:
            return [
                client.request("2+2"),
                client.request("raise ValueError('boom')"),
                client.request("REQUEST['extra']", extra="field"),
            ]

    value, error, extra = await asyncio.to_thread(session)

    assert value == {"value": 4}
    assert "boom" in error["error"]
    assert extra == {"value": "field"}


@pytest.mark.it
@pytest.mark.asyncio
async def test_client_connects_lazily(server, serializer):
    client = ReplClient(server.path, serializer)
    try:
        response = await asyncio.to_thread(client.request, "'lazy'")
    finally:
        client.close()

    assert response == {"value": "lazy"}


@pytest.mark.it
def test_client_missing_socket(socket_path, serializer):
    client = ReplClient(socket_path, serializer)

    with pytest.raises(FileNotFoundError):
        client.connect()

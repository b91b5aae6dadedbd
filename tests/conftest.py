"""Pytest configuration for Engine API client tests."""

import os
import shutil
import tempfile

import pytest
import pytest_asyncio

from engine_client import EngineClient, HTTPTransport, IPCTransport

from .fakes import FakeEngineService, start_http_server, start_ipc_server


@pytest.fixture
def service():
    return FakeEngineService()


@pytest.fixture
def ipc_path():
    # Unix socket paths are length limited, so avoid pytest's long tmp_path.
    directory = tempfile.mkdtemp(prefix="engine-")
    yield os.path.join(directory, "engine.ipc")
    shutil.rmtree(directory, ignore_errors=True)


@pytest_asyncio.fixture
async def http_endpoint(service):
    server, url = await start_http_server(service)
    yield url
    await server.close()


@pytest_asyncio.fixture
async def ipc_endpoint(service, ipc_path):
    server = await start_ipc_server(service, ipc_path)
    yield ipc_path
    server.close()
    await server.wait_closed()


@pytest_asyncio.fixture(params=["http", "ipc"])
async def client(request, service, ipc_path):
    """EngineClient talking to the fake service, once per transport."""
    if request.param == "http":
        server, url = await start_http_server(service)
        transport = HTTPTransport(url)
    else:
        server = await start_ipc_server(service, ipc_path)
        transport = IPCTransport(ipc_path)

    engine = EngineClient(transport, timeout=5.0)
    yield engine
    await engine.close()

    if request.param == "http":
        await server.close()
    else:
        server.close()
        await server.wait_closed()

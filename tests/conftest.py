"""
Shared fixtures for toolkit and server tests.

MockRegistrar captures what a toolkit registers and lets a test call a
tool by slug, with the arguments validated into the tool's request model
the same way the dispatcher does it.
"""

import json

import pytest

from gisconvert.core.context import ServerContext, create_context
from gisconvert.core.schemas import conversion_request_adapter
from gisconvert.core.utils.config import Settings


class MockRegistrar:
    def __init__(self):
        self.toolkits = {}
        self.tools = {}          # slug -> spec
        self.handlers = {}       # slug -> handler

    def toolkit(self, name: str, description: str, version: str = None):
        self.toolkits[name] = {"description": description, "version": version}

    def tool(self, toolspec, handler):
        self.tools[toolspec.slug] = toolspec
        self.handlers[toolspec.slug] = handler

    def call(self, slug: str, arguments: dict, context=None):
        handler = self.handlers.get(slug)
        if not handler:
            raise KeyError(f"Tool not registered: {slug}")
        request = conversion_request_adapter.validate_python({**arguments, "operation": slug})
        return handler(request, context)


class FakeResponse:
    """Minimal aiohttp response: async context manager with ``json()``."""

    def __init__(self, status=200, payload=None, reason="OK", text=None):
        self.status = status
        self.reason = reason
        self._payload = payload
        self._text = text

    async def json(self, content_type="application/json"):
        if self._text is not None:
            return json.loads(self._text)
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession; records every GET."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse(payload={})
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self):
        self.closed = True


@pytest.fixture()
def settings():
    return Settings()


@pytest.fixture()
def fake_session():
    return FakeSession()


@pytest.fixture()
def context(settings, fake_session):
    ctx = create_context(settings)
    ctx.http = fake_session
    return ctx


@pytest.fixture()
def bare_context(settings, fake_session):
    """Context with an empty registry."""
    return ServerContext(settings=settings, http=fake_session)

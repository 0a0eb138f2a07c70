"""Shared fixtures: settings and a recording fake HTTP backend."""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx
import pytest

from rest_tester.gateway.config import Settings
from rest_tester.gateway.http import RestClient
from rest_tester.logger import LOGGER_NAME

BASE_URL = "http://api.test/v1"

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingBackend:
    """httpx transport that records requests and answers through a handler."""

    def __init__(self, handler: Handler | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Handler = handler or (lambda request: httpx.Response(200, json={"ok": True}))
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def settings() -> Settings:
    return Settings(base_url=BASE_URL)


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
async def client(settings: Settings, backend: RecordingBackend):
    async with RestClient.create(settings, transport=backend.transport) as rest_client:
        yield rest_client


@pytest.fixture(autouse=True)
def _restore_package_logger():
    logger = logging.getLogger(LOGGER_NAME)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Shared fixtures for publisher tests."""

from dataclasses import dataclass
from typing import Mapping
from urllib.parse import parse_qsl, urlsplit

import pytest

from influx_publisher import DestinationConfig, HttpResponse, HttpSender, MetricRecord
from influx_publisher.exceptions import TransportError

BASE_URL = "http://influx.test:8086"


@dataclass
class RecordedRequest:
    """A request captured by FakeDestination."""
    method: str
    url: str
    headers: dict[str, str]
    body: bytes

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    @property
    def query(self) -> str:
        return urlsplit(self.url).query

    @property
    def params(self) -> list[tuple[str, str]]:
        return parse_qsl(self.query, keep_blank_values=True)

    @property
    def path_and_query(self) -> str:
        return f"{self.path}?{self.query}" if self.query else self.path

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")


class FakeDestination(HttpSender):
    """In-memory HttpSender that records requests and answers from stubs keyed by path."""

    def __init__(self) -> None:
        self.requests: list[RecordedRequest] = []
        self._stubs: dict[str, HttpResponse | Exception] = {}
        self.closed = False

    def stub(
        self,
        path: str,
        status: int = 204,
        headers: dict[str, str] | None = None,
        body: str = "",
    ) -> None:
        self._stubs[path] = HttpResponse(status=status, headers=headers or {}, body=body)

    def fail(self, path: str, message: str = "connection refused") -> None:
        self._stubs[path] = TransportError(message)

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> HttpResponse:
        self.requests.append(RecordedRequest(method, url, dict(headers or {}), body or b""))
        stub = self._stubs.get(urlsplit(url).path)
        if stub is None:
            return HttpResponse(status=404, body="not found")
        if isinstance(stub, Exception):
            raise stub
        return stub

    def close(self) -> None:
        self.closed = True

    def requests_to(self, path: str, method: str | None = None) -> list[RecordedRequest]:
        return [
            request for request in self.requests
            if request.path == path and (method is None or request.method == method)
        ]

    def posts(self) -> list[RecordedRequest]:
        return [request for request in self.requests if request.method == "POST"]


@pytest.fixture
def destination() -> FakeDestination:
    """Fake destination with no stubs configured."""
    return FakeDestination()


@pytest.fixture
def config() -> DestinationConfig:
    """Valid config for either dialect."""
    return DestinationConfig(uri=BASE_URL, db="mydb", token="my-token")


@pytest.fixture
def counter_record() -> MetricRecord:
    """A single counter record at timestamp 1ms."""
    return MetricRecord(
        name="my_counter",
        fields={"value": 0.0},
        tags={"metric_type": "counter"},
        timestamp=1,
    )

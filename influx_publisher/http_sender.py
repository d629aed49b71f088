# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""HTTP transport abstraction used for probe and write requests."""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Mapping

import requests
from requests.structures import CaseInsensitiveDict

from .exceptions import TransportError

logger = logging.getLogger(__name__)

# Query parameters carrying legacy credentials
_CREDENTIAL_PARAM = re.compile(r"([?&](?:u|p)=)[^&#\s]*")


def redact_url(text: str) -> str:
    """Mask the u and p query parameters in a URL, or in text containing one."""
    return _CREDENTIAL_PARAM.sub(r"\1***", text)


@dataclass
class HttpResponse:
    """Response returned by an HttpSender.

    Attributes:
        status: HTTP status code
        headers: Response headers (case-insensitive lookup)
        body: Decoded response body
    """
    status: int
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CaseInsensitiveDict):
            self.headers = CaseInsensitiveDict(self.headers or {})

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status < 300


class HttpSender(ABC):
    """Abstract transport capable of sending a single HTTP request.

    Implementations own retries, pooling and TLS; callers make exactly one
    ``send`` call per request they want on the wire.
    """

    @abstractmethod
    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> HttpResponse:
        """Send a request.

        Args:
            method: HTTP method (HEAD, POST, ...)
            url: Fully built URL including the query string
            headers: Request headers
            body: Raw request body

        Returns:
            HttpResponse for any status code

        Raises:
            TransportError: If no response was received
        """
        pass

    def close(self) -> None:
        """Release transport resources."""
        pass


class RequestsHttpSender(HttpSender):
    """HttpSender backed by a requests Session."""

    def __init__(
        self,
        connect_timeout: float = 1.0,
        read_timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        """Initialize the sender.

        Args:
            connect_timeout: Connect timeout in seconds
            read_timeout: Read timeout in seconds
            session: Optional pre-configured session
        """
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.session = session or requests.Session()

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> HttpResponse:
        try:
            response = self.session.request(
                method,
                url,
                headers=dict(headers or {}),
                data=body,
                timeout=(self.connect_timeout, self.read_timeout),
                allow_redirects=False,
            )
        except requests.RequestException as e:
            message = redact_url(f"{method} {url} failed: {e}")
            logger.debug(message)
            raise TransportError(message) from e

        return HttpResponse(
            status=response.status_code,
            headers=CaseInsensitiveDict(response.headers),
            body=response.text,
        )

    def close(self) -> None:
        self.session.close()

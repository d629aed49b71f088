# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Dialect-aware construction and submission of write requests."""

import gzip
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Sequence
from urllib.parse import quote, urlencode

from .config import DestinationConfig
from .dialect import Dialect
from .exceptions import TransportError, WriteError
from .http_sender import HttpSender, redact_url
from .line_protocol import partition

logger = logging.getLogger(__name__)

PRECISION = "ms"
CONTENT_TYPE = "text/plain; charset=utf-8"


@dataclass
class WriteRequest:
    """A fully built HTTP request ready for the transport."""
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


@dataclass
class DispatchResult:
    """Outcome of submitting an encoded batch.

    Attributes:
        batches: Number of write requests attempted
        succeeded: Number of write requests accepted by the destination
        error: First failure, if any
    """
    batches: int = 0
    succeeded: int = 0
    error: WriteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _build_url(base_uri: str, path: str, params: list[tuple[str, str]]) -> str:
    query = urlencode(params, quote_via=quote)
    return f"{base_uri}{path}?{query}" if query else f"{base_uri}{path}"


class WriteStrategy(ABC):
    """Builds write requests for one dialect."""

    dialect: Dialect
    path: str

    def __init__(self, config: DestinationConfig):
        self.config = config

    @abstractmethod
    def query_params(self) -> list[tuple[str, str]]:
        """Ordered query parameters for the write endpoint."""
        pass

    @abstractmethod
    def auth_headers(self) -> dict[str, str]:
        """Authorization headers for this dialect."""
        pass

    def build_write_request(self, lines: Sequence[str]) -> WriteRequest:
        """Build the write request for a batch of encoded lines."""
        body = "\n".join(lines).encode("utf-8")
        headers = {"Content-Type": CONTENT_TYPE}
        headers.update(self.auth_headers())
        if self.config.compressed:
            body = gzip.compress(body)
            headers["Content-Encoding"] = "gzip"
        return WriteRequest(
            method="POST",
            url=_build_url(self.config.base_uri, self.path, self.query_params()),
            headers=headers,
            body=body,
        )

    def build_create_database_request(self) -> WriteRequest | None:
        """Database creation request issued before the first write, if the dialect has one."""
        return None


class LegacyWriteStrategy(WriteStrategy):
    """Single-node dialect: ``/write`` with db/consistency parameters."""

    dialect = Dialect.LEGACY_SINGLE_NODE
    path = "/write"

    def _use_password_auth(self) -> bool:
        return self.config.token is None and bool(self.config.username) and self.config.password is not None

    def query_params(self) -> list[tuple[str, str]]:
        params = [
            ("consistency", self.config.consistency or "one"),
            ("precision", PRECISION),
            ("db", self.config.db or ""),
        ]
        if self.config.retention_policy:
            params.append(("rp", self.config.retention_policy))
        if self._use_password_auth():
            params.append(("u", self.config.username))
            params.append(("p", self.config.password))
        return params

    def auth_headers(self) -> dict[str, str]:
        if self.config.token is not None:
            return {"Authorization": f"Bearer {self.config.token}"}
        return {}

    def create_database_query(self) -> str:
        """CREATE DATABASE statement including any configured retention clauses."""
        config = self.config
        statement = f'CREATE DATABASE "{config.db}"'
        clauses = []
        if config.retention_duration:
            clauses.append(f"DURATION {config.retention_duration}")
        if config.retention_replication_factor is not None:
            clauses.append(f"REPLICATION {config.retention_replication_factor}")
        if config.retention_shard_duration:
            clauses.append(f"SHARD DURATION {config.retention_shard_duration}")
        if config.retention_policy:
            clauses.append(f"NAME {config.retention_policy}")
        if clauses:
            statement = f"{statement} WITH {' '.join(clauses)}"
        return statement

    def build_create_database_request(self) -> WriteRequest:
        params = [("q", self.create_database_query())]
        if self._use_password_auth():
            params.append(("u", self.config.username))
            params.append(("p", self.config.password))
        return WriteRequest(
            method="POST",
            url=_build_url(self.config.base_uri, "/query", params),
            headers=self.auth_headers(),
        )


class MultiTenantWriteStrategy(WriteStrategy):
    """Multi-tenant dialect: ``/api/v2/write`` with org/bucket parameters and token auth."""

    dialect = Dialect.MULTI_TENANT
    path = "/api/v2/write"

    def query_params(self) -> list[tuple[str, str]]:
        params = [("precision", PRECISION)]
        if self.config.org:
            params.append(("org", self.config.org))
        params.append(("bucket", self.config.resolved_bucket or ""))
        return params

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Token {self.config.token}"}


STRATEGIES: dict[Dialect, type[WriteStrategy]] = {
    Dialect.LEGACY_SINGLE_NODE: LegacyWriteStrategy,
    Dialect.MULTI_TENANT: MultiTenantWriteStrategy,
}


class WriteDispatcher:
    """Submits encoded batches using the request shape of the detected dialect.

    Each chunk of ``batch_size`` lines is submitted exactly once; there are
    no retries. All chunks are attempted and the first failure is reported.
    """

    def __init__(self, config: DestinationConfig, sender: HttpSender):
        self.config = config
        self.sender = sender
        self._database_created = False

    def strategy_for(self, dialect: Dialect) -> WriteStrategy:
        try:
            strategy_cls = STRATEGIES[dialect]
        except KeyError as exc:
            raise ValueError(f"No write strategy for dialect: {dialect.value}") from exc
        return strategy_cls(self.config)

    def ensure_database(self, dialect: Dialect) -> bool:
        """Create the destination database once, best effort.

        Returns:
            True if the database is known to exist or was not required
        """
        if self._database_created or not self.config.auto_create_db:
            return True

        request = self.strategy_for(dialect).build_create_database_request()
        if request is None:
            return True

        try:
            response = self.sender.send(request.method, request.url, request.headers, request.body)
        except TransportError as e:
            logger.warning(redact_url(f"Unable to create database '{self.config.db}': {e}"))
            return False

        if not response.is_successful:
            logger.warning(
                f"Unable to create database '{self.config.db}': status {response.status} {response.body}"
            )
            return False

        self._database_created = True
        logger.debug(f"Database '{self.config.db}' is ready")
        return True

    def dispatch(self, dialect: Dialect, lines: Sequence[str]) -> DispatchResult:
        """Submit an encoded batch.

        Args:
            dialect: Resolved destination dialect
            lines: Encoded batch; an empty batch sends nothing

        Returns:
            DispatchResult describing the submission
        """
        result = DispatchResult()
        if not lines:
            return result

        strategy = self.strategy_for(dialect)
        for chunk in partition(lines, self.config.batch_size):
            request = strategy.build_write_request(chunk)
            result.batches += 1
            error = self._submit(request, len(chunk))
            if error is None:
                result.succeeded += 1
            elif result.error is None:
                result.error = error
        return result

    def _submit(self, request: WriteRequest, line_count: int) -> WriteError | None:
        url = redact_url(request.url)
        try:
            response = self.sender.send(request.method, request.url, request.headers, request.body)
        except TransportError as e:
            logger.error(redact_url(f"Failed to send metrics batch to {url}: {e}"))
            return WriteError(redact_url(f"Failed to send metrics batch: {e}"))

        if not response.is_successful:
            logger.error(
                "Failed to send metrics batch",
                extra={"url": url, "status": response.status, "body": response.body},
            )
            return WriteError(
                f"Write rejected with status {response.status}: {response.body}",
                status=response.status,
                body=response.body,
            )

        logger.debug(f"Successfully sent {line_count} metrics to {url}")
        return None

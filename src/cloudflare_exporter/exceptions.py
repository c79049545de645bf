# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the Cloudflare Prometheus exporter.

This module defines the exception hierarchy used throughout the exporter.
All exceptions inherit from ExporterError, making it easy to catch
all exporter-related exceptions with a single except clause.
"""


class ExporterError(Exception):
    """Base exception for all exporter errors.

    This is the root exception class for the exporter. Catch this exception
    to handle any error originating from the package.

    Example:
        try:
            await orchestrator.run_cycle()
        except ExporterError as e:
            logger.error(f"Exporter error: {e}")
    """

    pass


class UpstreamError(ExporterError):
    """Raised when a call to the Cloudflare API fails at the transport level.

    Covers non-2xx HTTP responses and network failures (connection errors,
    timeouts). Whether the failure is worth retrying is carried on the
    exception so the retry policy does not need to know about HTTP.

    Attributes:
        status_code: HTTP status returned by the API, or None for
            network-level failures.
        retryable: Explicit retry hint. None means "decide from the status
            code".

    Example:
        try:
            zones = await client.fetch_zones()
        except UpstreamError as e:
            if e.status_code == 429:
                logger.warning("Rate limited by Cloudflare API")
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retryable: bool | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class QueryError(ExporterError):
    """Raised when the GraphQL API answers with a well-formed error payload.

    The request reached the API and was rejected (bad field, permission
    denied, plan does not include the dataset), so retrying cannot help.

    Attributes:
        messages: The error messages reported by the API.
    """

    def __init__(self, messages: list[str] | tuple[str, ...]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages) or "GraphQL query failed")


class AuthenticationError(ExporterError):
    """Raised when no usable API credentials are configured.

    Either an API token, or an API key together with the account email,
    must be provided. This is fatal at startup.
    """

    pass


class SerializationError(ExporterError):
    """Raised when the exposition text cannot be produced from a snapshot."""

    pass


class ConfigurationError(ExporterError):
    """Raised when configuration is invalid.

    This exception is raised during initialization when the provided
    configuration values are invalid, incompatible, or cannot be parsed.

    Common causes include:
    - Non-numeric values for numeric environment variables
    - Batch size outside the 1-10 range accepted by the GraphQL API
    - Non-positive rate limit or refresh interval

    Example:
        try:
            config = ExporterConfig.from_env()
        except ConfigurationError as e:
            logger.error(f"Invalid configuration: {e}")
            raise SystemExit(1)
    """

    pass


class BackendConnectionError(ExporterError):
    """Raised when connection to the state store backend fails.

    This may be a transient network issue or indicate that the backend
    service is unavailable.
    """

    pass


class BackendOperationError(ExporterError):
    """Raised when a state store operation fails.

    This exception is raised when a read or write against the state store
    fails after the connection has been established, for example because
    a stored document cannot be decoded.

    Example:
        try:
            await store.set_state(key, state.to_dict())
        except BackendOperationError as e:
            logger.error(f"Failed to persist state: {e}")
    """

    pass

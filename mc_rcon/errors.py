# mc_rcon/errors.py
from __future__ import annotations

from http import HTTPStatus
from typing import Optional


class RconError(Exception):
    """Base class for everything the RCON client raises."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR
    template = "RCON error: {cause}"

    def __init__(self, cause: str = "") -> None:
        self.cause = cause
        super().__init__(self.template.format(cause=cause))


class ConfigurationError(RconError):
    status = HTTPStatus.BAD_GATEWAY
    template = "Invalid RCON configuration: {cause}"


class RconConnectionError(RconError):
    status = HTTPStatus.BAD_GATEWAY
    template = "Failed to connect to the RCON server: {cause}"


class SendError(RconError):
    status = HTTPStatus.SERVICE_UNAVAILABLE
    template = "Failed to send data to the RCON server: {cause}"


class ReceiveError(RconError):
    status = HTTPStatus.SERVICE_UNAVAILABLE
    template = "Failed to receive data from the RCON server: {cause}"


class ShutdownError(RconError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    template = "Failed to shutdown the RCON connection: {cause}"


class DecodeError(RconError):
    """The server sent bytes that are not a well-formed RCON packet."""

    status = HTTPStatus.SERVICE_UNAVAILABLE
    template = "Failed to decode RCON response: {cause}"


class RconTimeoutError(RconError):
    status = HTTPStatus.SERVICE_UNAVAILABLE
    template = "Timeout waiting for RCON response, elapsed time: {cause}ms"

    def __init__(self, elapsed_ms: int) -> None:
        self.elapsed_ms = elapsed_ms
        super().__init__(str(elapsed_ms))


class AuthenticationRequired(RconError):
    """
    Login was refused, or the server challenged for a login again in the
    middle of a command exchange. This is a protocol outcome, not an I/O
    failure.
    """

    status = HTTPStatus.NETWORK_AUTHENTICATION_REQUIRED
    template = "RCON login failed: {cause}"


def status_for(exc: Optional[BaseException]) -> HTTPStatus:
    """HTTP-style status for an exception raised by the client."""
    if isinstance(exc, RconError):
        return exc.status
    return HTTPStatus.INTERNAL_SERVER_ERROR

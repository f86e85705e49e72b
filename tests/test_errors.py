from http import HTTPStatus

import pytest

from mc_rcon.errors import (
    AuthenticationRequired,
    ConfigurationError,
    DecodeError,
    RconConnectionError,
    RconError,
    RconTimeoutError,
    ReceiveError,
    SendError,
    ShutdownError,
    status_for,
)


@pytest.mark.parametrize(
    "exc, status",
    [
        (ConfigurationError("x"), HTTPStatus.BAD_GATEWAY),
        (RconConnectionError("refused"), HTTPStatus.BAD_GATEWAY),
        (SendError("x"), HTTPStatus.SERVICE_UNAVAILABLE),
        (ReceiveError("x"), HTTPStatus.SERVICE_UNAVAILABLE),
        (DecodeError("x"), HTTPStatus.SERVICE_UNAVAILABLE),
        (RconTimeoutError(5000), HTTPStatus.SERVICE_UNAVAILABLE),
        (AuthenticationRequired("wrong password"), HTTPStatus.NETWORK_AUTHENTICATION_REQUIRED),
        (ShutdownError("x"), HTTPStatus.INTERNAL_SERVER_ERROR),
        (ValueError("not ours"), HTTPStatus.INTERNAL_SERVER_ERROR),
    ],
)
def test_status_for(exc: BaseException, status: HTTPStatus) -> None:
    assert status_for(exc) == status


def test_messages_carry_cause() -> None:
    e = RconConnectionError("Connection refused")
    assert str(e) == "Failed to connect to the RCON server: Connection refused"
    assert e.cause == "Connection refused"
    assert isinstance(e, RconError)


def test_timeout_message() -> None:
    e = RconTimeoutError(1500)
    assert e.elapsed_ms == 1500
    assert str(e) == "Timeout waiting for RCON response, elapsed time: 1500ms"

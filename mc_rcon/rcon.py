# mc_rcon/rcon.py
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Mapping, Optional

from . import config as rcon_config
from .config import RconConfig
from .errors import (
    AuthenticationRequired,
    DecodeError,
    RconConnectionError,
    ReceiveError,
    SendError,
    ShutdownError,
)
from .packet import (
    AUTH_FAILED_ID,
    MAX_REQUEST_SIZE,
    MAX_RESPONSE_SIZE,
    RconRequest,
    RconResponse,
    RequestType,
    ResponseType,
    decode,
    encode,
    new_request,
)

log = logging.getLogger(__name__)


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    READY = "ready"          # logged in
    CLOSED = "closed"


_OPEN = (ConnectionState.CONNECTED, ConnectionState.READY)


def _describe(e: BaseException) -> str:
    return str(e) or type(e).__name__


class RconConnection:
    """
    One TCP connection to an RCON server, good for a single
    login-then-command cycle. There is no reconnect: after a failure or a
    disconnect, build a new one.

    Replies are read with a single read() of at most MAX_RESPONSE_SIZE
    bytes. Servers that split a reply across several TCP segments or RCON
    packets will be cut short. `config.timeout_ms` is not applied to any of
    the awaits below.
    """

    def __init__(self, config: RconConfig, environ: Optional[Mapping[str, str]] = None) -> None:
        self.config = config
        self.state = ConnectionState.DISCONNECTED
        self._environ = environ
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None

    def __repr__(self) -> str:
        return f"<RconConnection {self.config.host}:{self.config.port} {self.state.value}>"

    async def connect(self) -> None:
        if self.state is not ConnectionState.DISCONNECTED:
            raise RconConnectionError(f"connection is already {self.state.value}")
        log.debug("connecting to %s:%d", self.config.host, self.config.port)
        try:
            self._reader, self._writer = await asyncio.open_connection(
                self.config.host, self.config.port
            )
        except (OSError, UnicodeError) as e:
            # UnicodeError: host name IDNA can't encode, e.g. a label over 63 chars
            raise RconConnectionError(_describe(e)) from e
        self.state = ConnectionState.CONNECTED

    async def authenticate(self) -> bool:
        """
        Log in with the configured password.

        Returns False when the server answers with id -1 (wrong password);
        transport and protocol problems raise instead.
        """
        cfg = rcon_config.resolve(self._environ)
        response = await self.execute(new_request(RequestType.AUTH, cfg.password))
        if response.response_id == AUTH_FAILED_ID:
            log.debug("login refused by %s:%d", self.config.host, self.config.port)
            return False
        self.state = ConnectionState.READY
        return True

    async def execute(self, request: RconRequest) -> RconResponse:
        """Send one request and decode the single reply that follows it."""
        if self.state not in _OPEN:
            raise SendError(f"not connected ({self.state.value})")

        data = encode(request)
        if len(data) > MAX_REQUEST_SIZE:
            raise SendError("request exceeds maximum size")

        if self._reader is None or self._writer is None:
            raise SendError("not connected")
        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as e:
            raise SendError(_describe(e)) from e
        log.debug("sent %d bytes (id=%d, type=%s)", len(data), request.request_id, request.request_type.name)

        try:
            raw = await self._reader.read(MAX_RESPONSE_SIZE)
        except OSError as e:
            raise ReceiveError(_describe(e)) from e
        log.debug("received %d bytes", len(raw))

        try:
            return decode(raw)
        except DecodeError as e:
            raise ReceiveError(e.cause) from e

    async def disconnect(self) -> None:
        if self.state not in _OPEN:
            raise ShutdownError(f"connection is {self.state.value}")
        writer = self._writer
        self.state = ConnectionState.CLOSED
        self._reader = self._writer = None

        if writer is None:
            raise ShutdownError("connection has no transport")
        log.debug("disconnecting from %s:%d", self.config.host, self.config.port)
        try:
            if writer.can_write_eof():
                writer.write_eof()
            writer.close()
            await writer.wait_closed()
        except OSError as e:
            raise ShutdownError(_describe(e)) from e


class RconClient:
    """
    Handle shared by every caller in the process. `execute` runs one whole
    connect/login/command/disconnect cycle at a time, guarded by `lock`.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self.environ = environ
        self.lock = asyncio.Lock()

    async def get_connection(self) -> RconConnection:
        """Resolve the configuration again and open a fresh connection."""
        conn = RconConnection(rcon_config.resolve(self.environ), environ=self.environ)
        await conn.connect()
        return conn

    async def execute(self, command: str) -> RconResponse:
        async with self.lock:
            conn = await self.get_connection()
            try:
                return await self._run(conn, command)
            finally:
                # a shutdown failure wins over whatever happened above
                await conn.disconnect()

    async def _run(self, conn: RconConnection, command: str) -> RconResponse:
        if not await conn.authenticate():
            raise AuthenticationRequired("wrong password")

        response = await conn.execute(new_request(RequestType.EXEC_COMMAND, command))
        if response.response_type is ResponseType.AUTH_RESPONSE:
            # the session was dropped between login and command
            raise AuthenticationRequired("server asked to log in again")
        return response

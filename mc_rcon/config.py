# mc_rcon/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError

log = logging.getLogger(__name__)

HOST_VAR = "RCON_HOST"
PORT_VAR = "RCON_PORT"
PASSWORD_VAR = "RCON_PASSWORD"
TIMEOUT_VAR = "RCON_TIMEOUT"

DEFAULT_TIMEOUT_MS = 5000


@dataclass(frozen=True)
class RconConfig:
    host: str
    port: int
    password: str
    # Carried for callers; the connection does not apply it as a deadline yet.
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def masked(self) -> dict:
        return {
            "host": self.host,
            "port": self.port,
            "password": "*" * len(self.password),
            "timeout_ms": self.timeout_ms,
        }


def _required(env: Mapping[str, str], name: str) -> str:
    value = env.get(name)
    if value is None:
        raise ConfigurationError(f"Environment variable '{name}' is not set")
    return value


def _number(raw: str, name: str, upper: Optional[int] = None) -> int:
    if not (raw.isascii() and raw.isdigit()):
        raise ConfigurationError(f"Environment variable '{name}' is not a valid number")
    n = int(raw)
    if upper is not None and n > upper:
        raise ConfigurationError(f"Environment variable '{name}' is not a valid number")
    return n


def resolve(environ: Optional[Mapping[str, str]] = None) -> RconConfig:
    """
    Build an RconConfig from RCON_HOST, RCON_PORT, RCON_PASSWORD and the
    optional RCON_TIMEOUT (milliseconds). Nothing is cached: every call
    reads the environment again.
    """
    env = os.environ if environ is None else environ
    log.debug("resolving RCON configuration from environment")

    host = _required(env, HOST_VAR)
    port = _number(_required(env, PORT_VAR), PORT_VAR, upper=65535)
    password = _required(env, PASSWORD_VAR)

    raw_timeout = env.get(TIMEOUT_VAR) or ""
    timeout_ms = _number(raw_timeout, TIMEOUT_VAR) if raw_timeout else DEFAULT_TIMEOUT_MS

    return RconConfig(host=host, port=port, password=password, timeout_ms=timeout_ms)

from .config import RconConfig, resolve
from .errors import (
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
from .packet import RconRequest, RconResponse, RequestType, ResponseType
from .rcon import RconClient, RconConnection

__version__ = "0.1.0"

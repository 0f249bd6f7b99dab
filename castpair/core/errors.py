"""Domain-specific errors for castpair."""


class CastpairError(Exception):
    """Base error for castpair."""


class ConfigError(CastpairError):
    """Raised when a settings file or override cannot be used."""


class CatalogueError(CastpairError):
    """Raised when the rooms file cannot be read or does not validate."""


class InvalidMacError(CastpairError, ValueError):
    """Raised when a value is not a 6-octet colon/hyphen MAC address."""


class InvalidModeError(CastpairError, ValueError):
    """Raised when a forwarding mode cannot be written to the control plane."""


class RemoteError(CastpairError):
    """Base control-plane error."""


class RemoteUnreachableError(RemoteError):
    """Raised on connection failures and timeouts talking to the control plane."""


class RemoteRejectedError(RemoteError):
    """Raised when the control plane answers with a non-success status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(RemoteError):
    """Raised when a control-plane response body cannot be interpreted."""


class NeighborLookupError(CastpairError):
    """Base neighbor-table lookup error."""


class NeighborLaunchError(NeighborLookupError):
    """Raised when the lookup command cannot be started."""


class NeighborTimeoutError(NeighborLookupError):
    """Raised when the lookup command exceeds its deadline and is killed."""


class RoomLookupError(CastpairError):
    """Base error for pairing-link room lookups."""


class InvalidRoomIdError(RoomLookupError):
    """Raised when a room identifier is not a positive integer or a link is not validly signed."""


class RoomNotFoundError(RoomLookupError):
    """Raised when a room does not exist or has no device MAC configured."""

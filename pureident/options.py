"""
Request options for an ident query.

Options are validated when constructed so configuration mistakes surface
before any socket is opened.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from .exceptions import ConfigurationError, ErrorKind
from .protocol.constants import IDENT_PORT


MIN_PORT = 1
MAX_PORT = 65535

_FIELD_NAMES = frozenset(
    {
        "address",
        "port",
        "server_port",
        "client_port",
        "abort",
        "timeout",
        "local_address",
        "check_ports",
    }
)


def _is_port(value: Any) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and MIN_PORT <= value <= MAX_PORT
    )


@dataclass(frozen=True)
class RequestOptions:
    """
    Options for one ident request.

    Attributes:
        address: identd host to query (required)
        server_port: Port on the identd host side of the connection (required)
        client_port: Port on the querying host side of the connection (required)
        port: identd service port
        abort: Abort replies of more than 1000 bytes without an EOL
        timeout: Optional wall-clock limit in seconds for the whole exchange
        local_address: Local address to bind to before connecting
        check_ports: Require the reply's port pair to match the query
    """

    address: Optional[str] = None
    server_port: Optional[int] = None
    client_port: Optional[int] = None
    port: int = IDENT_PORT
    abort: bool = True
    timeout: Optional[float] = None
    local_address: Optional[str] = None
    check_ports: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError for missing or invalid options."""
        if not self.address:
            raise ConfigurationError(
                "Undefined address", kind=ErrorKind.UNDEFINED_LOCAL_ADDRESS
            )
        if not self.server_port:
            raise ConfigurationError(
                "Undefined server port", kind=ErrorKind.UNDEFINED_SERVER_PORT
            )
        if not self.client_port:
            raise ConfigurationError(
                "Undefined local port", kind=ErrorKind.UNDEFINED_LOCAL_PORT
            )
        if not isinstance(self.address, str):
            raise ConfigurationError(
                "Address must be a string", context={"address": self.address}
            )
        for name in ("server_port", "client_port", "port"):
            value = getattr(self, name)
            if not _is_port(value):
                raise ConfigurationError(
                    f"Invalid {name}: expected an integer in {MIN_PORT}-{MAX_PORT}",
                    context={name: value},
                )
        if not isinstance(self.abort, bool):
            raise ConfigurationError("abort must be a boolean", context={"abort": self.abort})
        if not isinstance(self.check_ports, bool):
            raise ConfigurationError(
                "check_ports must be a boolean", context={"check_ports": self.check_ports}
            )
        if self.timeout is not None and (
            isinstance(self.timeout, bool)
            or not isinstance(self.timeout, (int, float))
            or self.timeout <= 0
        ):
            raise ConfigurationError(
                "timeout must be a positive number", context={"timeout": self.timeout}
            )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "RequestOptions":
        """
        Build options from a plain mapping.

        Keys set to None fall back to their defaults, so
        ``{"port": None}`` queries port 113.
        """
        unknown = set(mapping) - _FIELD_NAMES
        if unknown:
            raise ConfigurationError(
                "Unknown request options", context={"options": ", ".join(sorted(unknown))}
            )
        values = {key: value for key, value in mapping.items() if value is not None}
        return cls(**values)

    @classmethod
    def coerce(
        cls,
        options: Union["RequestOptions", Mapping[str, Any], None] = None,
        **overrides: Any,
    ) -> "RequestOptions":
        """Accept RequestOptions, a mapping, or keyword arguments alone.

        Overrides go through ``from_mapping`` in every case, so unknown keys
        and None values behave the same whatever ``options`` is.
        """
        if isinstance(options, RequestOptions):
            if not overrides:
                return options
            merged = options.to_dict()
        else:
            merged = dict(options or {})
        merged.update(overrides)
        return cls.from_mapping(merged)

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)

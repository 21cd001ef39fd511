"""Outbound query line for the Ident protocol."""

from .constants import EOL


# <port-on-server> , <port-on-client>
# <port-on-server> is the TCP port (decimal) on the system running identd,
# <port-on-client> the TCP port (decimal) on the querying system.
def build_request(server_port: int, client_port: int) -> bytes:
    """Render ``<server_port>, <client_port>`` followed by CR LF.

    No validation is done here; ``RequestOptions`` already guarantees both
    ports are integers in 1..65535.
    """
    return f"{server_port}, {client_port}".encode("ascii") + EOL

"""
Mocking infrastructure for pureident tests.

This module provides reusable mock components for testing network-dependent
functionality over loopback sockets.
"""

from .identd_server import TEST_HOST, MockIdentdServer, closed_port

__all__ = ["TEST_HOST", "MockIdentdServer", "closed_port"]

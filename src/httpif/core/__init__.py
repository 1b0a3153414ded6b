"""
=============================================================================
CORE TRANSPORT COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  SOCKET SERVER   listening socket, accept loop, signal handling     │
    └──────────────────────────────┬──────────────────────────────────────┘
                                   │ Connection
                                   ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  THREAD POOL     fixed workers, bounded queue (full → 503)          │
    └──────────────────────────────┬──────────────────────────────────────┘
                                   │ worker runs the connection handler
                                   ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  CONNECTION      read one request, send one response, close         │
    └─────────────────────────────────────────────────────────────────────┘

Nothing here knows about files or methods; that lives in the dispatcher.

=============================================================================
"""

from .connection import Connection, RequestTooLargeError
from .socket_server import SocketServer
from .thread_pool import ThreadPool

__all__ = [
    "Connection",
    "RequestTooLargeError",
    "SocketServer",
    "ThreadPool",
]

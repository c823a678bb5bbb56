"""Chat RPC package: an in-memory message board behind a typed RPC contract.

This package provides a FastAPI application factory named ``create_app``
inside ``chat_rpc/server.py`` and a matching :class:`ChatClient`.

Typical usage
-------------
from chat_rpc import create_app
app = create_app()

or, from the provided launcher:

python scripts/run_server.py --host 127.0.0.1 --port 8080
"""

from __future__ import annotations

from .client import ChatClient
from .contract import Router
from .errors import InputValidationError, MethodNotSupported, ProcedureNotFound, RPCError
from .models import ChatMessage, Greeting, NewMessage
from .server import create_app
from .store import MessageStore

__all__ = [
    "create_app",
    "ChatClient",
    "ChatMessage",
    "Greeting",
    "NewMessage",
    "MessageStore",
    "Router",
    "RPCError",
    "InputValidationError",
    "ProcedureNotFound",
    "MethodNotSupported",
    "__version__",
    "get_version",
]

# ---------------------------------------------------------------------
# Version handling
# ---------------------------------------------------------------------
__version__ = "0.1.0"


def get_version() -> str:
    """Return the package version."""
    return __version__

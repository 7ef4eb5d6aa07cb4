"""HTTP server for domain submission and status."""

from zonekeeper.server.app import DomainHandler, create_app
from zonekeeper.server.main import DomainServer, run_server

__all__ = [
    "DomainHandler",
    "DomainServer",
    "create_app",
    "run_server",
]

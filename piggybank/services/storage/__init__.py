"""
Storage Services Package

Provides the abstract persistence gateway and its implementations:
an in-memory store for the demo, and Google Sheets as the remote store.
"""

from piggybank.services.storage.interface import (
    ConnectionError,
    GatewayError,
    NotAuthenticatedError,
    NotFoundError,
    PersistenceGateway,
)
from piggybank.services.storage.memory import InMemoryGateway
from piggybank.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsGateway,
    GoogleSheetsUserDirectory,
)

__all__ = [
    # Interface
    "PersistenceGateway",
    # Exceptions
    "ConnectionError",
    "GatewayError",
    "NotAuthenticatedError",
    "NotFoundError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsGateway",
    "GoogleSheetsUserDirectory",
    "InMemoryGateway",
]

"""Services package."""

from piggybank.services.auth import (
    AuthenticationError,
    AuthProvider,
    DemoAuthProvider,
    Identity,
    InMemoryUserDirectory,
    SessionAuthProvider,
    UserDirectory,
    UserRecord,
)
from piggybank.services.storage import (
    ConnectionError,
    GatewayError,
    GoogleSheetsClient,
    GoogleSheetsGateway,
    GoogleSheetsUserDirectory,
    InMemoryGateway,
    NotAuthenticatedError,
    NotFoundError,
    PersistenceGateway,
)

__all__ = [
    # Authentication
    "AuthenticationError",
    "AuthProvider",
    "DemoAuthProvider",
    "Identity",
    "InMemoryUserDirectory",
    "SessionAuthProvider",
    "UserDirectory",
    "UserRecord",
    # Storage services
    "ConnectionError",
    "GatewayError",
    "GoogleSheetsClient",
    "GoogleSheetsGateway",
    "GoogleSheetsUserDirectory",
    "InMemoryGateway",
    "NotAuthenticatedError",
    "NotFoundError",
    "PersistenceGateway",
]

"""Azure AD directory client library.

This package wraps the Microsoft Graph group and user administration API
behind a typed, pageable interface.

Architecture:
- transport.py: token exchange and authenticated HTTP operations
- pagination.py: draining of @odata.nextLink collections
- models.py: typed records built from raw payloads
- client.py: DirectoryClient facade (lookups, group creation, memberships)
- exceptions.py: typed exceptions for error handling
- config/: settings loaded from the environment and /run/secrets

Usage:
    from azure_directory import DirectoryClient

    client = DirectoryClient("client-id", "secret", "contoso.onmicrosoft.com")
    group = client.get_group_by_mail_nickname("engineering")
    for member in client.get_group_members(group.id):
        print(member.display_name)
"""
from .client import DirectoryClient, odata_literal
from .exceptions import (
    DirectoryError,
    GraphAPIError,
    MissingFieldError,
    RemoteOperationError,
)
from .models import Group, GroupMember, GroupOwner, User, require_fields
from .pagination import PAGE_SIZE, drain
from .transport import (
    GRAPH_BASE_URI,
    GRAPH_SCOPE,
    LOGIN_AUTHORITY,
    REQUEST_TIMEOUT,
    GraphTransport,
    acquire_token,
)

__all__ = [
    # Client
    "DirectoryClient",
    "odata_literal",

    # Transport
    "GraphTransport",
    "acquire_token",
    "GRAPH_BASE_URI",
    "GRAPH_SCOPE",
    "LOGIN_AUTHORITY",
    "REQUEST_TIMEOUT",

    # Pagination
    "drain",
    "PAGE_SIZE",

    # Models
    "Group",
    "User",
    "GroupMember",
    "GroupOwner",
    "require_fields",

    # Exceptions
    "DirectoryError",
    "GraphAPIError",
    "MissingFieldError",
    "RemoteOperationError",
]

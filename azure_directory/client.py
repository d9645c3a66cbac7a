"""Directory client for Azure AD group and user administration.

Authenticates once with the client credentials flow and exposes group, user
and membership operations on top of the Graph API.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

import requests

from .exceptions import GraphAPIError, MissingFieldError, RemoteOperationError
from .models import GROUP_FIELDS, USER_FIELDS, Group, GroupMember, GroupOwner, User
from .pagination import drain
from .transport import GRAPH_BASE_URI, LOGIN_AUTHORITY, GRAPH_SCOPE, REQUEST_TIMEOUT, GraphTransport, acquire_token

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


def odata_literal(value: str) -> str:
    """Quote a value as an OData string literal, doubling embedded quotes."""
    return "'{}'".format(value.replace("'", "''"))


class DirectoryClient:
    """Client for Azure AD groups, users and memberships.

    Usage:
        client = DirectoryClient("client-id", "secret", "contoso.onmicrosoft.com")
        group = client.get_group_by_display_name("Engineering")
        members = client.get_group_members(group.id)

    ``user_fields`` and ``group_fields`` are read each time a collection is
    fetched, so changing them affects every later call on this client.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        tenant: str,
        auth_session: Optional[requests.Session] = None,
        http_session: Optional[requests.Session] = None,
        base_uri: str = GRAPH_BASE_URI,
        authority: str = LOGIN_AUTHORITY,
        scope: str = GRAPH_SCOPE,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """Authenticate and prepare the API transport.

        Args:
            client_id: Application (client) ID
            client_secret: Application secret
            tenant: Tenant ID or domain
            auth_session: Pre-configured session for the token request
            http_session: Pre-configured session for the API calls

        Raises:
            GraphAPIError: If the token request is rejected
            requests.RequestException: If the identity endpoint is unreachable
        """
        token = acquire_token(
            client_id,
            client_secret,
            tenant,
            session=auth_session,
            authority=authority,
            scope=scope,
            timeout=timeout,
        )
        self.transport = GraphTransport(token, session=http_session, base_uri=base_uri, timeout=timeout)
        self.user_fields: List[str] = list(USER_FIELDS)
        self.group_fields: List[str] = list(GROUP_FIELDS)

    @classmethod
    def from_settings(
        cls,
        settings,
        auth_session: Optional[requests.Session] = None,
        http_session: Optional[requests.Session] = None,
    ) -> "DirectoryClient":
        """Build a client from a GraphSettings instance."""
        client = cls(
            settings.client_id,
            settings.client_secret,
            settings.tenant_id,
            auth_session=auth_session,
            http_session=http_session,
            base_uri=settings.base_uri,
            authority=settings.authority,
            scope=settings.scope,
            timeout=settings.request_timeout,
        )
        client.user_fields = list(settings.user_fields)
        client.group_fields = list(settings.group_fields)
        return client

    def __repr__(self) -> str:
        return f"DirectoryClient(base_uri={self.base_uri!r})"

    def __enter__(self) -> "DirectoryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Release the HTTP session unless it was supplied by the caller."""
        self.transport.close()

    @property
    def base_uri(self) -> str:
        return self.transport.base_uri

    @property
    def access_token(self) -> str:
        return self.transport._token

    def _user_uri(self, user_id: str) -> str:
        return f"{self.base_uri}users/{user_id}"

    # ─────────────────────────────────────────────────────────────────────
    # Groups
    # ─────────────────────────────────────────────────────────────────────
    def get_group_by_id(self, group_id: str) -> Optional[Group]:
        """Get a group by ID.

        Returns:
            Group or None if the server answered with an error status
        """
        try:
            resp = self.transport.get(f"groups/{group_id}")
        except GraphAPIError as exc:
            logger.warning("Group %s not found (HTTP %s)", group_id, exc.status_code)
            return None
        return Group.from_response(resp)

    def get_group_by_display_name(self, display_name: str) -> Optional[Group]:
        """Get the first group with the given display name, or None."""
        return self._find_group("displayName", display_name)

    def get_group_by_mail_nickname(self, mail_nickname: str) -> Optional[Group]:
        """Get the first group with the given mailNickname, or None."""
        return self._find_group("mailNickname", mail_nickname)

    def _find_group(self, attribute: str, value: str) -> Optional[Group]:
        try:
            resp = self.transport.get("groups", {"$filter": f"{attribute} eq {odata_literal(value)}"})
        except GraphAPIError as exc:
            logger.warning("Group lookup by %s failed (HTTP %s)", attribute, exc.status_code)
            return None
        groups = resp.json().get("value") or []
        if not groups:
            return None
        return Group.from_dict(groups[0])

    def create_group(
        self,
        display_name: str,
        description: str,
        owners: Sequence[str] = (),
        members: Sequence[str] = (),
    ) -> Group:
        """Create a private unified group.

        Args:
            display_name: Name of the group, also used as mailNickname
            description: Description of the group
            owners: User IDs to add as owners
            members: User IDs to add as members

        Returns:
            The created group

        Raises:
            RemoteOperationError: If the server rejects the request
        """
        payload: Dict[str, Any] = {
            "displayName": display_name,
            "description": description,
            "securityEnabled": True,
            "mailEnabled": True,
            "mailNickname": display_name,
            "groupTypes": ["unified"],
            "visibility": "Private",
        }
        if owners:
            payload["owners@odata.bind"] = [self._user_uri(user_id) for user_id in owners]
        if members:
            payload["members@odata.bind"] = [self._user_uri(user_id) for user_id in members]

        try:
            resp = self.transport.post("groups", json=payload)
        except GraphAPIError as exc:
            raise RemoteOperationError("Unable to create group", exc.status_code) from exc

        group = Group.from_response(resp)
        logger.info("Created group %s (id=%s)", group.display_name, group.id)
        return group

    def set_group_description(self, group_id: str, description: str) -> bool:
        """Set the description of a group.

        Returns:
            True on success, False if the server rejected the update
        """
        try:
            self.transport.patch(f"groups/{group_id}", json={"description": description})
        except GraphAPIError as exc:
            logger.warning("Unable to update description of group %s (HTTP %s)", group_id, exc.status_code)
            return False
        return True

    def get_group_members(self, group_id: str, fields: Optional[Sequence[str]] = None) -> List[GroupMember]:
        """Get all members of a group.

        Members missing one of the selected user fields are skipped.

        Raises:
            RemoteOperationError: If a page cannot be fetched
        """
        entries = drain(self.transport, f"groups/{group_id}/members", self._fields(fields, self.user_fields))
        return self._map_collection(entries, GroupMember.from_dict)

    def get_group_owners(self, group_id: str, fields: Optional[Sequence[str]] = None) -> List[GroupOwner]:
        """Get all owners of a group.

        Raises:
            RemoteOperationError: If a page cannot be fetched
        """
        entries = drain(self.transport, f"groups/{group_id}/owners", self._fields(fields, self.user_fields))
        return self._map_collection(entries, GroupOwner.from_dict)

    def empty_group(self, group_id: str) -> None:
        """Remove every member from a group, one request per member.

        Raises:
            RemoteOperationError: If the member list cannot be fetched or a removal
                fails; members after the failing one are left in place
        """
        entries = drain(self.transport, f"groups/{group_id}/members", ["id"])
        removed = 0
        for entry in entries:
            member_id = entry.get("id")
            if not member_id:
                logger.debug("Skipping member entry without id in group %s", group_id)
                continue
            self.remove_user_from_group(str(member_id), group_id)
            removed += 1
        logger.info("Emptied group %s (%d members removed)", group_id, removed)

    # ─────────────────────────────────────────────────────────────────────
    # Enterprise applications
    # ─────────────────────────────────────────────────────────────────────
    def add_group_to_enterprise_app(self, group_id: str, application_object_id: str, application_role_id: str) -> None:
        """Assign a group to an enterprise application.

        Args:
            group_id: ID of the group to assign
            application_object_id: Object ID of the application's service principal
            application_role_id: App role the group receives

        Raises:
            RemoteOperationError: If the server rejects the assignment
        """
        try:
            self.transport.post(
                f"servicePrincipals/{application_object_id}/appRoleAssignments",
                json={
                    "principalId": group_id,
                    "appRoleId": application_role_id,
                    "resourceId": application_object_id,
                },
            )
        except GraphAPIError as exc:
            raise RemoteOperationError("Unable to add group to enterprise application", exc.status_code) from exc
        logger.info("Assigned group %s to application %s", group_id, application_object_id)

    def get_enterprise_app_groups(self, application_object_id: str) -> List[Group]:
        """Get all groups assigned to an enterprise application.

        Assignments of other principal types are ignored, and groups that
        cannot be resolved are left out.

        Raises:
            RemoteOperationError: If the assignment list cannot be fetched
        """
        assignments = drain(
            self.transport,
            f"servicePrincipals/{application_object_id}/appRoleAssignedTo",
            ["principalId", "principalType"],
        )
        groups = []
        for assignment in assignments:
            if str(assignment.get("principalType", "")).lower() != "group":
                continue
            principal_id = assignment.get("principalId")
            if not principal_id:
                logger.debug("Skipping group assignment without principalId")
                continue
            try:
                group = self.get_group_by_id(str(principal_id))
            except MissingFieldError as exc:
                logger.debug("Dropping group %s: %s", principal_id, exc)
                continue
            if group is not None:
                groups.append(group)
        return groups

    # ─────────────────────────────────────────────────────────────────────
    # Users
    # ─────────────────────────────────────────────────────────────────────
    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID, or None if the server answered with an error status."""
        try:
            resp = self.transport.get(f"users/{user_id}", {"$select": ",".join(USER_FIELDS)})
        except GraphAPIError as exc:
            logger.warning("User %s not found (HTTP %s)", user_id, exc.status_code)
            return None
        return User.from_response(resp)

    def get_user_groups(self, user_id: str, fields: Optional[Sequence[str]] = None) -> List[Group]:
        """Get all groups a user is a direct member of.

        Raises:
            RemoteOperationError: If a page cannot be fetched
        """
        entries = drain(
            self.transport,
            f"users/{user_id}/memberOf/microsoft.graph.group",
            self._fields(fields, self.group_fields),
        )
        return self._map_collection(entries, Group.from_dict)

    def add_user_to_group(self, user_id: str, group_id: str) -> None:
        """Add a user to a group.

        Raises:
            RemoteOperationError: If the server rejects the request
        """
        try:
            self.transport.post(f"groups/{group_id}/members/$ref", json={"@odata.id": self._user_uri(user_id)})
        except GraphAPIError as exc:
            raise RemoteOperationError("Unable to add user to group", exc.status_code) from exc
        logger.info("Added user %s to group %s", user_id, group_id)

    def remove_user_from_group(self, user_id: str, group_id: str) -> None:
        """Remove a user from a group.

        Raises:
            RemoteOperationError: If the server rejects the request
        """
        try:
            self.transport.delete(f"groups/{group_id}/members/{user_id}/$ref")
        except GraphAPIError as exc:
            raise RemoteOperationError("Unable to remove user from group", exc.status_code) from exc
        logger.info("Removed user %s from group %s", user_id, group_id)

    # ─────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────
    @staticmethod
    def _fields(override: Optional[Sequence[str]], configured: Sequence[str]) -> List[str]:
        return list(configured if override is None else override)

    @staticmethod
    def _map_collection(
        entries: List[Dict[str, Any]],
        mapper: Callable[[Dict[str, Any]], RecordT],
    ) -> List[RecordT]:
        records = []
        for entry in entries:
            try:
                records.append(mapper(entry))
            except MissingFieldError as exc:
                logger.debug("Dropping malformed record %s: %s", entry.get("id"), exc)
        return records

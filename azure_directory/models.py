"""Typed directory records built from raw Graph API payloads.

Every record is a frozen dataclass with a ``from_dict`` constructor that
checks for the presence of each required key. Presence is what counts: a key
holding ``null`` or an empty string is accepted and normalised (``""`` for
strings, ``False`` for ``accountEnabled``).
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Type, TypeVar

import requests

from .exceptions import MissingFieldError

GROUP_FIELDS = ("id", "displayName", "description", "mailNickname")
USER_FIELDS = ("id", "displayName", "mail", "accountEnabled")

UserT = TypeVar("UserT", bound="User")


def require_fields(data: Mapping[str, Any], fields: Iterable[str]) -> None:
    """Raise MissingFieldError for the first field absent from ``data``."""
    for field in fields:
        if field not in data:
            raise MissingFieldError(field)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Group:
    """Directory group."""
    id: str
    display_name: str
    description: str
    mail_nickname: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Group":
        """Build a group from a raw payload.

        Raises:
            MissingFieldError: If id, displayName, description or mailNickname is absent
        """
        require_fields(data, GROUP_FIELDS)
        return cls(
            id=_text(data["id"]),
            display_name=_text(data["displayName"]),
            description=_text(data["description"]),
            mail_nickname=_text(data["mailNickname"]),
        )

    @classmethod
    def from_response(cls, response: requests.Response) -> "Group":
        return cls.from_dict(response.json())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "description": self.description,
            "mailNickname": self.mail_nickname,
        }


@dataclass(frozen=True)
class User:
    """Directory user."""
    id: str
    display_name: str
    mail: str
    account_enabled: bool

    @classmethod
    def from_dict(cls: Type[UserT], data: Mapping[str, Any]) -> UserT:
        """Build a user from a raw payload.

        Raises:
            MissingFieldError: If id, displayName, mail or accountEnabled is absent
        """
        require_fields(data, USER_FIELDS)
        return cls(
            id=_text(data["id"]),
            display_name=_text(data["displayName"]),
            mail=_text(data["mail"]),
            account_enabled=bool(data["accountEnabled"]),
        )

    @classmethod
    def from_response(cls: Type[UserT], response: requests.Response) -> UserT:
        return cls.from_dict(response.json())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "mail": self.mail,
            "accountEnabled": self.account_enabled,
        }


@dataclass(frozen=True)
class GroupMember(User):
    """A user listed as member of a group."""


@dataclass(frozen=True)
class GroupOwner(User):
    """A user listed as owner of a group."""

"""
Host inputs - The signed-in user and the permission flags handed to the widget.

The host owns these objects; the assistant only reads them. from_mapping()
accepts the API's camelCase payloads.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class Account:
    id: str
    name: str = ""


@dataclass(frozen=True)
class Tag:
    id: str
    name: str = ""
    is_used: bool = False


@dataclass(frozen=True)
class User:
    """
    Signed-in user as seen by the assistant.

    settings holds the persisted host settings, keyed as the host stores
    them ("dateRange", "filters.accounts", "filters.assetClasses",
    "filters.tags").
    """
    accounts: tuple[Account, ...] = ()
    tags: tuple[Tag, ...] = ()
    settings: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping) -> "User":
        return cls(
            accounts=tuple(
                Account(id=a["id"], name=a.get("name", ""))
                for a in data.get("accounts") or []
            ),
            tags=tuple(
                Tag(id=t["id"], name=t.get("name", ""), is_used=bool(t.get("isUsed", t.get("is_used", False))))
                for t in data.get("tags") or []
            ),
            settings=dict(data.get("settings") or {}),
        )

    def first_setting(self, key: str):
        """First element of a persisted list setting, or None."""
        values = self.settings.get(key)
        if not values:
            return None
        return values[0]


@dataclass(frozen=True)
class Permissions:
    """Flags computed by the host for the current user and device."""
    device_type: str = "desktop"
    has_permission_to_access_admin_control: bool = False
    has_permission_to_change_date_range: bool = False
    has_permission_to_change_filters: bool = False

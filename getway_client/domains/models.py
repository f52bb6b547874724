"""
Wire models shared by the HTTP client, token store and services.

Field names follow Python conventions; `from_dict`/`to_dict` translate to and
from the camelCase JSON the backend speaks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from getway_client.domains.errors import GenericApiError

POST_CATEGORIES = ("travel-tips", "route-updates", "community", "safety", "experiences")


class UserRole(str, Enum):
    CUSTOMER = "customer"
    SCIENTIST = "scientist"
    OWNER = "owner"


_USER_FIELDS = ("id", "_id", "name", "email", "role", "organizationId", "isApproved", "lastLogin")


@dataclass
class UserRecord:
    id: str
    name: str
    email: str
    role: UserRole
    is_approved: bool = False
    organization_id: str | None = None
    last_login: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRecord":
        """
        Build a record from a backend user object.

        Raises:
            ValueError: If the role is not one of customer, scientist, owner.
            TypeError: If data is not a mapping.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected user object, got {type(data).__name__}")
        user_id = data.get("id", data.get("_id"))
        org = data.get("organizationId")
        return cls(
            id=str(user_id) if user_id is not None else "",
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            role=UserRole(data.get("role") or UserRole.CUSTOMER.value),
            is_approved=bool(data.get("isApproved", False)),
            organization_id=str(org) if org is not None else None,
            last_login=data.get("lastLogin"),
            extra={k: v for k, v in data.items() if k not in _USER_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out.update({
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "isApproved": self.is_approved,
        })
        if self.organization_id is not None:
            out["organizationId"] = self.organization_id
        if self.last_login is not None:
            out["lastLogin"] = self.last_login
        return out

    @property
    def can_access_data(self) -> bool:
        """Scientists reach data endpoints only once approved."""
        return self.role is not UserRole.SCIENTIST or self.is_approved


@dataclass
class AuthSession:
    """Token plus cached user. `token` is None for registrations awaiting approval."""

    token: str | None
    user: UserRecord | None


@dataclass
class ApiResponse:
    status: str | None
    message: str = ""
    data: Any = None
    errors: list[str] | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, body: Any) -> "ApiResponse":
        if not isinstance(body, dict):
            return cls(status=None, data=body, raw={})
        return cls(
            status=body.get("status"),
            message=str(body.get("message") or ""),
            data=body.get("data"),
            errors=body.get("errors"),
            raw=body,
        )

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def require_data(self, fallback_message: str) -> Any:
        """
        Return `data` for a success envelope.

        Raises:
            GenericApiError: status is not "success" or data is missing.
        """
        if self.ok and self.data is not None:
            return self.data
        raise GenericApiError(self.message or fallback_message)

    def require_field(self, key: str, fallback_message: str) -> Any:
        """
        Return `data[key]` for a success envelope.

        Raises:
            GenericApiError: As `require_data`, or `data` has no `key`.
        """
        data = self.require_data(fallback_message)
        if not isinstance(data, dict) or data.get(key) is None:
            raise GenericApiError(f"{fallback_message}: response has no {key!r}")
        return data[key]

"""
Header-based caller identity.

There is no session or token check: the caller states its role in
``X-User-Role`` and its user id in ``X-User-Id``.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Header

from .errors import Forbidden

ROLES = ("admin", "bidder", "viewer")
GUEST_ID = "guest"


@dataclass(frozen=True)
class Principal:
    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


GUEST = Principal(id=GUEST_ID, role="viewer")


def get_principal(
    user_role: str | None = Header(default=None, alias="X-User-Role"),
    user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> Principal:
    role = (user_role or "").strip().lower()
    if role not in ROLES:
        return GUEST
    return Principal(id=(user_id or "").strip() or GUEST_ID, role=role)


def require_role(principal: Principal, role: str) -> None:
    if principal.role != role:
        raise Forbidden("Forbidden")

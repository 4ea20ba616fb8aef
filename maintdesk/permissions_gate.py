"""Capability flags per entity, derived from raw permissions and tenant context.

Raw permissions are ``"<entity>.<action>"`` strings (e.g. ``incident.update``).
Some entities are managed only from the headquarters tenant, most only from a
regular site; when the current tenant does not match, every flag is False
whatever the raw permissions say.

Example:
    auth = AuthContext.from_user(user)
    perms = entity_permissions("incident", auth)
    if perms.can_delete:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Protocol


class PermissionSource(Protocol):
    is_headquarters: bool

    def has_permission(self, key: str) -> bool: ...


@dataclass(frozen=True, slots=True)
class AuthContext:
    permissions: frozenset[str]
    is_headquarters: bool = False

    @classmethod
    def create(cls, permissions: Iterable[str], *, is_headquarters: bool = False) -> AuthContext:
        return cls(frozenset(permissions), is_headquarters)

    @classmethod
    def from_user(cls, user: Mapping[str, Any] | None) -> AuthContext:
        """Context of the signed-in user (anonymous -> no permissions)."""
        if not user:
            return cls(frozenset(), False)

        current_site_id = user.get("current_site_id")
        is_hq = any(
            site.get("id") == current_site_id and bool(site.get("is_headquarters"))
            for site in user.get("sites") or []
        )
        return cls(frozenset(user.get("permissions") or []), is_hq)

    def has_permission(self, key: str) -> bool:
        return key in self.permissions


@dataclass(frozen=True, slots=True)
class EntityPermissions:
    can_view: bool
    can_view_any: bool
    can_create: bool
    can_update: bool
    can_delete: bool
    can_export: bool
    can_generate_qr_code: bool
    has_any_action: bool

    @classmethod
    def denied(cls) -> EntityPermissions:
        return cls(False, False, False, False, False, False, False, False)


def location_allows(is_headquarters: bool, *, hq_only: bool, no_location_check: bool) -> bool:
    if no_location_check:
        return True
    if hq_only:
        return is_headquarters
    return not is_headquarters


def entity_permissions(
    entity: str,
    auth: PermissionSource,
    *,
    hq_only: bool = False,
    no_location_check: bool = False,
) -> EntityPermissions:
    """Capabilities of ``auth`` on ``entity``.

    - hq_only=True: only usable from the headquarters tenant
    - default: only usable from a regular site
    - no_location_check=True: usable anywhere
    """
    return gate_permissions(
        entity,
        auth.has_permission,
        auth.is_headquarters,
        hq_only=hq_only,
        no_location_check=no_location_check,
    )


def gate_permissions(
    entity: str,
    has_permission: Callable[[str], bool],
    is_headquarters: bool,
    *,
    hq_only: bool = False,
    no_location_check: bool = False,
) -> EntityPermissions:
    if not location_allows(
        is_headquarters, hq_only=hq_only, no_location_check=no_location_check
    ):
        return EntityPermissions.denied()

    def can(action: str) -> bool:
        return bool(has_permission(f"{entity}.{action}"))

    can_update = can("update")
    can_delete = can("delete")

    return EntityPermissions(
        can_view=can("view"),
        can_view_any=can("viewAny"),
        can_create=can("create"),
        can_update=can_update,
        can_delete=can_delete,
        can_export=can("export"),
        can_generate_qr_code=can("generateQrCode"),
        has_any_action=can_update or can_delete,
    )

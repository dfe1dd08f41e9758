"""Bill.com user role profile syncer."""
from __future__ import annotations
import logging
from typing import List, Optional, Tuple

from ..bill import (
    BillError,
    ConnectorError,
    PaginationParams,
    ProfileAttributeMissingError,
    UserRoleProfile,
)
from ..pagination import Token, handle_page_token, next_page_token
from ..resources import (
    Entitlement,
    Grant,
    Resource,
    ResourceId,
    get_profile_string_value,
    get_role_trait,
    new_assignment_entitlement,
    new_grant,
    new_permission_entitlement,
    new_role_resource,
)
from .base import Annotations, ResourceSyncer
from .helpers import MEMBER, RESOURCES_PAGE_SIZE, ROLE, USER, title_case
from .users import user_principal

logger = logging.getLogger(__name__)


def role_resource(role: UserRoleProfile, parent_resource_id: Optional[ResourceId] = None) -> Resource:
    """Create a connector resource for a Bill.com user role profile."""
    profile = {
        "role_id": role.id,
        "role_name": role.name,
    }
    return new_role_resource(role.name, ROLE, role.id, profile, parent_resource_id=parent_resource_id)


def role_id_from_profile(resource: Resource) -> str:
    """Return the Bill.com role id stored in the resource's role profile.

    Raises:
        ProfileAttributeMissingError: If the profile has no ``role_id``
    """
    role_id = get_profile_string_value(get_role_trait(resource).profile, "role_id")
    if not role_id:
        raise ProfileAttributeMissingError("bill-connector: failed to get role id from profile")
    return role_id


class RoleSyncer(ResourceSyncer):
    """Roles live below organizations; members are users carrying the role id."""

    resource_type = ROLE

    def list(
        self, parent_resource_id: Optional[ResourceId], token: Optional[Token]
    ) -> Tuple[List[Resource], str, Annotations]:
        if parent_resource_id is None:
            return [], "", []

        bag, page = handle_page_token(token, self.resource_type.id)
        self._ensure_session(parent_resource_id)

        try:
            roles, next_page = self.client.get_user_role_profiles(
                PaginationParams(max=RESOURCES_PAGE_SIZE, start=page)
            )
        except BillError as exc:
            raise ConnectorError("failed to list user roles", exc) from exc

        logger.debug(f"Listed {len(roles)} roles of {parent_resource_id.resource} at offset {page}")
        resources = [role_resource(role, parent_resource_id) for role in roles]
        return resources, next_page_token(bag, next_page, len(roles)), []

    def entitlements(
        self, resource: Resource, token: Optional[Token]
    ) -> Tuple[List[Entitlement], str, Annotations]:
        rv: List[Entitlement] = [
            new_assignment_entitlement(
                resource,
                MEMBER,
                grantable_to=[USER],
                display_name=f"{resource.display_name} Role {title_case(MEMBER)}",
                description=f"{resource.display_name} Bill.com Role",
            )
        ]

        role_id = role_id_from_profile(resource)
        self._ensure_session(resource.parent_resource_id)

        try:
            permissions = self.client.get_user_role_permissions(role_id)
        except BillError as exc:
            raise ConnectorError("failed to get user role permissions", exc) from exc

        for name, enabled in sorted(permissions.items()):
            if not enabled:
                continue
            rv.append(new_permission_entitlement(
                resource,
                name,
                grantable_to=[USER],
                display_name=f"{resource.display_name} Permission {title_case(name)}",
                description=f"{resource.display_name} Bill.com Permission",
            ))

        return rv, "", []

    def grants(
        self, resource: Resource, token: Optional[Token]
    ) -> Tuple[List[Grant], str, Annotations]:
        bag, page = handle_page_token(token, USER.id)
        role_id = role_id_from_profile(resource)
        self._ensure_session(resource.parent_resource_id)

        # Bill.com cannot filter users by role; page through all of them
        try:
            users, next_page = self.client.get_users(PaginationParams(max=RESOURCES_PAGE_SIZE, start=page))
        except BillError as exc:
            raise ConnectorError("failed to get users", exc) from exc

        rv = [
            new_grant(resource, MEMBER, user_principal(user))
            for user in users
            if user.role_id == role_id
        ]
        return rv, next_page_token(bag, next_page, len(users)), []

"""Bill.com organization syncer.

Organizations are the root of the graph. Listing them also logs the client
into each one, which sets up the session the user and role syncers use.
"""
from __future__ import annotations
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..bill import BillClient, BillError, ConnectorError, Organization, PaginationParams, UserRoleProfile
from ..pagination import Token, handle_page_token, next_page_token
from ..resources import (
    Entitlement,
    Grant,
    Resource,
    ResourceId,
    new_assignment_entitlement,
    new_grant,
    new_permission_entitlement,
    new_resource,
)
from .base import Annotations, ResourceSyncer
from .helpers import MEMBER, ORGANIZATION, RESOURCES_PAGE_SIZE, ROLE, USER, title_case
from .users import user_principal

logger = logging.getLogger(__name__)


def organization_resource(organization: Organization, parent_resource_id: Optional[ResourceId] = None) -> Resource:
    """Create a connector resource for a Bill.com organization."""
    return new_resource(
        organization.name,
        ORGANIZATION,
        organization.id,
        parent_resource_id=parent_resource_id,
        child_resource_types=(USER, ROLE),
    )


class OrganizationSyncer(ResourceSyncer):
    """Organizations, their membership/role entitlements and user grants."""

    resource_type = ORGANIZATION

    def __init__(self, client: BillClient, organization_ids: Sequence[str] = ()):
        """Initialize organization syncer.

        Args:
            client: Bill.com client
            organization_ids: Allow-list of organization ids (empty = all)
        """
        super().__init__(client)
        self.organization_ids = set(organization_ids)

    def list(
        self, parent_resource_id: Optional[ResourceId], token: Optional[Token]
    ) -> Tuple[List[Resource], str, Annotations]:
        # Listing organizations in Bill.com does not support pagination
        try:
            organizations = self.client.get_organizations()
        except BillError as exc:
            raise ConnectorError("failed to list organizations", exc) from exc

        resources: List[Resource] = []
        for organization in organizations:
            if self.organization_ids and organization.id not in self.organization_ids:
                logger.debug(f"Skipping organization {organization.id} (not configured)")
                continue

            try:
                self.client.login(organization.id)
            except BillError as exc:
                raise ConnectorError("failed to login to organization", exc) from exc

            resources.append(organization_resource(organization, parent_resource_id))

        missing = self.organization_ids - {organization.id for organization in organizations}
        if missing:
            logger.warning(f"Configured organizations not returned by Bill.com: {', '.join(sorted(missing))}")

        return resources, "", []

    def entitlements(
        self, resource: Resource, token: Optional[Token]
    ) -> Tuple[List[Entitlement], str, Annotations]:
        rv: List[Entitlement] = []

        # Membership entitlement only once, on the first page
        if token is None or not token.token:
            rv.append(new_assignment_entitlement(
                resource,
                MEMBER,
                grantable_to=[USER],
                display_name=f"{resource.display_name} Org {MEMBER}",
                description=f"Organization {resource.display_name} membership role in Bill",
            ))

        bag, page = handle_page_token(token, ROLE.id)
        self._ensure_session(resource.id)

        try:
            roles, next_page = self.client.get_user_role_profiles(
                PaginationParams(max=RESOURCES_PAGE_SIZE, start=page)
            )
        except BillError as exc:
            raise ConnectorError("failed to get user roles", exc) from exc

        for role in roles:
            rv.append(new_permission_entitlement(
                resource,
                role.name,
                grantable_to=[USER],
                display_name=f"{resource.display_name} Org {title_case(role.name)}",
                description=f"Organization {resource.display_name} role in Bill: {role.description}",
            ))

        return rv, next_page_token(bag, next_page, len(roles)), []

    def grants(
        self, resource: Resource, token: Optional[Token]
    ) -> Tuple[List[Grant], str, Annotations]:
        bag, page = handle_page_token(token, USER.id)
        self._ensure_session(resource.id)

        try:
            users, next_page = self.client.get_users(PaginationParams(max=RESOURCES_PAGE_SIZE, start=page))
        except BillError as exc:
            raise ConnectorError("failed to get users", exc) from exc

        # Users on one page usually share a handful of roles
        roles: Dict[str, UserRoleProfile] = {}
        rv: List[Grant] = []
        for user in users:
            principal = user_principal(user)

            if user.role_id:
                if user.role_id not in roles:
                    try:
                        roles[user.role_id] = self.client.get_user_role_profile(user.role_id)
                    except BillError as exc:
                        raise ConnectorError("failed to get user role", exc) from exc
                rv.append(new_grant(resource, roles[user.role_id].name, principal))

            rv.append(new_grant(resource, MEMBER, principal))

        return rv, next_page_token(bag, next_page, len(users)), []

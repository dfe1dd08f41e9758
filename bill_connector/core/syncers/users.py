"""Bill.com user syncer."""
from __future__ import annotations
import logging
from typing import List, Optional, Tuple

from ..bill import BillError, ConnectorError, PaginationParams, User
from ..pagination import Token, handle_page_token, next_page_token
from ..resources import (
    USER_STATUS_DISABLED,
    USER_STATUS_ENABLED,
    Entitlement,
    Grant,
    Resource,
    ResourceId,
    new_user_resource,
)
from .base import Annotations, ResourceSyncer
from .helpers import RESOURCES_PAGE_SIZE, USER

logger = logging.getLogger(__name__)


def user_display_name(user: User) -> str:
    full_name = f"{user.first_name} {user.last_name}".strip()
    return user.name or full_name or user.email or user.id


def user_principal(user: User) -> ResourceId:
    return ResourceId(USER.id, user.id)


def user_resource(user: User, parent_resource_id: Optional[ResourceId] = None) -> Resource:
    """Create a connector resource for a Bill.com user."""
    profile = {
        "login": user.name,
        "user_id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
    }
    return new_user_resource(
        user_display_name(user),
        USER,
        user.id,
        profile,
        status=USER_STATUS_ENABLED if user.is_active else USER_STATUS_DISABLED,
        emails=[user.email],
        parent_resource_id=parent_resource_id,
    )


class UserSyncer(ResourceSyncer):
    """Users are listed per organization and grant nothing themselves."""

    resource_type = USER

    def list(
        self, parent_resource_id: Optional[ResourceId], token: Optional[Token]
    ) -> Tuple[List[Resource], str, Annotations]:
        if parent_resource_id is None:
            return [], "", []

        bag, page = handle_page_token(token, self.resource_type.id)
        self._ensure_session(parent_resource_id)

        try:
            users, next_page = self.client.get_users(PaginationParams(max=RESOURCES_PAGE_SIZE, start=page))
        except BillError as exc:
            raise ConnectorError("failed to list users", exc) from exc

        logger.debug(f"Listed {len(users)} users of {parent_resource_id.resource} at offset {page}")
        resources = [user_resource(user, parent_resource_id) for user in users]
        return resources, next_page_token(bag, next_page, len(users)), []

    def entitlements(
        self, resource: Resource, token: Optional[Token]
    ) -> Tuple[List[Entitlement], str, Annotations]:
        return [], "", []

    def grants(
        self, resource: Resource, token: Optional[Token]
    ) -> Tuple[List[Grant], str, Annotations]:
        return [], "", []

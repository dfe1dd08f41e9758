"""Common contract for resource syncers."""
from __future__ import annotations
from typing import Any, List, Optional, Tuple

from ..bill import BillClient, BillError, ConnectorError
from ..pagination import Token
from ..resources import Entitlement, Grant, Resource, ResourceId, ResourceType
from .helpers import ORGANIZATION

Annotations = List[Any]


class ResourceSyncer:
    """Translate one Bill.com entity type into resources, entitlements and grants.

    Each method returns ``(items, next_token, annotations)``; an empty
    ``next_token`` ends paging for that call. Syncers keep no state between
    calls: everything needed to resume lives in the token or in the
    resource's own profile.
    """

    resource_type: ResourceType

    def __init__(self, client: BillClient):
        """Initialize syncer.

        Args:
            client: Bill.com client shared by all syncers of one connector
        """
        self.client = client

    def list(
        self, parent_resource_id: Optional[ResourceId], token: Optional[Token]
    ) -> Tuple[List[Resource], str, Annotations]:
        raise NotImplementedError

    def entitlements(
        self, resource: Resource, token: Optional[Token]
    ) -> Tuple[List[Entitlement], str, Annotations]:
        raise NotImplementedError

    def grants(
        self, resource: Resource, token: Optional[Token]
    ) -> Tuple[List[Grant], str, Annotations]:
        raise NotImplementedError

    def _ensure_session(self, organization_id: Optional[ResourceId]) -> None:
        """Make sure the client is logged into ``organization_id`` (no-op for other types)."""
        if organization_id is None or organization_id.resource_type != ORGANIZATION.id:
            return
        try:
            self.client.ensure_session(organization_id.resource)
        except BillError as exc:
            raise ConnectorError("failed to login to organization", exc) from exc

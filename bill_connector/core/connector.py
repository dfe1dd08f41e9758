"""Bill.com connector: syncer wiring, metadata and credential validation.

Architecture:
    scripts/bill_sync.py ──> SyncService ──> BillConnector.resource_syncers()
                                                 ├── OrganizationSyncer ─┐
                                                 ├── UserSyncer ─────────┼──> BillClient ──> Bill.com
                                                 └── RoleSyncer ─────────┘
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..config.settings import ConnectorConfig
from .bill import AuthenticationError, BillClient, BillError, Credentials
from .syncers import OrganizationSyncer, ResourceSyncer, RoleSyncer, UserSyncer

logger = logging.getLogger(__name__)


class BillConnector:
    """Entry point the sync driver talks to."""

    def __init__(self, client: BillClient, organization_ids: Sequence[str] = ()):
        """Initialize connector.

        Args:
            client: Bill.com client shared by every syncer
            organization_ids: Allow-list of organizations to sync (empty = all)
        """
        self.client = client
        self.organization_ids = list(organization_ids)

    def resource_syncers(self) -> List[ResourceSyncer]:
        return [
            OrganizationSyncer(self.client, self.organization_ids),
            UserSyncer(self.client),
            RoleSyncer(self.client),
        ]

    def metadata(self) -> Dict[str, Any]:
        return {
            "display_name": "Bill",
            "description": "Organizations, users and role profiles from Bill.com",
        }

    def validate(self) -> None:
        """Check connectivity and credentials against Bill.com.

        Logs into the first configured organization when there is no session
        yet, then reads the session details.

        Raises:
            AuthenticationError: On any failure (cause chained, not in the message)
        """
        try:
            if self.client.current_session is None and self.organization_ids:
                self.client.login(self.organization_ids[0])
            details = self.client.get_session_details()
        except BillError as exc:
            logger.warning(f"Credential validation failed: {exc}")
            raise AuthenticationError("invalid credentials") from exc
        logger.info(f"Validated Bill.com session for organization {details.org_id}")


def new_connector(config: ConnectorConfig, http_session: Optional[requests.Session] = None) -> BillConnector:
    """Build a connector from settings.

    Args:
        config: Loaded (and validated) connector settings
        http_session: Optional HTTP transport (tests, proxies)

    Returns:
        BillConnector with a fresh, not yet logged-in client
    """
    credentials = Credentials(
        username=config.username,
        password=config.password,
        developer_key=config.developer_key,
    )
    client = BillClient(
        credentials,
        http_session=http_session,
        base_url=config.base_url,
        timeout=config.request_timeout,
    )
    return BillConnector(client, config.organization_ids)

"""Sequential sync driver.

Walks every syncer of a connector, follows page tokens until they run out,
and hands each item to a snapshot writer. Three passes, in order:

1. resources: top-level listing of every resource type, then the child
   resource types each resource announces (organizations -> users, roles)
2. entitlements of every resource
3. grants of every resource

The driver stops at the first error. Nothing is retried.
"""
from __future__ import annotations
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional, Protocol, Tuple

from .bill import SyncError
from .connector import BillConnector
from .pagination import Token
from .resources import Resource, ResourceId
from .snapshot import RecordKind
from .syncers import RESOURCES_PAGE_SIZE, ResourceSyncer

logger = logging.getLogger(__name__)


class RecordWriter(Protocol):
    def write(self, kind: RecordKind, data: dict[str, Any]) -> None:
        ...


@dataclass
class SyncStats:
    resource_types: int = 0
    resources: int = 0
    entitlements: int = 0
    grants: int = 0


class SyncService:
    """Drive a connector's syncers into a record writer."""

    def __init__(self, connector: BillConnector, writer: RecordWriter):
        self.connector = connector
        self.writer = writer

    def run(self) -> SyncStats:
        """Run one full sync pass.

        Returns:
            Counts of written records per kind

        Raises:
            BillError: First error raised by a syncer (or SyncError for a stuck cursor)
        """
        stats = SyncStats()
        syncers: Dict[str, ResourceSyncer] = {
            syncer.resource_type.id: syncer for syncer in self.connector.resource_syncers()
        }

        for syncer in syncers.values():
            self.writer.write("resource_type", syncer.resource_type.to_dict())
            stats.resource_types += 1

        resources = self._sync_resources(syncers, stats)

        for resource in resources:
            syncer = syncers[resource.id.resource_type]
            for entitlement in self._paginate(syncer.entitlements, resource, label=f"entitlements of {resource.id.resource}"):
                self.writer.write("entitlement", entitlement.to_dict())
                stats.entitlements += 1

        for resource in resources:
            syncer = syncers[resource.id.resource_type]
            for grant in self._paginate(syncer.grants, resource, label=f"grants of {resource.id.resource}"):
                self.writer.write("grant", grant.to_dict())
                stats.grants += 1

        logger.info(
            f"Sync finished: {stats.resources} resources, "
            f"{stats.entitlements} entitlements, {stats.grants} grants"
        )
        return stats

    def _sync_resources(self, syncers: Dict[str, ResourceSyncer], stats: SyncStats) -> List[Resource]:
        pending: Deque[Tuple[ResourceSyncer, Optional[ResourceId]]] = deque(
            (syncer, None) for syncer in syncers.values()
        )
        resources: List[Resource] = []

        while pending:
            syncer, parent_id = pending.popleft()
            parent_label = parent_id.resource if parent_id else "top level"
            label = f"{syncer.resource_type.id} list ({parent_label})"

            for resource in self._paginate(syncer.list, parent_id, label=label):
                self.writer.write("resource", resource.to_dict())
                resources.append(resource)
                stats.resources += 1

                for child_type in resource.child_resource_types:
                    child_syncer = syncers.get(child_type)
                    if child_syncer is None:
                        logger.warning(f"No syncer for child resource type {child_type!r}")
                        continue
                    pending.append((child_syncer, resource.id))

        return resources

    def _paginate(self, fetch: Callable[..., Tuple[List[Any], str, Any]], *args: Any, label: str) -> Iterator[Any]:
        """Yield items from ``fetch(*args, token)`` until the next token is empty."""
        page_token = ""
        seen: set[str] = set()

        while True:
            items, next_token, _ = fetch(*args, Token(size=RESOURCES_PAGE_SIZE, token=page_token))
            logger.debug(f"{label}: {len(items)} items")
            yield from items

            if not next_token:
                return
            if next_token in seen:
                raise SyncError(f"{label}: page token repeated, aborting ({next_token})")
            seen.add(next_token)
            page_token = next_token

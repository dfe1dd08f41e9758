"""Core Business Logic Module

Module Structure:
    - bill/              : Low-level Bill.com API client
    - pagination.py      : Page-token bag shared by syncers and the driver
    - resources.py       : Generic resource / entitlement / grant model
    - syncers/           : Organization, user and role syncers
    - connector.py       : Connector facade (syncers, metadata, validate)
    - sync_service.py    : Sequential sync driver
    - snapshot.py        : Signed JSONL snapshot writer

Usage Pattern:
    These modules are NOT auto-imported; import explicitly when needed:
        from bill_connector.core.bill import BillClient
        from bill_connector.core.connector import BillConnector, new_connector
        from bill_connector.core.sync_service import SyncService
        from bill_connector.core.snapshot import SnapshotWriter, verify_snapshot
"""

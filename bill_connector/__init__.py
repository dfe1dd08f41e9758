"""Bill.com identity connector package.

To use the Bill.com client:
    from bill_connector.core.bill import BillClient, Credentials

To run a sync:
    from bill_connector.core.connector import new_connector
    from bill_connector.core.sync_service import SyncService
"""

__version__ = "0.1.0"

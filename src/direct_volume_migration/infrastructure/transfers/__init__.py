"""Transfer backend adapters."""

from direct_volume_migration.infrastructure.transfers.http_transfer_backend import (
    HttpTransferBackend,
)
from direct_volume_migration.infrastructure.transfers.noop_transfer_backend import (
    NoopTransferBackend,
)

__all__ = ["HttpTransferBackend", "NoopTransferBackend"]

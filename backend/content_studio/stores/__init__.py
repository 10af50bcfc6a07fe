"""Balance, artifact and ledger stores."""

from content_studio.stores.artifact_store import SqlArtifactStore
from content_studio.stores.balance_store import SqlBalanceStore
from content_studio.stores.base import (
    ArtifactStore,
    BalanceStore,
    CreditLedger,
    DebitResult,
    DebitStatus,
)
from content_studio.stores.ledger import SqlCreditLedger

__all__ = [
    "ArtifactStore",
    "BalanceStore",
    "CreditLedger",
    "DebitResult",
    "DebitStatus",
    "SqlArtifactStore",
    "SqlBalanceStore",
    "SqlCreditLedger",
]

"""Re-export all models so Base.metadata sees them."""

from content_studio.db.models.account import Account
from content_studio.db.models.artifact import Artifact
from content_studio.db.models.credit_ledger import CreditLedgerEntry

__all__ = [
    "Account",
    "Artifact",
    "CreditLedgerEntry",
]

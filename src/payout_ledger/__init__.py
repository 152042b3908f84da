"""payout-ledger - import Stripe payouts into Wave as money transactions."""

__version__ = "0.1.0"

from payout_ledger.clients import (
    StripeAPIClient,
    StripeAPIError,
    TransactionResult,
    WaveAPIClient,
    WaveAPIError,
)
from payout_ledger.config import configure_logging, get_settings
from payout_ledger.entries import build_entry, classify_transaction
from payout_ledger.importer import ImportSummary, PayoutImporter
from payout_ledger.models import (
    AccountMapping,
    LedgerEntryPayload,
    LineItem,
    Payout,
    SalesTaxAccount,
    Transaction,
)
from payout_ledger.selection import Chooser, SelectionError

__all__ = [
    # Version
    "__version__",
    # Model
    "Payout",
    "Transaction",
    "AccountMapping",
    "SalesTaxAccount",
    "LineItem",
    "LedgerEntryPayload",
    # Entry building
    "build_entry",
    "classify_transaction",
    # Clients
    "StripeAPIClient",
    "StripeAPIError",
    "WaveAPIClient",
    "WaveAPIError",
    "TransactionResult",
    # Import run
    "PayoutImporter",
    "ImportSummary",
    "Chooser",
    "SelectionError",
    # Config
    "get_settings",
    "configure_logging",
]

"""API clients for the payment processor and the ledger."""

from payout_ledger.clients.stripe_api import StripeAPIClient, StripeAPIError
from payout_ledger.clients.wave_api import TransactionResult, WaveAPIClient, WaveAPIError

__all__ = [
    # Stripe
    "StripeAPIClient",
    "StripeAPIError",
    # Wave
    "WaveAPIClient",
    "WaveAPIError",
    "TransactionResult",
]

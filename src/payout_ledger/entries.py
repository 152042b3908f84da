"""Payout to money-transaction transformation.

A payout's balance transactions are split into sponsorship and sale buckets.
Each bucket contributes at most one revenue line and one fee line, in the
order: sponsorship revenue, sponsorship fees, sale revenue, sale fees. Sale
revenue carries the sales tax included in it as a nested allocation.

Sale fees are left out when the sale bucket is a net refund (or zero);
sponsorship fees are always booked.
"""

from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from payout_ledger.models import (
    AccountMapping,
    AnchorDirection,
    AnchorLine,
    BalanceDirection,
    LedgerEntryPayload,
    LineItem,
    Payout,
    TaxAllocation,
    Transaction,
    TransactionCategory,
)

SPONSORSHIP_KEYWORD = "sponsorship"
REFUND_SUFFIX = " (Refund)"

CENTS = Decimal("0.01")


def to_currency(minor_units: int) -> Decimal:
    """Convert integer minor units to a two-place currency amount."""
    return Decimal(minor_units) / 100


def classify_transaction(transaction: Transaction) -> TransactionCategory:
    """Return SPONSORSHIP if the description mentions sponsorship, else SALE."""
    if SPONSORSHIP_KEYWORD in transaction.description.lower():
        return TransactionCategory.SPONSORSHIP
    return TransactionCategory.SALE


def partition_transactions(
    transactions: Iterable[Transaction],
) -> tuple[list[Transaction], list[Transaction]]:
    """Split transactions into (sponsorships, sales), keeping their order."""
    sponsorships: list[Transaction] = []
    sales: list[Transaction] = []
    for transaction in transactions:
        if classify_transaction(transaction) == TransactionCategory.SPONSORSHIP:
            sponsorships.append(transaction)
        else:
            sales.append(transaction)
    return sponsorships, sales


def sales_tax_portion(total: int, rate: Decimal) -> Decimal:
    """Sales tax included in a tax-inclusive total given in minor units.

    Returns a non-negative currency amount rounded half-up to cents.
    """
    gross = abs(Decimal(total))
    net = abs(Decimal(total) / (1 + rate))
    return ((gross - net) / 100).quantize(CENTS, rounding=ROUND_HALF_UP)


def _revenue_direction(total: int) -> BalanceDirection:
    return BalanceDirection.CREDIT if total > 0 else BalanceDirection.DEBIT


def _revenue_description(label: str, total: int) -> str:
    return label if total > 0 else label + REFUND_SUFFIX


def _fee_line(total: int, account_id: str, description: str) -> LineItem:
    # Fees are a cost; a negative sum means Stripe refunded fees
    direction = BalanceDirection.DEBIT if total > 0 else BalanceDirection.CREDIT
    return LineItem(
        amount=to_currency(abs(total)),
        account_id=account_id,
        balance=direction,
        description=description,
    )


def build_line_items(
    transactions: Sequence[Transaction], mapping: AccountMapping
) -> list[LineItem]:
    """Build the categorized line items for one payout's transactions."""
    sponsorships, sales = partition_transactions(transactions)
    items: list[LineItem] = []

    sponsorship_total = sum(t.amount for t in sponsorships)
    if sponsorship_total != 0:
        items.append(
            LineItem(
                amount=to_currency(abs(sponsorship_total)),
                account_id=mapping.sponsorship,
                balance=_revenue_direction(sponsorship_total),
                description=_revenue_description("Sponsorships", sponsorship_total),
            )
        )

    sponsorship_fees = sum(t.fee for t in sponsorships)
    if sponsorship_fees != 0:
        items.append(
            _fee_line(sponsorship_fees, mapping.stripe_fee, "Sponsorship Stripe fees")
        )

    sales_total = sum(t.amount for t in sales)
    if sales_total != 0:
        items.append(
            LineItem(
                amount=to_currency(abs(sales_total)),
                account_id=mapping.ticket_sales,
                balance=_revenue_direction(sales_total),
                description=_revenue_description(
                    "Total ticket purchases amount", sales_total
                ),
                taxes=TaxAllocation(
                    sales_tax_id=mapping.sales_tax.id,
                    amount=sales_tax_portion(sales_total, mapping.sales_tax.rate),
                ),
            )
        )

    sales_fees = sum(t.fee for t in sales)
    if sales_fees != 0 and sales_total > 0:
        items.append(_fee_line(sales_fees, mapping.stripe_fee, "Stripe fees"))

    return items


def build_anchor(payout: Payout, mapping: AccountMapping) -> AnchorLine:
    """Build the anchor line for the payout's own cash movement."""
    return AnchorLine(
        direction=(
            AnchorDirection.DEPOSIT if payout.amount > 0 else AnchorDirection.WITHDRAWAL
        ),
        account_id=mapping.anchor,
        amount=to_currency(abs(payout.amount)),
    )


def build_entry(
    payout: Payout,
    transactions: Sequence[Transaction],
    mapping: AccountMapping,
    business_id: str,
    external_id_prefix: str = "",
) -> LedgerEntryPayload:
    """Build the money transaction payload for one payout.

    Args:
        payout: The payout being imported.
        transactions: Its balance transactions, payout-type records excluded.
        mapping: Ledger accounts selected for this run.
        business_id: Wave business the entry is written to.
        external_id_prefix: Prepended to the payout id to form the externalId.

    Returns:
        The payload; nothing is sent anywhere.
    """
    return LedgerEntryPayload(
        business_id=business_id,
        external_id=f"{external_id_prefix}{payout.id}",
        date=payout.arrival_day,
        description=f"{payout.description} {payout.id}".strip(),
        anchor=build_anchor(payout, mapping),
        line_items=tuple(build_line_items(transactions, mapping)),
    )

"""Data model for payouts, ledger reference data and money transaction payloads.

Payment-side amounts are integer minor units (cents), exactly as Stripe
returns them. Ledger-side amounts are `Decimal` currency units with two
places; the sign of a ledger amount is always carried by a direction enum,
never by the number itself.
"""

import json
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class TransactionCategory(str, Enum):
    """Revenue bucket a payout transaction belongs to."""

    SPONSORSHIP = "sponsorship"
    SALE = "sale"


class BalanceDirection(str, Enum):
    """Side of the ledger a line item affects."""

    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class AnchorDirection(str, Enum):
    """Cash movement of the anchor account."""

    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"


# === Payment side ===


@dataclass(frozen=True)
class Payout:
    """A single Stripe payout to the merchant's bank account."""

    id: str
    arrival_date: int  # epoch seconds, UTC
    amount: int
    description: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Payout":
        """Build from a Stripe payout object."""
        return cls(
            id=data["id"],
            arrival_date=int(data["arrival_date"]),
            amount=int(data["amount"]),
            description=data.get("description") or "",
        )

    @property
    def arrival_day(self) -> date:
        """Arrival date as a UTC calendar day."""
        return datetime.fromtimestamp(self.arrival_date, tz=UTC).date()


@dataclass(frozen=True)
class Transaction:
    """A Stripe balance transaction settled by a payout."""

    id: str
    amount: int
    fee: int
    description: str = ""
    type: str = "charge"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Transaction":
        """Build from a Stripe balance transaction object."""
        return cls(
            id=data["id"],
            amount=int(data["amount"]),
            fee=int(data.get("fee") or 0),
            description=data.get("description") or "",
            type=data.get("type") or "",
        )


# === Ledger reference data ===


@dataclass(frozen=True)
class Business:
    """A Wave business."""

    id: str
    name: str
    is_classic_accounting: bool = False
    is_classic_invoicing: bool = False
    is_personal: bool = False

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> "Business":
        return cls(
            id=node["id"],
            name=node["name"],
            is_classic_accounting=bool(node.get("isClassicAccounting")),
            is_classic_invoicing=bool(node.get("isClassicInvoicing")),
            is_personal=bool(node.get("isPersonal")),
        )


@dataclass(frozen=True)
class LedgerAccount:
    """An account in a Wave chart of accounts."""

    id: str
    name: str
    type: str = ""
    subtype: str = ""
    normal_balance_type: str = ""
    is_archived: bool = False

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> "LedgerAccount":
        return cls(
            id=node["id"],
            name=node["name"],
            type=(node.get("type") or {}).get("name", ""),
            subtype=(node.get("subtype") or {}).get("name", ""),
            normal_balance_type=node.get("normalBalanceType") or "",
            is_archived=bool(node.get("isArchived")),
        )


@dataclass(frozen=True)
class SalesTax:
    """A sales tax configured on a Wave business."""

    id: str
    name: str
    rate: Decimal

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> "SalesTax":
        return cls(
            id=node["id"],
            name=node["name"],
            rate=Decimal(str(node.get("rate") or 0)),
        )


@dataclass(frozen=True)
class SalesTaxAccount:
    """Sales tax used to split ticket revenue; rate is a fraction (0.0825)."""

    id: str
    rate: Decimal


@dataclass(frozen=True)
class AccountMapping:
    """Ledger accounts chosen once per run and reused for every payout."""

    anchor: str
    stripe_fee: str
    ticket_sales: str
    sponsorship: str
    sales_tax: SalesTaxAccount


# === Money transaction payload ===


def _amount(value: Decimal) -> float:
    # Wave takes amounts as JSON numbers
    return float(value)


@dataclass(frozen=True)
class TaxAllocation:
    """Portion of a line item that is sales tax."""

    sales_tax_id: str
    amount: Decimal

    def to_input(self) -> dict[str, Any]:
        return {"salesTaxId": self.sales_tax_id, "amount": _amount(self.amount)}


@dataclass(frozen=True)
class LineItem:
    """A ledger line allocating part of the anchor amount to an account."""

    amount: Decimal
    account_id: str
    balance: BalanceDirection
    description: str
    taxes: TaxAllocation | None = None

    @property
    def signed_amount(self) -> Decimal:
        """Amount with credits positive and debits negative."""
        return self.amount if self.balance == BalanceDirection.CREDIT else -self.amount

    def to_input(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "amount": _amount(self.amount),
            "accountId": self.account_id,
            "balance": self.balance.value,
            "description": self.description,
        }
        if self.taxes is not None:
            data["taxes"] = [self.taxes.to_input()]
        return data


@dataclass(frozen=True)
class AnchorLine:
    """The line for the payout's own cash movement."""

    direction: AnchorDirection
    account_id: str
    amount: Decimal

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.direction == AnchorDirection.DEPOSIT else -self.amount

    def to_input(self) -> dict[str, Any]:
        return {
            "direction": self.direction.value,
            "accountId": self.account_id,
            "amount": _amount(self.amount),
        }


@dataclass(frozen=True)
class LedgerEntryPayload:
    """One Wave money transaction built from one payout."""

    business_id: str
    external_id: str
    date: date
    description: str
    anchor: AnchorLine
    line_items: tuple[LineItem, ...] = field(default_factory=tuple)

    def line_items_total(self) -> Decimal:
        """Signed sum of the line items (credits positive)."""
        return sum((item.signed_amount for item in self.line_items), Decimal("0"))

    def imbalance(self) -> Decimal:
        """Anchor amount not covered by line items; zero when balanced."""
        return self.anchor.signed_amount - self.line_items_total()

    @property
    def is_balanced(self) -> bool:
        return self.imbalance() == 0

    def to_input(self) -> dict[str, Any]:
        """Render as a Wave `MoneyTransactionCreateInput`."""
        return {
            "businessId": self.business_id,
            "externalId": self.external_id,
            "date": self.date.isoformat(),
            "description": self.description,
            "anchor": self.anchor.to_input(),
            "lineItems": [item.to_input() for item in self.line_items],
        }

    def to_json(self, indent: int | None = None) -> str:
        """Serialize the mutation variables for inspection."""
        return json.dumps({"input": self.to_input()}, indent=indent)

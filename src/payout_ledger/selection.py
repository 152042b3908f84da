"""Choosing the business and ledger accounts used for an import run.

The result is a plain `AccountMapping`; nothing downstream prompts or looks
anything up by name.
"""

from collections.abc import Callable, Sequence
from typing import Protocol, TypeVar

import structlog

from payout_ledger.clients.wave_api import WaveAPIClient
from payout_ledger.models import AccountMapping, Business, SalesTaxAccount

logger = structlog.get_logger(__name__)


class SelectionError(Exception):
    """No usable match for a requested business, account or sales tax."""


class _Named(Protocol):
    id: str
    name: str


T = TypeVar("T", bound=_Named)


def find_by_name(items: Sequence[T], name: str, kind: str) -> T:
    """Return the first item with exactly this name."""
    for item in items:
        if item.name == name:
            return item
    raise SelectionError(f"No {kind} named {name!r}")


def find_by_id(items: Sequence[T], item_id: str, kind: str) -> T:
    """Return the item with this id."""
    for item in items:
        if item.id == item_id:
            return item
    raise SelectionError(f"No {kind} with id {item_id!r}")


class Chooser:
    """Picks one option by name, from a preset or by prompting.

    Presets are keyed by role (``"anchor"``, ``"business"``, ...). Roles
    without a preset are asked on the terminal; the answer may be the option
    number or its exact name.
    """

    def __init__(
        self,
        presets: dict[str, str | None] | None = None,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ):
        self._presets = {k: v for k, v in (presets or {}).items() if v}
        self._input = input_func
        self._output = output_func

    def choose(self, role: str, question: str, options: Sequence[str]) -> str:
        if not options:
            raise SelectionError(f"Nothing to choose from for {role}")

        preset = self._presets.get(role)
        if preset is not None:
            if preset not in options:
                raise SelectionError(f"{preset!r} is not a valid choice for {role}")
            return preset

        self._output(question)
        for index, option in enumerate(options, start=1):
            self._output(f"  [{index}] {option}")
        while True:
            answer = self._input("> ").strip()
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return options[int(answer) - 1]
            if answer in options:
                return answer
            self._output(f"Value {answer!r} is invalid.")


async def select_business(wave: WaveAPIClient, chooser: Chooser) -> Business:
    """Pick the Wave business to import into."""
    businesses = await wave.list_businesses()
    name = chooser.choose("business", "Select a Business", [b.name for b in businesses])
    business = find_by_name(businesses, name, "business")
    logger.info("business_selected", business_id=business.id, name=business.name)
    return business


ACCOUNT_ROLES = (
    ("anchor", "Which account should be used as the anchor?"),
    ("stripe_fee", "Which account should be used for Stripe fees?"),
    ("ticket_sales", "Which account should be used for ticket sales income?"),
    ("sponsorship", "Which account should be used for sponsorship income?"),
)


async def select_account_mapping(
    wave: WaveAPIClient,
    business_id: str,
    chooser: Chooser,
    sales_tax_id: str | None = None,
) -> AccountMapping:
    """Build the account mapping for a business.

    Args:
        wave: Ledger client.
        business_id: Business whose accounts and taxes are used.
        chooser: Source of the operator's choices.
        sales_tax_id: Fixed sales tax; skips the sales tax question.

    Raises:
        SelectionError: A choice does not match anything in the business.
        WaveAPIError: Listing accounts or taxes failed.
    """
    taxes = await wave.list_sales_taxes(business_id)
    if sales_tax_id:
        tax = find_by_id(taxes, sales_tax_id, "sales tax")
    else:
        name = chooser.choose(
            "sales_tax", "Which account should be used for sales tax?", [t.name for t in taxes]
        )
        tax = find_by_name(taxes, name, "sales tax")
    logger.info("sales_tax_selected", sales_tax_id=tax.id, name=tax.name, rate=str(tax.rate))

    accounts = [a for a in await wave.list_accounts(business_id) if not a.is_archived]
    names = [a.name for a in accounts]
    chosen: dict[str, str] = {}
    for role, question in ACCOUNT_ROLES:
        account = find_by_name(accounts, chooser.choose(role, question, names), "account")
        logger.info("account_selected", role=role, account_id=account.id, name=account.name)
        chosen[role] = account.id

    return AccountMapping(
        anchor=chosen["anchor"],
        stripe_fee=chosen["stripe_fee"],
        ticket_sales=chosen["ticket_sales"],
        sponsorship=chosen["sponsorship"],
        sales_tax=SalesTaxAccount(id=tax.id, rate=tax.rate),
    )

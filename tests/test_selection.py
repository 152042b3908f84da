"""Tests for choosing the business and account mapping."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from payout_ledger.models import Business, LedgerAccount, SalesTax, SalesTaxAccount
from payout_ledger.selection import (
    Chooser,
    SelectionError,
    find_by_id,
    find_by_name,
    select_account_mapping,
    select_business,
)


def scripted_chooser(answers, presets=None):
    """Chooser answering prompts from a list, collecting output."""
    replies = iter(answers)
    output: list[str] = []
    chooser = Chooser(presets=presets, input_func=lambda _: next(replies), output_func=output.append)
    return chooser, output


@pytest.fixture
def wave():
    """Mock Wave client with one business, four live accounts and two taxes."""
    client = MagicMock()
    client.list_businesses = AsyncMock(
        return_value=[Business(id="biz-1", name="DevConf"), Business(id="biz-2", name="Personal")]
    )
    client.list_accounts = AsyncMock(
        return_value=[
            LedgerAccount(id="acct-anchor", name="Stripe Balance"),
            LedgerAccount(id="acct-fees", name="Merchant Fees"),
            LedgerAccount(id="acct-tickets", name="Ticket Sales"),
            LedgerAccount(id="acct-sponsorship", name="Sponsorships"),
            LedgerAccount(id="acct-old", name="Old Income", is_archived=True),
        ]
    )
    client.list_sales_taxes = AsyncMock(
        return_value=[
            SalesTax(id="tax-1", name="TX Sales Tax", rate=Decimal("0.0825")),
            SalesTax(id="tax-2", name="Exempt", rate=Decimal("0")),
        ]
    )
    return client


class TestLookups:
    """Tests for find_by_name / find_by_id."""

    def test_find_by_name(self):
        items = [Business(id="1", name="A"), Business(id="2", name="B")]

        assert find_by_name(items, "B", "business").id == "2"

    def test_find_by_name_missing(self):
        with pytest.raises(SelectionError, match="No business named 'C'"):
            find_by_name([Business(id="1", name="A")], "C", "business")

    def test_find_by_id_missing(self):
        with pytest.raises(SelectionError, match="No sales tax with id 'tax-9'"):
            find_by_id([SalesTax(id="tax-1", name="T", rate=Decimal("0"))], "tax-9", "sales tax")


class TestChooser:
    """Tests for Chooser."""

    def test_preset_skips_prompt(self):
        chooser, output = scripted_chooser([], presets={"anchor": "Cash"})

        assert chooser.choose("anchor", "Which?", ["Bank", "Cash"]) == "Cash"
        assert output == []

    def test_invalid_preset_raises(self):
        chooser, _ = scripted_chooser([], presets={"anchor": "Savings"})

        with pytest.raises(SelectionError):
            chooser.choose("anchor", "Which?", ["Bank", "Cash"])

    def test_prompt_by_number(self):
        chooser, output = scripted_chooser(["2"])

        assert chooser.choose("anchor", "Which?", ["Bank", "Cash"]) == "Cash"
        assert output[:3] == ["Which?", "  [1] Bank", "  [2] Cash"]

    def test_prompt_by_name_after_invalid_answer(self):
        chooser, output = scripted_chooser(["7", "Bank"])

        assert chooser.choose("anchor", "Which?", ["Bank", "Cash"]) == "Bank"
        assert "Value '7' is invalid." in output

    def test_empty_options_raise(self):
        chooser, _ = scripted_chooser([])

        with pytest.raises(SelectionError):
            chooser.choose("sales_tax", "Which?", [])


class TestSelectBusiness:
    """Tests for select_business."""

    @pytest.mark.asyncio
    async def test_select_business(self, wave):
        chooser, _ = scripted_chooser([], presets={"business": "DevConf"})

        business = await select_business(wave, chooser)

        assert business.id == "biz-1"


class TestSelectAccountMapping:
    """Tests for select_account_mapping."""

    @pytest.mark.asyncio
    async def test_interactive_mapping(self, wave):
        # sales tax, anchor, fees, tickets, sponsorship
        chooser, output = scripted_chooser(["1", "1", "2", "3", "4"])

        mapping = await select_account_mapping(wave, "biz-1", chooser)

        assert mapping.anchor == "acct-anchor"
        assert mapping.stripe_fee == "acct-fees"
        assert mapping.ticket_sales == "acct-tickets"
        assert mapping.sponsorship == "acct-sponsorship"
        assert mapping.sales_tax == SalesTaxAccount(id="tax-1", rate=Decimal("0.0825"))
        assert "  [5] Old Income" not in output

    @pytest.mark.asyncio
    async def test_fixed_sales_tax_id(self, wave):
        """A configured sales tax id is not asked for."""
        chooser, _ = scripted_chooser(
            [],
            presets={
                "anchor": "Stripe Balance",
                "stripe_fee": "Merchant Fees",
                "ticket_sales": "Ticket Sales",
                "sponsorship": "Sponsorships",
            },
        )

        mapping = await select_account_mapping(wave, "biz-1", chooser, sales_tax_id="tax-2")

        assert mapping.sales_tax == SalesTaxAccount(id="tax-2", rate=Decimal("0"))

    @pytest.mark.asyncio
    async def test_unknown_sales_tax_id_aborts(self, wave):
        chooser, _ = scripted_chooser([])

        with pytest.raises(SelectionError):
            await select_account_mapping(wave, "biz-1", chooser, sales_tax_id="tax-9")

        wave.list_accounts.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_archived_account_cannot_be_preset(self, wave):
        chooser, _ = scripted_chooser([], presets={"sales_tax": "Exempt", "anchor": "Old Income"})

        with pytest.raises(SelectionError):
            await select_account_mapping(wave, "biz-1", chooser)

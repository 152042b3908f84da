"""Pytest configuration and fixtures."""

import os
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_123")
os.environ.setdefault("WAVE_FULL_ACCESS_TOKEN", "wave-token-123")

from payout_ledger.models import AccountMapping, SalesTaxAccount  # noqa: E402


@pytest.fixture
def make_response():
    """Factory for mock httpx responses returning a JSON payload."""

    def _make(payload, status_code=200):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = payload
        response.content = b"content"
        response.text = str(payload)
        return response

    return _make


@pytest.fixture
def mapping():
    """Account mapping with an 8.25% sales tax."""
    return AccountMapping(
        anchor="acct-anchor",
        stripe_fee="acct-fees",
        ticket_sales="acct-tickets",
        sponsorship="acct-sponsorship",
        sales_tax=SalesTaxAccount(id="tax-1", rate=Decimal("0.0825")),
    )


@pytest.fixture
def mock_http():
    """Mock httpx AsyncClient."""
    client = AsyncMock()
    client.get = AsyncMock()
    client.post = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def stripe_payout():
    """Stripe payout object."""
    return {
        "id": "po_123",
        "object": "payout",
        "amount": 5000,
        "arrival_date": 1704067200,  # 2024-01-01 UTC
        "description": "STRIPE PAYOUT",
        "type": "bank_account",
    }


@pytest.fixture
def stripe_balance_transactions():
    """Balance transactions for `po_123`, including the payout itself."""
    return [
        {
            "id": "txn_1",
            "amount": 3000,
            "fee": 100,
            "description": "Ticket",
            "type": "charge",
        },
        {
            "id": "txn_2",
            "amount": 2000,
            "fee": 50,
            "description": "Sponsorship pkg",
            "type": "charge",
        },
        {
            "id": "txn_3",
            "amount": -4850,
            "fee": 0,
            "description": "STRIPE PAYOUT",
            "type": "payout",
        },
    ]


@pytest.fixture
def wave_businesses_page():
    """Single page of Wave businesses."""
    return {
        "data": {
            "businesses": {
                "pageInfo": {"currentPage": 1, "totalPages": 1, "totalCount": 2},
                "edges": [
                    {
                        "node": {
                            "id": "biz-1",
                            "name": "DevConf",
                            "isClassicAccounting": False,
                            "isClassicInvoicing": True,
                            "isPersonal": False,
                        }
                    },
                    {
                        "node": {
                            "id": "biz-2",
                            "name": "Personal",
                            "isClassicAccounting": False,
                            "isClassicInvoicing": False,
                            "isPersonal": True,
                        }
                    },
                ],
            }
        }
    }


def account_node(account_id, name, type_name="Income", archived=False):
    return {
        "id": account_id,
        "name": name,
        "description": None,
        "displayId": None,
        "type": {"name": type_name, "value": type_name.upper()},
        "subtype": {"name": type_name, "value": type_name.upper()},
        "normalBalanceType": "CREDIT" if type_name == "Income" else "DEBIT",
        "isArchived": archived,
    }


@pytest.fixture
def wave_accounts_page():
    """Single page of Wave accounts."""
    return {
        "data": {
            "business": {
                "id": "biz-1",
                "accounts": {
                    "pageInfo": {"currentPage": 1, "totalPages": 1, "totalCount": 5},
                    "edges": [
                        {"node": account_node("acct-anchor", "Stripe Balance", "Assets")},
                        {"node": account_node("acct-fees", "Merchant Fees", "Expenses")},
                        {"node": account_node("acct-tickets", "Ticket Sales")},
                        {"node": account_node("acct-sponsorship", "Sponsorships")},
                        {"node": account_node("acct-old", "Old Income", archived=True)},
                    ],
                },
            }
        }
    }


@pytest.fixture
def wave_sales_taxes_page():
    """Single page of Wave sales taxes."""
    return {
        "data": {
            "business": {
                "id": "biz-1",
                "salesTaxes": {
                    "pageInfo": {"currentPage": 1, "totalPages": 1, "totalCount": 2},
                    "edges": [
                        {"node": {"id": "tax-1", "name": "TX Sales Tax", "abbreviation": "TX", "rate": "0.0825"}},
                        {"node": {"id": "tax-2", "name": "Exempt", "abbreviation": "EX", "rate": "0"}},
                    ],
                },
            }
        }
    }

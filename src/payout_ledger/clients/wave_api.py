"""Wave GraphQL client for businesses, accounts, sales taxes and money transactions."""

from dataclasses import dataclass, field
from typing import Any, cast

import httpx
import structlog

from payout_ledger.config import get_settings
from payout_ledger.models import Business, LedgerAccount, LedgerEntryPayload, SalesTax

logger = structlog.get_logger(__name__)

BUSINESSES_PAGE_SIZE = 100
ACCOUNTS_PAGE_SIZE = 500
SALES_TAXES_PAGE_SIZE = 100

LIST_BUSINESSES_QUERY = """
query ($page: Int!, $pageSize: Int!) {
    businesses(page: $page, pageSize: $pageSize) {
        pageInfo { currentPage totalPages totalCount }
        edges {
            node {
                id
                name
                isClassicAccounting
                isClassicInvoicing
                isPersonal
            }
        }
    }
}
"""

LIST_ACCOUNTS_QUERY = """
query ($businessId: ID!, $page: Int!, $pageSize: Int!) {
    business(id: $businessId) {
        id
        accounts(page: $page, pageSize: $pageSize) {
            pageInfo { currentPage totalPages totalCount }
            edges {
                node {
                    id
                    name
                    description
                    displayId
                    type { name value }
                    subtype { name value }
                    normalBalanceType
                    isArchived
                }
            }
        }
    }
}
"""

LIST_SALES_TAXES_QUERY = """
query ($businessId: ID!, $page: Int!, $pageSize: Int!) {
    business(id: $businessId) {
        id
        salesTaxes(page: $page, pageSize: $pageSize) {
            pageInfo { currentPage totalPages totalCount }
            edges {
                node {
                    id
                    name
                    abbreviation
                    rate
                }
            }
        }
    }
}
"""

CREATE_TRANSACTION_MUTATION = """
mutation ($input: MoneyTransactionCreateInput!) {
    moneyTransactionCreate(input: $input) {
        didSucceed
        inputErrors { code message path }
        transaction { id }
    }
}
"""


class WaveAPIError(Exception):
    """Wave request failed or the response carried GraphQL errors."""

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.errors = errors or []
        self.status_code = status_code


@dataclass
class TransactionResult:
    """Outcome of a `moneyTransactionCreate` call."""

    did_succeed: bool
    transaction_id: str | None = None
    message: str | None = None
    input_errors: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def failed(cls, message: str, errors: list[dict[str, Any]] | None = None) -> "TransactionResult":
        return cls(did_succeed=False, message=message, input_errors=errors or [])


class WaveAPIClient:
    """Async client for the Wave public GraphQL API."""

    def __init__(
        self,
        endpoint: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        self.endpoint = endpoint or settings.wave_graphql_endpoint
        self._access_token = (
            access_token or settings.wave_full_access_token.get_secret_value()
        )
        self._timeout = timeout if timeout is not None else settings.http_timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "WaveAPIClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _get_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._access_token}",
        }

    async def query(
        self, query: str, variables: dict[str, Any] | None = None, error_message: str = "Request failed"
    ) -> dict[str, Any]:
        """Run a GraphQL operation and return its `data` object.

        Raises:
            WaveAPIError: On transport failure, HTTP error or GraphQL errors.
        """
        client = await self._get_client()
        try:
            response = await client.post(
                self.endpoint,
                json={"query": query, "variables": variables or {}},
                headers=self._get_headers(),
            )
        except httpx.RequestError as e:
            raise WaveAPIError(f"{error_message}: {e}") from e

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            raise WaveAPIError(error_message, errors=errors, status_code=response.status_code)
        if response.status_code >= 400:
            raise WaveAPIError(
                f"{error_message}: HTTP {response.status_code}",
                errors=[{"message": response.text[:500] if response.text else "empty response"}],
                status_code=response.status_code,
            )

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise WaveAPIError(f"{error_message}: invalid response format")
        return cast(dict[str, Any], data)

    async def _paged_nodes(
        self,
        query: str,
        variables: dict[str, Any],
        path: tuple[str, ...],
        page_size: int,
        error_message: str,
    ) -> list[dict[str, Any]]:
        """Collect edge nodes across `pageInfo.totalPages` pages."""
        nodes: list[dict[str, Any]] = []
        page = 1
        while True:
            data = await self.query(
                query, {**variables, "page": page, "pageSize": page_size}, error_message
            )
            connection: Any = data
            for key in path:
                connection = (connection or {}).get(key)
            if not connection:
                raise WaveAPIError(f"{error_message}: {'.'.join(path)} missing from response")
            nodes.extend(edge["node"] for edge in connection.get("edges") or [])
            total_pages = (connection.get("pageInfo") or {}).get("totalPages") or 1
            if page >= total_pages:
                return nodes
            page += 1

    async def list_businesses(self) -> list[Business]:
        """List businesses the token can access."""
        nodes = await self._paged_nodes(
            LIST_BUSINESSES_QUERY,
            {},
            ("businesses",),
            BUSINESSES_PAGE_SIZE,
            "Error fetching businesses",
        )
        return [Business.from_node(node) for node in nodes]

    async def list_accounts(self, business_id: str) -> list[LedgerAccount]:
        """List the chart of accounts for a business."""
        nodes = await self._paged_nodes(
            LIST_ACCOUNTS_QUERY,
            {"businessId": business_id},
            ("business", "accounts"),
            ACCOUNTS_PAGE_SIZE,
            "Error fetching accounts",
        )
        return [LedgerAccount.from_node(node) for node in nodes]

    async def list_sales_taxes(self, business_id: str) -> list[SalesTax]:
        """List sales taxes configured on a business."""
        nodes = await self._paged_nodes(
            LIST_SALES_TAXES_QUERY,
            {"businessId": business_id},
            ("business", "salesTaxes"),
            SALES_TAXES_PAGE_SIZE,
            "Error fetching sales taxes",
        )
        return [SalesTax.from_node(node) for node in nodes]

    async def create_transaction(self, payload: LedgerEntryPayload) -> TransactionResult:
        """Create a money transaction.

        Never raises for API failures; they come back as a failed result.
        """
        try:
            data = await self.query(
                CREATE_TRANSACTION_MUTATION,
                {"input": payload.to_input()},
                "Error creating transaction",
            )
        except WaveAPIError as e:
            return TransactionResult.failed(str(e), e.errors)

        outcome = data.get("moneyTransactionCreate") or {}
        if not outcome.get("didSucceed"):
            return TransactionResult.failed(
                "Transaction rejected", outcome.get("inputErrors") or []
            )

        transaction_id = (outcome.get("transaction") or {}).get("id")
        logger.info(
            "transaction_created",
            external_id=payload.external_id,
            transaction_id=transaction_id,
        )
        return TransactionResult(did_succeed=True, transaction_id=transaction_id)

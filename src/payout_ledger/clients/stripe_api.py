"""Stripe REST client for payouts and their balance transactions."""

from datetime import UTC, date, datetime, time
from typing import Any, cast

import httpx
import structlog

from payout_ledger.config import get_settings
from payout_ledger.models import Payout, Transaction

logger = structlog.get_logger(__name__)

PAGE_SIZE = 100

# Balance transactions of these types are the payout itself, not revenue
EXCLUDED_TRANSACTION_TYPES = frozenset({"payout"})


class StripeAPIError(Exception):
    """Stripe request failed or returned an error."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


def day_start_timestamp(day: date) -> int:
    """Epoch seconds for midnight UTC at the start of `day`."""
    return int(datetime.combine(day, time.min, tzinfo=UTC).timestamp())


class StripeAPIClient:
    """Async read-only client for the Stripe API."""

    def __init__(
        self,
        secret_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.stripe_api_url).rstrip("/")
        self._secret_key = secret_key or settings.stripe_secret_key.get_secret_value()
        self._timeout = timeout if timeout is not None else settings.http_timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self._timeout),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "StripeAPIClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _get_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._secret_key}"}

    async def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Make an authenticated GET request."""
        client = await self._get_client()
        try:
            response = await client.get(path, params=params, headers=self._get_headers())
        except httpx.RequestError as e:
            raise StripeAPIError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            try:
                error_detail = response.json() if response.content else {}
            except ValueError:
                error_detail = {"raw": response.text[:500] if response.text else "empty response"}
            message = (
                error_detail.get("error", {}).get("message")
                if isinstance(error_detail, dict)
                else None
            )
            raise StripeAPIError(
                message or f"API error: {response.status_code}",
                status_code=response.status_code,
                details=error_detail,
            )

        data_raw = response.json()
        if not isinstance(data_raw, dict):
            raise StripeAPIError("Invalid response format")
        return cast(dict[str, Any], data_raw)

    async def _list_all(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Follow Stripe's cursor pagination until `has_more` is false."""
        items: list[dict[str, Any]] = []
        page_params = {**params, "limit": PAGE_SIZE}
        while True:
            page = await self.get(path, params=page_params)
            data = page.get("data") or []
            items.extend(data)
            if not page.get("has_more") or not data:
                return items
            page_params = {**page_params, "starting_after": data[-1]["id"]}

    async def list_payouts(self, since: date | None = None) -> list[Payout]:
        """List payouts, newest first, optionally arriving on or after `since`."""
        params: dict[str, Any] = {}
        if since is not None:
            params["arrival_date[gte]"] = day_start_timestamp(since)
        raw = await self._list_all("/v1/payouts", params)
        logger.info("payouts_listed", count=len(raw), since=str(since) if since else None)
        return [Payout.from_api(item) for item in raw]

    async def get_transactions_for_payout(self, payout_id: str) -> list[Transaction]:
        """List the balance transactions settled by a payout."""
        raw = await self._list_all("/v1/balance_transactions", {"payout": payout_id})
        transactions = [
            Transaction.from_api(item)
            for item in raw
            if item.get("type") not in EXCLUDED_TRANSACTION_TYPES
        ]
        logger.debug(
            "payout_transactions_listed",
            payout_id=payout_id,
            count=len(transactions),
            skipped=len(raw) - len(transactions),
        )
        return transactions

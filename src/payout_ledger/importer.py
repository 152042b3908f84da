"""Sequential payout import: fetch, build, then print or submit each entry."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import structlog

from payout_ledger.clients.stripe_api import StripeAPIClient
from payout_ledger.clients.wave_api import TransactionResult, WaveAPIClient
from payout_ledger.entries import build_entry
from payout_ledger.models import AccountMapping, LedgerEntryPayload, Payout

logger = structlog.get_logger(__name__)


@dataclass
class SubmissionFailure:
    """A payout whose money transaction Wave did not create."""

    payout_id: str
    external_id: str
    message: str | None
    input_errors: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class ImportSummary:
    """Totals for one import run."""

    live: bool
    processed: int = 0
    submitted: int = 0
    unbalanced: int = 0
    failures: list[SubmissionFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures


class PayoutImporter:
    """Imports each payout as one Wave money transaction.

    Payouts are processed one at a time in the order Stripe returns them. A
    rejected submission is recorded and the run moves on to the next payout.
    """

    def __init__(
        self,
        stripe: StripeAPIClient,
        wave: WaveAPIClient,
        mapping: AccountMapping,
        business_id: str,
        external_id_prefix: str = "",
        output_func: Callable[[str], None] = print,
    ):
        self._stripe = stripe
        self._wave = wave
        self._mapping = mapping
        self._business_id = business_id
        self._prefix = external_id_prefix
        self._output = output_func

    async def build_payout_entry(self, payout: Payout) -> LedgerEntryPayload:
        """Fetch a payout's transactions and build its entry."""
        transactions = await self._stripe.get_transactions_for_payout(payout.id)
        return build_entry(
            payout,
            transactions,
            self._mapping,
            business_id=self._business_id,
            external_id_prefix=self._prefix,
        )

    async def run(self, since: date | None = None, live: bool = False) -> ImportSummary:
        """Import every payout arriving on or after `since`.

        In a dry run payloads are printed and Wave is never contacted.
        """
        summary = ImportSummary(live=live)
        payouts = await self._stripe.list_payouts(since)
        logger.info("import_started", payouts=len(payouts), live=live)

        for payout in payouts:
            log = logger.bind(payout_id=payout.id)
            entry = await self.build_payout_entry(payout)
            summary.processed += 1

            if not entry.is_balanced:
                summary.unbalanced += 1
                log.warning("entry_unbalanced", imbalance=str(entry.imbalance()))

            if not live:
                self._output(f"Dry run: not importing payout {payout.id}")
                self._output(entry.to_json())
                continue

            result = await self._wave.create_transaction(entry)
            if result.did_succeed:
                summary.submitted += 1
            else:
                self._record_failure(summary, payout.id, entry, result)

        logger.info(
            "import_finished",
            live=live,
            processed=summary.processed,
            submitted=summary.submitted,
            failed=summary.failed,
        )
        return summary

    def _record_failure(
        self,
        summary: ImportSummary,
        payout_id: str,
        entry: LedgerEntryPayload,
        result: TransactionResult,
    ) -> None:
        logger.error(
            "transaction_create_failed",
            payout_id=payout_id,
            external_id=entry.external_id,
            message=result.message,
            input_errors=result.input_errors,
        )
        summary.failures.append(
            SubmissionFailure(
                payout_id=payout_id,
                external_id=entry.external_id,
                message=result.message,
                input_errors=result.input_errors,
            )
        )

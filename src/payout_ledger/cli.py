"""Command line entry point.

Usage:
    payout-ledger list-businesses
    payout-ledger list-accounts [--business NAME]
    payout-ledger import [--live-run] [--date YYYY-MM-DD] [account flags]
"""

import argparse
import asyncio
import sys
from collections.abc import Sequence
from datetime import date

import structlog

from payout_ledger.clients import StripeAPIClient, StripeAPIError, WaveAPIClient, WaveAPIError
from payout_ledger.config import configure_logging, get_settings
from payout_ledger.importer import PayoutImporter
from payout_ledger.selection import Chooser, SelectionError, select_account_mapping, select_business

logger = structlog.get_logger(__name__)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payout-ledger",
        description="Import Stripe payouts into Wave",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s list-businesses
  %(prog)s list-accounts --business "My Conference"
  %(prog)s import --date 2024-01-01          # dry run, prints payloads
  %(prog)s import --live-run                 # submit to Wave
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-businesses", help="List all businesses")

    list_accounts = subparsers.add_parser("list-accounts", help="List all accounts in a business")
    list_accounts.add_argument("--business", help="Business name (prompted if omitted)")

    run_import = subparsers.add_parser("import", help="Run or test an import of data from Stripe")
    run_import.add_argument(
        "--live-run",
        action="store_true",
        help="Submit transactions to Wave (defaults to a dry run)",
    )
    run_import.add_argument(
        "--date",
        type=_parse_date,
        help="The first date to pull payouts from (YYYY-MM-DD, UTC)",
    )
    run_import.add_argument("--business", help="Business name")
    run_import.add_argument("--anchor-account", help="Account the payout lands in")
    run_import.add_argument("--fee-account", help="Account for Stripe fees")
    run_import.add_argument("--sales-account", help="Account for ticket sales income")
    run_import.add_argument("--sponsorship-account", help="Account for sponsorship income")
    run_import.add_argument("--sales-tax", help="Sales tax name (ignored if SALES_TAX_ID is set)")
    return parser


def _print_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]
    line = "  ".join("{:<%d}" % w for w in widths)
    print(line.format(*headers))
    print(line.format(*("-" * w for w in widths)))
    for row in rows:
        print(line.format(*row))


async def list_businesses(wave: WaveAPIClient) -> int:
    businesses = await wave.list_businesses()
    _print_table(
        ["id", "name", "isClassicAccounting", "isClassicInvoicing", "isPersonal"],
        [
            [
                b.id,
                b.name,
                "1" if b.is_classic_accounting else "0",
                "1" if b.is_classic_invoicing else "0",
                "1" if b.is_personal else "0",
            ]
            for b in businesses
        ],
    )
    return 0


async def list_accounts(wave: WaveAPIClient, chooser: Chooser) -> int:
    business = await select_business(wave, chooser)
    accounts = await wave.list_accounts(business.id)
    _print_table(
        ["Id", "Name", "Type", "Subtype", "Normal Balance Type"],
        [[a.id, a.name, a.type, a.subtype, a.normal_balance_type] for a in accounts],
    )
    return 0


async def run_import(args: argparse.Namespace, wave: WaveAPIClient, chooser: Chooser) -> int:
    settings = get_settings()
    business = await select_business(wave, chooser)
    mapping = await select_account_mapping(
        wave, business.id, chooser, sales_tax_id=settings.sales_tax_id
    )

    async with StripeAPIClient() as stripe:
        importer = PayoutImporter(
            stripe,
            wave,
            mapping,
            business_id=business.id,
            external_id_prefix=settings.wave_prefix,
        )
        summary = await importer.run(since=args.date, live=args.live_run)

    for failure in summary.failures:
        print(f"Failed to import payout {failure.payout_id}: {failure.message}")
        for error in failure.input_errors:
            print(f"  - {error.get('path')}: {error.get('message')}")
    return 0 if summary.ok else 1


async def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, run the command and return an exit status."""
    args = build_parser().parse_args(argv)
    configure_logging()

    chooser = Chooser(
        presets={
            "business": getattr(args, "business", None),
            "anchor": getattr(args, "anchor_account", None),
            "stripe_fee": getattr(args, "fee_account", None),
            "ticket_sales": getattr(args, "sales_account", None),
            "sponsorship": getattr(args, "sponsorship_account", None),
            "sales_tax": getattr(args, "sales_tax", None),
        }
    )

    try:
        async with WaveAPIClient() as wave:
            if args.command == "list-businesses":
                return await list_businesses(wave)
            if args.command == "list-accounts":
                return await list_accounts(wave, chooser)
            return await run_import(args, wave, chooser)
    except SelectionError as e:
        logger.error("selection_failed", error=str(e))
    except WaveAPIError as e:
        logger.error("wave_api_error", error=str(e), errors=e.errors)
    except StripeAPIError as e:
        logger.error("stripe_api_error", error=str(e), status_code=e.status_code, details=e.details)
    except KeyboardInterrupt:
        logger.info("import_interrupted")
    return 1


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()

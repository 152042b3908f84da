from payout_ledger.cli import run

run()

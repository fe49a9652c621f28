"""Credit ledger domain: balances, atomic debit/credit, and the history log.

Use Inject(CreditLedgerProtocol) in FastAPI endpoints for the singleton ledger.
Debits publish CreditsDebitedEvent; applied settlements publish CreditsSettledEvent.
"""

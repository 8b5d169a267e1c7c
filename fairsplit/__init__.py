"""FairSplit: group expense ledger service."""

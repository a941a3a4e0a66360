"""HTTP API for the request ledger."""

"""HTTP transport for the endorsement ledger."""
